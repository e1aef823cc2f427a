"""
Domain layer for the SMTP to Telegram bridge.

This layer contains:
- Data models (configuration, envelope state, messages, results)
- SMTP session state machine
- Notifier (fire-and-forget delivery)
"""
