"""
Text utilities for the SMTP bridge.

This package contains pure functions for extracting subject and body from
captured mail data and for formatting Telegram notifications.
"""

__all__ = ['extractor', 'formatting']
