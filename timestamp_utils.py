#!/usr/bin/env python3
"""
Cookie Bridge - Timestamp Conversion
====================================
Converts the expiry columns of browser cookie stores to UTC datetimes.

Chromium stores microseconds since 1601-01-01 (the Windows epoch).
Firefox stores seconds since the Unix epoch, although some releases wrote
milliseconds into the same column.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional


UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Seconds between 1601-01-01 and 1970-01-01
WINDOWS_EPOCH_OFFSET = 11644473600


def detect_timestamp_type(value: Any) -> str:
    """Detect the unit of a Unix timestamp based on magnitude.

    Args:
        value: Numeric timestamp value.

    Returns:
        'microseconds', 'milliseconds', 'seconds' or 'unknown'.
    """
    if value is None or isinstance(value, bool) or not isinstance(value, (int, float)):
        return 'unknown'

    if value > 1e15:
        return 'microseconds'
    elif value > 1e12:
        return 'milliseconds'
    elif value > 0:
        return 'seconds'
    return 'unknown'


def unix_seconds_to_datetime(seconds: float) -> Optional[datetime]:
    """Build an aware UTC datetime, or None when out of range."""
    try:
        return UNIX_EPOCH + timedelta(seconds=seconds)
    except OverflowError:
        return None


def chromium_time_to_datetime(expires_utc: Any) -> Optional[datetime]:
    """Convert a Chromium ``expires_utc`` value to UTC.

    Args:
        expires_utc: Microseconds since 1601-01-01.

    Returns:
        Aware UTC datetime, or None for session cookies (``<= 0``).
    """
    if not expires_utc or expires_utc <= 0:
        return None

    unix_seconds = int(expires_utc) // 1000000 - WINDOWS_EPOCH_OFFSET
    return unix_seconds_to_datetime(unix_seconds)


def firefox_expiry_to_datetime(expiry: Any) -> Optional[datetime]:
    """Convert a Firefox ``moz_cookies.expiry`` value to UTC.

    Args:
        expiry: Unix seconds (or milliseconds on some releases).

    Returns:
        Aware UTC datetime, or None for session cookies (``<= 0``).
    """
    if not expiry or expiry <= 0:
        return None

    ts_type = detect_timestamp_type(expiry)
    if ts_type == 'microseconds':
        return unix_seconds_to_datetime(expiry / 1000000)
    if ts_type == 'milliseconds':
        return unix_seconds_to_datetime(expiry / 1000)
    return unix_seconds_to_datetime(expiry)


def format_utc(value: Optional[datetime]) -> str:
    """Format a datetime for display, 'Session' when absent."""
    if value is None:
        return "Session"
    return value.astimezone(timezone.utc).strftime('%Y-%m-%dT%H:%M:%SZ')


def get_current_timestamp_utc() -> str:
    """Get current time as ISO-8601 UTC string.

    Returns:
        Current time in format: "2025-12-15T10:30:00Z"
    """
    return datetime.now(timezone.utc).strftime('%Y-%m-%dT%H:%M:%SZ')
