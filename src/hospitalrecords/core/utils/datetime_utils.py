"""
Date and time utility functions.
"""

from datetime import datetime, timezone


def get_current_timestamp() -> datetime:
    """Get current UTC timestamp."""
    return datetime.now(timezone.utc)
