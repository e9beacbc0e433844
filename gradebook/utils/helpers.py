from datetime import datetime, timezone
import re

# Largest value a 32-bit INTEGER column holds
INT_COLUMN_MAX = 2**31 - 1

def get_utc_now() -> datetime:
    """Get current UTC datetime"""
    return datetime.now(timezone.utc)

def as_utc(dt: datetime) -> datetime:
    """
    Return dt as an aware UTC datetime

    Naive values (SQLite drops tzinfo on the way back) are taken to be UTC already.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)

def sanitize_filename(filename: str) -> str:
    """
    Sanitize a filename by removing invalid characters

    Args:
        filename: Original filename

    Returns:
        Sanitized filename
    """
    # Drop any directory part sent by the client
    filename = filename.replace("\\", "/").rsplit("/", 1)[-1]
    # Remove invalid characters
    filename = re.sub(r'[<>:"/\\|?*]', '', filename)
    # Remove control characters
    filename = "".join(char for char in filename if ord(char) >= 32)
    return filename.strip() or "file"
