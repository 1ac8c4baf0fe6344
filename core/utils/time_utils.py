"""
Time formatting utilities
"""


def format_elapsed(seconds: float) -> str:
    """
    Format elapsed seconds as H:MM:SS.mmm

    Args:
        seconds: Elapsed time in seconds

    Returns:
        Formatted string like "0:00:03.250" or "1:02:05.000"
    """
    if seconds < 0:
        seconds = 0.0

    millis = int(round(seconds * 1000))
    hours, millis = divmod(millis, 3_600_000)
    minutes, millis = divmod(millis, 60_000)
    secs, millis = divmod(millis, 1000)

    return f"{hours}:{minutes:02d}:{secs:02d}.{millis:03d}"
