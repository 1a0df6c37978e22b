"""Display helpers for console output."""


def truncate_text(text: str, max_length: int = 70) -> str:
    """Truncate text to max_length, ending with '...' when shortened.

    Args:
        text: Text to truncate
        max_length: Maximum length of the returned string

    Returns:
        The original text, or a prefix ending in '...'
    """
    if len(text) <= max_length:
        return text
    if max_length <= 3:
        return text[:max_length]
    return text[: max_length - 3] + "..."


def format_size(num_bytes: int) -> str:
    """Human-readable byte count (e.g. '12.3 MB')."""
    size = float(num_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024 or unit == "GB":
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"
