"""Log level spelling shared by the Log Sink and its query surface."""

# Aliases folded into the levels the sink stores
_LEVEL_ALIASES = {"warning": "warn", "fatal": "critical"}


def normalize_level(level: str) -> str:
    """Return the stored spelling of a level name.

    Args:
        level: Level name in any case (e.g., "INFO", "Warning").

    Returns:
        Lowercase level with aliases folded (WARNING -> warn).
    """
    lowered = level.strip().lower()
    return _LEVEL_ALIASES.get(lowered, lowered)
