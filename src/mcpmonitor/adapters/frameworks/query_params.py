"""Query parameter parsing for the log query endpoint."""

from mcpmonitor.core.logs import normalize_level

DEFAULT_LOG_LIMIT = 100


def _parse_limit_param(raw: str | None, default: int = DEFAULT_LOG_LIMIT) -> int:
    """Parse and validate the 'limit' query parameter.

    Args:
        raw: Raw parameter value, None when absent.
        default: Value used for missing, non-numeric, or non-positive input.

    Returns:
        A positive entry count.
    """
    if raw is None:
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        return default
    if value <= 0:
        return default
    return value


def _parse_level_param(raw: str | None) -> str | None:
    """Parse the 'level' query parameter.

    Args:
        raw: Raw parameter value, None when absent.

    Returns:
        Normalized level string, or None if missing or blank. Unrecognised
        levels are kept so the filter simply matches nothing.
    """
    if raw is None or not raw.strip():
        return None
    return normalize_level(raw)
