"""Helpers for string-encoded setting values and presentation names."""

TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})


def normalize_boolean(value: str | bool | int | None) -> str:
    """Return the canonical ``"1"``/``"0"`` wire form of a boolean setting.

    Reads accept ``"1"/"0"`` and ``"true"/"false"`` (case-insensitive); any
    other non-empty string counts as true so a stray value never silently
    disables a section.

    Args:
        value: Raw value as stored, submitted, or toggled

    Returns:
        ``"1"`` or ``"0"``
    """
    if isinstance(value, bool):
        return "1" if value else "0"
    if value is None:
        return "0"
    text = str(value).strip().lower()
    if text in FALSE_VALUES:
        return "0"
    return "1"


def is_enabled(value: str | None) -> bool:
    """Check whether a boolean setting value is switched on."""
    return normalize_boolean(value) == "1"


def display_name(name: str) -> str:
    """Title-case a stored category name for presentation.

    Stored names are always lowercase; this transform is never persisted.

    >>> display_name("limited editions")
    'Limited Editions'
    """
    return " ".join(part.capitalize() for part in name.split(" "))


def humanize_key(key: str) -> str:
    """Turn a setting key into a form label (``show_stats`` -> ``Show Stats``)."""
    return " ".join(part.capitalize() for part in key.split("_") if part)
