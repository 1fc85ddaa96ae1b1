"""Key naming convention for repeating setting groups.

A setting belongs to a group when its key has the form
``<kind><index>_<field>``, e.g. ``faq3_question`` or ``card1_title``.  The
server uses this module to allocate and delete group members; the editor
uses it to project flat settings into groups.
"""

from __future__ import annotations

import re
from typing import Literal, NamedTuple

GroupKind = Literal["card", "faq", "feature", "stat", "info"]

GROUP_KINDS: tuple[str, ...] = ("card", "faq", "feature", "stat", "info")

# Keys under these prefixes are section toggles or contact/social details,
# never group members, even if they happen to look like one.
RESERVED_PREFIXES: tuple[str, ...] = ("show_", "studio_", "email_", "phone_", "social_")

# Kinds listed newest-first when projected.  Everything else is listed in
# creation (ascending index) order.
DESCENDING_KINDS: frozenset[str] = frozenset({"faq"})

# Minimal field set created for a new group member: (field, setting type).
GROUP_FIELDS: dict[str, tuple[tuple[str, str], ...]] = {
    "faq": (("question", "text"), ("answer", "plaintext")),
    "card": (("title", "text"), ("description", "plaintext")),
    "feature": (("title", "text"), ("description", "plaintext")),
    "stat": (("label", "text"), ("value", "text")),
    "info": (("text", "text"),),
}

_GROUP_KEY = re.compile(r"(card|faq|feature|stat|info)([0-9]+)_(.+)", re.DOTALL)


class KeyMatch(NamedTuple):
    """A setting key split into its group coordinates."""

    kind: str
    index: int
    field: str


def match_group_key(key: str) -> KeyMatch | None:
    """Split a setting key into ``(kind, index, field)``.

    Args:
        key: Setting key such as ``card3_title``

    Returns:
        The match, or ``None`` for reserved keys, keys without a digit index
        (``cardabc_title``), and index ``0``.
    """
    if not key or key.startswith(RESERVED_PREFIXES):
        return None

    match = _GROUP_KEY.fullmatch(key)
    if match is None:
        return None

    index = int(match.group(2))
    if index < 1:
        return None

    return KeyMatch(match.group(1), index, match.group(3))


def group_key(kind: str, index: int, field: str) -> str:
    """Build the setting key for one field of a group member."""
    return f"{kind}{index}_{field}"


def next_group_index(keys: list[str], kind: str) -> int:
    """Return the index for a new member of ``kind``.

    Indices below the current maximum are never reused: the next one is one
    past the highest index present for the kind, regardless of gaps left by
    deletions.  Removing the highest member frees its index again.
    """
    highest = 0
    for key in keys:
        match = match_group_key(key)
        if match is not None and match.kind == kind:
            highest = max(highest, match.index)
    return highest + 1
