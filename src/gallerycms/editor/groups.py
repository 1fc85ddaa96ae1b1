"""Repeating groups projected from flat settings.

A section's settings are stored flat.  Keys of the form
``<kind><index>_<field>`` (``faq2_question``, ``card1_title``...) are
projected into :class:`Group` records; everything else stays in the
section's ``other`` list.

Parsing
-------
:func:`parse_section` is pure and never raises.  Malformed or unknown keys
are not errors, they are simply "other" settings:

    >>> parsed = parse_section(settings)
    >>> [(g.kind, g.index) for g in parsed.groups]
    [('faq', 3), ('faq', 1)]

Ordering: kinds appear in the order their first key was seen.  Inside a kind,
cards, features, stats and info items ascend by index (creation order) while
FAQ entries descend (newest first).

Lifecycle
---------
:class:`GroupLifecycle` adds and removes whole group members.  Each call is
its own server round trip, confirmed before the section is reloaded; nothing
is inserted locally ahead of the server.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from gallerycms.core.group_keys import DESCENDING_KINDS, KeyMatch, match_group_key

from .client import CmsClient
from .errors import CmsError
from .models import Setting
from .notifications import Notifier
from .settings import SettingsStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Group:
    """One projected group member, e.g. a single FAQ entry.

    Attributes:
        kind: ``card``, ``faq``, ``feature``, ``stat`` or ``info``
        index: Member index (>= 1); indices may have gaps
        fields: ``field name -> Setting``
    """

    kind: str
    index: int
    fields: Mapping[str, Setting] = field(default_factory=dict, hash=False)

    def value(self, field_name: str, default: str = "") -> str:
        setting = self.fields.get(field_name)
        return setting.value if setting is not None else default

    @property
    def setting_ids(self) -> list[int]:
        return [s.id for s in self.fields.values()]


@dataclass(frozen=True)
class ParsedSection:
    """Result of :func:`parse_section`."""

    groups: tuple[Group, ...] = ()
    other: tuple[Setting, ...] = ()

    def of_kind(self, kind: str) -> list[Group]:
        return [g for g in self.groups if g.kind == kind]

    def find(self, kind: str, index: int) -> Group | None:
        for group in self.groups:
            if group.kind == kind and group.index == index:
                return group
        return None


def classify_key(key: str) -> KeyMatch | None:
    """Classify one setting key; ``None`` means it belongs to "other"."""
    if not isinstance(key, str):
        return None
    return match_group_key(key)


def parse_section(settings: Iterable[Setting]) -> ParsedSection:
    """Partition a section's settings into groups and other settings.

    Every setting lands in exactly one place: one field of one group, or the
    ``other`` list.  A field name repeated for the same member keeps the
    first setting and sends the duplicate to ``other``.
    """
    members: dict[str, dict[int, dict[str, Setting]]] = {}
    other: list[Setting] = []

    for setting in settings:
        match = classify_key(getattr(setting, "key", None))
        if match is None:
            other.append(setting)
            continue

        fields = members.setdefault(match.kind, {}).setdefault(match.index, {})
        if match.field in fields:
            other.append(setting)
        else:
            fields[match.field] = setting

    groups = []
    for kind, by_index in members.items():
        for index in sorted(by_index, reverse=kind in DESCENDING_KINDS):
            groups.append(Group(kind, index, MappingProxyType(by_index[index])))

    return ParsedSection(tuple(groups), tuple(other))


def kind_label(kind: str) -> str:
    return "FAQ" if kind == "faq" else kind.capitalize()


class GroupLifecycle:
    """Add and remove group members of one page.

    Only one add or remove may be in flight at a time; a second request while
    one is pending is refused, and :attr:`busy` lets the surface disable its
    buttons meanwhile.
    """

    def __init__(self, client: CmsClient, store: SettingsStore, notifier: Notifier, tracker=None):
        self.client = client
        self.store = store
        self.notifier = notifier
        self.tracker = tracker
        self._pending = False

    @property
    def busy(self) -> bool:
        return self._pending

    def _refuse_if_busy(self) -> bool:
        if self._pending:
            self.notifier.info("Please wait for the previous change to finish")
            return True
        return False

    async def _refresh_section(self, section: str) -> CmsError | None:
        """Re-fetch a section after a committed change.

        Returns the failure instead of raising it, so the caller can still
        report the change itself as done.
        """
        try:
            await self.store.refresh_section(section)
        except CmsError as e:
            logger.warning(f"Section '{section}' of {self.store.page} not reloaded: {e}")
            return e
        if self.tracker is not None:
            self.tracker.reconcile()
        return None

    async def add_group(self, section: str, kind: str) -> Group | None:
        """Create the next member of ``kind`` in ``section``.

        Returns:
            The created group as reloaded from the server, or ``None`` on
            failure, refusal, or when the section could not be reloaded
        """
        if self._refuse_if_busy():
            return None

        self._pending = True
        try:
            created = await self.client.add_group_member(self.store.page, section, kind)
            stale = await self._refresh_section(section)
        except CmsError as e:
            self.notifier.error(f"Could not add {kind_label(kind)}", e)
            return None
        finally:
            self._pending = False

        index = classify_key(created[0]["key"]).index
        label = f"{kind_label(kind)} {index}"
        if stale is not None:
            self.notifier.info(f"{label} added, but the section could not be reloaded ({stale})")
            return None

        group = parse_section(self.store.section(section)).find(kind, index)
        self.notifier.success(f"{label} added")
        return group

    async def remove_group(self, section: str, kind: str, index: int) -> bool:
        """Delete every setting of one member.  Remaining members keep their indices."""
        if self._refuse_if_busy():
            return False

        self._pending = True
        try:
            removed = await self.client.remove_group_member(self.store.page, section, kind, index)
            stale = await self._refresh_section(section)
        except CmsError as e:
            self.notifier.error(f"Could not remove {kind_label(kind)} {index}", e)
            return False
        finally:
            self._pending = False

        logger.debug(f"Removed {removed} setting(s) for {kind}{index}")
        label = f"{kind_label(kind)} {index}"
        if stale is not None:
            self.notifier.info(f"{label} removed, but the section could not be reloaded ({stale})")
        else:
            self.notifier.success(f"{label} removed")
        return True
