"""Unsaved-edit tracking for a page editing session.

The tracker compares the live settings in a :class:`SettingsStore` against a
baseline snapshot taken at load.  Rich-text values are compared after
:func:`normalize_markup`, because the rich-text surface re-serializes markup
on load with cosmetic differences (attribute order, insignificant
whitespace).  Boolean values are compared in their ``"1"``/``"0"`` form.

Warm-up
-------
For a short window after :meth:`ChangeTracker.capture` the editor's own
initialization output arrives through the normal edit path.  Edits made in
that window are recorded as the values the surface settled on and are not
counted as dirty unless the value later moves away from them again.
``is_dirty()`` is always false during the window.

The baseline is replaced only by a successful :meth:`ChangeTracker.save` or
by :meth:`ChangeTracker.discard`, which reloads from the server.
"""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable
from types import MappingProxyType

from gallerycms.core.config import config
from gallerycms.core.values import normalize_boolean

from .errors import CmsError
from .models import Setting
from .notifications import Notifier
from .settings import SettingsStore

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")
_OPEN_TAG = re.compile(r"<([A-Za-z][\w:.-]*)((?:\s[^<>]*?)?)\s*(/?)>")
_ATTRIBUTE = re.compile(r"""([^\s=/]+)(?:\s*=\s*("[^"]*"|'[^']*'|[^\s"'>]+))?""")
_SPACE_BETWEEN_TAGS = re.compile(r">\s+<")
_SPACE_AFTER_OPEN = re.compile(r"(<[A-Za-z](?:[^<>]*[^/<>])?>)\s+")
_SPACE_BEFORE_CLOSE = re.compile(r"\s+(</[^<>]*>)")


def _sort_attributes(match: re.Match) -> str:
    tag, attributes, self_closing = match.groups()
    pairs = sorted(_ATTRIBUTE.findall(attributes), key=lambda pair: pair[0].lower())
    parts = [tag] + [f"{name}={value}" if value else name for name, value in pairs]
    return "<" + " ".join(parts) + ("/" if self_closing else "") + ">"


def normalize_markup(value: str | None) -> str:
    """Reduce rich-text markup to a canonical form for comparison.

    Collapses whitespace runs and sorts the attributes inside each opening
    tag.  Whitespace between two tags and at the start or end of an element's
    content is dropped; a space between text and a tag is kept, since it
    shows.

    >>> normalize_markup('<p  class="a"   id="b">Hello </p>\\n')
    '<p class="a" id="b">Hello</p>'
    >>> normalize_markup('<p id="b" class="a">Hello</p>')
    '<p class="a" id="b">Hello</p>'
    """
    text = _WHITESPACE.sub(" ", value or "")
    text = _OPEN_TAG.sub(_sort_attributes, text)
    text = _SPACE_BETWEEN_TAGS.sub("><", text)
    text = _SPACE_AFTER_OPEN.sub(r"\1", text)
    text = _SPACE_BEFORE_CLOSE.sub(r"\1", text)
    return text.strip()


def comparable_value(setting_type: str, value: str | None) -> str:
    """Return the form of ``value`` used for dirty comparison."""
    if setting_type == "richtext":
        return normalize_markup(value)
    if setting_type == "boolean":
        return normalize_boolean(value)
    return value or ""


class ChangeTracker:
    """Detect unsaved edits against a baseline snapshot.

    Args:
        store: Live settings of the page being edited
        notifier: Receives the outcome of save and discard
        warmup_seconds: Length of the warm-up window (default from config)
        clock: Monotonic time source, replaceable in tests
    """

    def __init__(
        self,
        store: SettingsStore,
        notifier: Notifier,
        warmup_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.store = store
        self.notifier = notifier
        self.warmup_seconds = (
            config.dirty_warmup_seconds if warmup_seconds is None else warmup_seconds
        )
        self._clock = clock
        self._baseline: MappingProxyType = MappingProxyType({})
        self._settled: dict[int, str] = {}
        self._captured_at: float | None = None

    @property
    def baseline(self) -> MappingProxyType:
        """Read-only ``setting id -> value`` snapshot."""
        return self._baseline

    def capture(self) -> None:
        """Take the baseline from the store and start the warm-up window."""
        self._baseline = MappingProxyType(self.store.values())
        self._settled = {}
        self._captured_at = self._clock()

    @property
    def warming_up(self) -> bool:
        if self._captured_at is None:
            return False
        return self._clock() - self._captured_at < self.warmup_seconds

    def record_edit(self, setting_id: int, value: str | bool) -> Setting:
        """Apply an edit from the editing surface."""
        setting = self.store.set_value(setting_id, value)
        if self.warming_up:
            self._settled[setting_id] = setting.value
        return setting

    def _is_changed(self, setting: Setting) -> bool:
        if setting.id not in self._baseline:
            return False
        live = comparable_value(setting.type, setting.value)
        if live == comparable_value(setting.type, self._baseline[setting.id]):
            return False
        settled = self._settled.get(setting.id)
        return settled is None or live != comparable_value(setting.type, settled)

    def dirty_settings(self) -> list[Setting]:
        """Return the live settings that differ from the baseline."""
        if self.warming_up:
            return []
        return [s for s in self.store.all() if self._is_changed(s)]

    def is_dirty(self) -> bool:
        return bool(self.dirty_settings())

    @property
    def can_save(self) -> bool:
        return self.is_dirty()

    def allow_navigation(self, confirm: Callable[[], bool]) -> bool:
        """Decide whether the user may leave the page.

        ``confirm`` is only asked when there are unsaved edits.
        """
        if not self.is_dirty():
            return True
        return bool(confirm())

    def reconcile(self) -> None:
        """Follow settings created or deleted on the server.

        New settings enter the baseline at their current value; deleted ones
        leave it.  Edits to surviving settings are left alone.
        """
        live = self.store.values()
        baseline = {sid: value for sid, value in self._baseline.items() if sid in live}
        for setting_id, value in live.items():
            baseline.setdefault(setting_id, value)
        self._baseline = MappingProxyType(baseline)
        self._settled = {sid: v for sid, v in self._settled.items() if sid in live}

    async def save(self) -> bool:
        """Send every live setting in one atomic batch.

        On success the baseline becomes the saved values.  On failure the
        edits stay in place and remain dirty.
        """
        if not self.is_dirty():
            self.notifier.info("No changes to save")
            return False

        try:
            saved = await self.store.save_all()
        except CmsError as e:
            self.notifier.error("Could not save changes", e)
            return False

        baseline = dict(self._baseline)
        baseline.update({setting.id: setting.value for setting in saved})
        self._baseline = MappingProxyType(baseline)
        self._settled = {}
        self.notifier.success(f"Saved {len(saved)} setting(s)")
        return True

    async def discard(self) -> bool:
        """Reload every setting from the server and take a new baseline."""
        try:
            await self.store.load()
        except CmsError as e:
            self.notifier.error("Could not reload settings", e)
            return False

        self.capture()
        self.notifier.success("Changes discarded")
        return True
