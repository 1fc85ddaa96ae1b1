"""Editing core used by the admin surface.

The editor holds one operator's working copy of a page and talks to the API
through :class:`~gallerycms.editor.client.CmsClient`:

- **SettingsStore**: live settings with local value edits
- **parse_section / GroupLifecycle**: repeating groups projected from flat keys
- **AssetCollection / AssetSequence**: ordered images with one primary
- **ChangeTracker**: unsaved-edit detection against a baseline
- **TaxonomyManager**: category registry
- **PageEditor**: wires the above together for one page

Every operation reports its outcome to a
:class:`~gallerycms.editor.notifications.Notifier` instead of raising.
"""

from gallerycms.editor.assets import AssetCollection, AssetSequence
from gallerycms.editor.client import CmsClient
from gallerycms.editor.groups import Group, GroupLifecycle, ParsedSection, classify_key, parse_section
from gallerycms.editor.notifications import Notification, Notifier
from gallerycms.editor.session import PageEditor
from gallerycms.editor.settings import SettingsStore
from gallerycms.editor.taxonomy import TaxonomyManager
from gallerycms.editor.tracker import ChangeTracker, normalize_markup

__all__ = [
    "AssetCollection",
    "AssetSequence",
    "ChangeTracker",
    "CmsClient",
    "Group",
    "GroupLifecycle",
    "Notification",
    "Notifier",
    "PageEditor",
    "ParsedSection",
    "SettingsStore",
    "TaxonomyManager",
    "classify_key",
    "normalize_markup",
    "parse_section",
]
