"""Server-side content storage.

This package holds everything the API needs to persist and validate content:

- **GalleryCmsConfig**: Configuration management using Pydantic Settings
- **ContentDatabase**: SQLite schema and transaction handling
- **SettingsDB**: Flat page settings and repeating-group allocation
- **AssetDB**: Ordered image collections with exactly one primary image
- **TaxonomyDB**: Category registry with safe rename and delete

Architecture Overview
---------------------
1. **Configuration Layer** (config.py):
   - Environment-based configuration using Pydantic Settings
   - All settings prefixed with GALLERYCMS_ in .env files

2. **Storage Layer** (database.py, settings_db.py, asset_db.py, taxonomy_db.py):
   - One SQLite file, one transaction per operation
   - Domain errors from errors.py, translated to HTTP codes by the API

3. **Support Utilities**:
   - group_keys.py: ``<kind><index>_<field>`` key convention
   - media.py: Image inspection and file storage
   - values.py: Boolean and display-name helpers
   - seed.py: Starter settings for a fresh database
"""

from gallerycms.core.asset_db import AssetDB
from gallerycms.core.config import GalleryCmsConfig, config
from gallerycms.core.database import ContentDatabase
from gallerycms.core.settings_db import SettingsDB
from gallerycms.core.taxonomy_db import TaxonomyDB

__all__ = [
    "AssetDB",
    "ContentDatabase",
    "GalleryCmsConfig",
    "SettingsDB",
    "TaxonomyDB",
    "config",
]
