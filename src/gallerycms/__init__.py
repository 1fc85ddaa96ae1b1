"""Gallery CMS - content settings, image collections and categories for a gallery site."""

__version__ = "0.1.0"

from gallerycms.core.config import GalleryCmsConfig, config

__all__ = [
    "GalleryCmsConfig",
    "config",
]
