"""Tests for the gallerycms package surface — imports and signatures."""

from __future__ import annotations

import importlib
import typing

import pytest

from gallerycms.core.asset_db import AssetDB
from gallerycms.core.settings_db import SettingsDB
from gallerycms.core.taxonomy_db import TaxonomyDB


class TestImports:
    @pytest.mark.parametrize(
        "module",
        ["gallerycms", "gallerycms.core", "gallerycms.api.main", "gallerycms.editor"],
    )
    def test_module_imports(self, module):
        assert importlib.import_module(module) is not None

    def test_version(self):
        import gallerycms

        assert gallerycms.__version__ == "0.1.0"


class TestStoreSignatures:
    """Store classes define a ``list`` method; later annotations must still resolve."""

    @pytest.mark.parametrize(
        "method",
        [AssetDB.add, AssetDB.reorder, SettingsDB.grouped_by_section, SettingsDB.batch_update, TaxonomyDB.usage],
    )
    def test_annotations_resolve(self, method):
        hints = typing.get_type_hints(method)
        assert "return" in hints
