"""Integration tests for the editing core against the real application.

A :class:`PageEditor` talks to the FastAPI app in-process, so these tests
exercise the client, the routes and the SQLite layer together.
"""

from __future__ import annotations

import pytest
import pytest_asyncio

from gallerycms.core.seed import seed_defaults
from gallerycms.editor.notifications import Level
from gallerycms.editor.session import PageEditor


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest_asyncio.fixture
async def contact_editor(app, cms_client, clock):
    seed_defaults(app.state.settings_db)
    editor = PageEditor(cms_client, "contact", warmup_seconds=0.5, clock=clock)
    assert await editor.open() is True
    clock.now = 1.0
    return editor


@pytest_asyncio.fixture
async def about_editor(app, cms_client, clock):
    seed_defaults(app.state.settings_db)
    editor = PageEditor(cms_client, "about", warmup_seconds=0.5, clock=clock)
    await editor.open()
    clock.now = 1.0
    return editor


class TestOpen:
    async def test_sections_are_projected(self, contact_editor):
        faq = contact_editor.section("faq")
        assert [(g.kind, g.index) for g in faq.groups] == [("faq", 2), ("faq", 1)]
        assert [s.key for s in faq.other] == ["show_faq"]

    async def test_reserved_contact_keys_stay_other(self, contact_editor):
        info = contact_editor.section("info")
        assert info.groups == ()
        assert {s.key for s in info.other} >= {"email_address", "phone_number", "studio_address"}

    async def test_clean_after_open(self, contact_editor):
        assert contact_editor.is_dirty is False
        assert "uncategorized" in contact_editor.taxonomy.names

    async def test_open_unknown_page_is_empty(self, cms_client):
        editor = PageEditor(cms_client, "nowhere")
        assert await editor.open() is True
        assert editor.sections() == {}


class TestGroupLifecycle:
    async def test_add_remove_never_reuses_index(self, app, cms_client):
        editor = PageEditor(cms_client, "contact", warmup_seconds=0)
        await editor.open()

        first = await editor.groups.add_group("faq", "faq")
        second = await editor.groups.add_group("faq", "faq")
        assert (first.index, second.index) == (1, 2)

        assert await editor.groups.remove_group("faq", "faq", 1) is True
        third = await editor.groups.add_group("faq", "faq")

        assert third.index == 3
        assert [g.index for g in editor.section("faq").groups] == [3, 2]
        assert editor.is_dirty is False

    async def test_add_keeps_unsaved_edits(self, contact_editor):
        question = contact_editor.section("faq").find("faq", 1).fields["question"]
        contact_editor.edit(question.id, "Do you ship to Canada?")

        added = await contact_editor.groups.add_group("faq", "faq")

        assert added.index == 3
        assert contact_editor.store.get(question.id).value == "Do you ship to Canada?"
        assert [s.id for s in contact_editor.tracker.dirty_settings()] == [question.id]

    async def test_removed_group_persists_without_save(self, contact_editor, cms_client):
        await contact_editor.groups.remove_group("faq", "faq", 2)

        fresh = PageEditor(cms_client, "contact", warmup_seconds=0)
        await fresh.open()
        assert [g.index for g in fresh.section("faq").groups] == [1]


class TestSaveRoundTrip:
    async def test_richtext_noise_then_edit_then_save(self, about_editor, cms_client):
        content = next(s for s in about_editor.store.section("story") if s.key == "content")

        about_editor.edit(content.id, content.value.replace("</p>", " </p>"))
        assert about_editor.is_dirty is False

        about_editor.edit(content.id, "<p>Every painting starts with a run outside.</p>")
        assert about_editor.is_dirty is True

        assert await about_editor.save() is True
        assert about_editor.is_dirty is False

        reopened = PageEditor(cms_client, "about", warmup_seconds=0)
        await reopened.open()
        assert reopened.store.get(content.id).value == "<p>Every painting starts with a run outside.</p>"

    async def test_boolean_saved_as_wire_form(self, about_editor, cms_client):
        flag = next(s for s in about_editor.store.section("story") if s.key == "show_story")
        about_editor.edit(flag.id, False)

        await about_editor.save()

        settings = await cms_client.list_settings("about", section="story")
        assert next(s for s in settings if s["id"] == flag.id)["value"] == "0"

    async def test_navigation_guard(self, about_editor, clock):
        title = next(s for s in about_editor.store.section("story") if s.key == "title")
        about_editor.edit(title.id, "A new story")
        assert about_editor.allow_navigation(lambda: False) is False

        assert await about_editor.discard() is True
        clock.now = 5.0

        assert about_editor.allow_navigation(lambda: False) is True
        assert about_editor.store.get(title.id).value == "The Artist's Journey"


class TestCollectionsAndTaxonomy:
    async def test_rename_refreshes_collections(self, contact_editor, image_factory):
        gallery = await contact_editor.collection("sunrise")
        created = await gallery.upload([("a.png", image_factory()), ("b.png", image_factory())], category="blog")
        assert gallery.confirmed.primary_id == created[0].id

        assert await contact_editor.taxonomy.rename("blog", "News") is True

        assert "blog" not in contact_editor.taxonomy.names
        assert {a.category for a in gallery.confirmed} == {"news"}

    async def test_remove_reassigns_in_collections(self, contact_editor, image_factory):
        await contact_editor.taxonomy.add("Events")
        gallery = await contact_editor.collection("sunrise")
        await gallery.upload([("a.png", image_factory())], category="events")

        assert await contact_editor.taxonomy.remove("events") is True

        assert [a.category for a in gallery.confirmed] == ["uncategorized"]

    async def test_remove_uncategorized_rejected(self, contact_editor):
        assert await contact_editor.taxonomy.remove("uncategorized") is False
        assert contact_editor.notifier.last.level is Level.ERROR

    async def test_delete_primary_and_reorder(self, contact_editor, image_factory):
        gallery = await contact_editor.collection("sunrise")
        p, b, c = await gallery.upload([(f"{n}.png", image_factory()) for n in "pbc"])

        await gallery.delete(p.id)
        assert gallery.confirmed.ids == [b.id, c.id]
        assert gallery.confirmed.primary_id == b.id

        gallery.begin_drag()
        gallery.drag_over([c.id, b.id])
        assert await gallery.drop() is True

        await gallery.refresh()
        assert gallery.confirmed.ids == [c.id, b.id]
        assert gallery.confirmed.primary_id == b.id

    async def test_server_rejects_stale_order(self, contact_editor, image_factory, cms_client):
        gallery = await contact_editor.collection("sunrise")
        a, b = await gallery.upload([("a.png", image_factory()), ("b.png", image_factory())])
        await cms_client.upload_assets("sunrise", [("c.png", image_factory())])

        gallery.begin_drag()
        gallery.drag_over([b.id, a.id])
        assert await gallery.drop() is False

        assert gallery.reorder_failed is True
        assert gallery.visible.ids == [b.id, a.id]
        assert contact_editor.notifier.last.level is Level.ERROR
