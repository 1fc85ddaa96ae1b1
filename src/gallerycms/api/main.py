"""Gallery CMS — FastAPI Application.

This module is the single entry point for the CMS backend.  It defines the
``create_app()`` factory, the module-level ``app`` used by uvicorn, all REST
API routes, and the ``main()`` CLI function that launches the server.

Architecture
------------
- **Settings** are flat ``(page, section, key) -> value`` rows.  Repeating
  groups (FAQ entries, cards...) exist only as a key naming convention; the
  group endpoints allocate and delete whole members at once.
- **Assets** are ordered image collections with exactly one primary image.
- **Categories** are a registry of lowercase names that images are tagged
  with; rename and delete rewrite the tagged images in the same transaction.
- **Persistence** is one SQLite file (see :mod:`gallerycms.core.database`);
  image files are served from ``/media`` by ``StaticFiles``.

Endpoints
---------
========  ===============================================  ==============================
Method    Path                                             Purpose
========  ===============================================  ==============================
GET       ``/api/health``                                  Liveness check
GET       ``/api/pages``                                   Page overview with counts
GET       ``/api/pages/{page}``                            Settings grouped by section
GET       ``/api/settings/{page}``                         Flat settings (``?section=``)
PATCH     ``/api/settings``                                Atomic batch value update
POST      ``/api/settings/{page}/{section}/groups/{kind}``            Add a group member
DELETE    ``/api/settings/{page}/{section}/groups/{kind}/{index}``    Remove a group member
GET       ``/api/collections/{collection}/assets``         List images in order
POST      ``/api/collections/{collection}/assets``         Upload images
PUT       ``/api/collections/{collection}/assets/order``   Persist a new order
POST      ``/api/collections/{collection}/assets/{id}/primary``       Set primary image
PATCH     ``/api/collections/{collection}/assets/{id}``    Update category / alt text
DELETE    ``/api/collections/{collection}/assets/{id}``    Delete an image
GET       ``/api/categories``                              Category registry
POST      ``/api/categories``                              Create a category
PUT       ``/api/categories/{name}``                       Rename a category
DELETE    ``/api/categories/{name}``                       Delete a category
========  ===============================================  ==============================

Usage
-----
CLI (installed entry point)::

    gallerycms

Direct invocation::

    python -m gallerycms.api.main
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from gallerycms import __version__
from gallerycms.api.models import (
    AssetUpdateRequest,
    BatchUpdateRequest,
    CategoryCreateRequest,
    CategoryRenameRequest,
    ReorderRequest,
)
from gallerycms.core.asset_db import AssetDB
from gallerycms.core.config import GalleryCmsConfig, config
from gallerycms.core.database import ContentDatabase
from gallerycms.core.errors import (
    BatchUpdateError,
    ConflictError,
    ContentError,
    InvalidOperationError,
    NotFoundError,
    PermutationError,
)
from gallerycms.core.group_keys import GroupKind
from gallerycms.core.media import delete_file, inspect_image, store_file, validate_collection_name
from gallerycms.core.seed import seed_defaults
from gallerycms.core.settings_db import SettingsDB
from gallerycms.core.taxonomy_db import TaxonomyDB

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


# ---------------------------------------------------------------------------
# Error translation.
# ---------------------------------------------------------------------------


def _http_error(exc: ContentError) -> HTTPException:
    """Map a persistence-layer error onto an HTTP error response.

    ``BatchUpdateError`` carries per-item errors so the client can show which
    settings were refused; every other error carries its message as the
    ``detail`` string.
    """
    if isinstance(exc, BatchUpdateError):
        return HTTPException(status_code=422, detail={"message": str(exc), "errors": exc.errors})
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, ConflictError):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, PermutationError):
        return HTTPException(status_code=422, detail=str(exc))
    if isinstance(exc, InvalidOperationError):
        return HTTPException(status_code=400, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))


def _settings(request: Request) -> SettingsDB:
    return request.app.state.settings_db


def _assets(request: Request) -> AssetDB:
    return request.app.state.asset_db


def _taxonomy(request: Request) -> TaxonomyDB:
    return request.app.state.taxonomy_db


# ---------------------------------------------------------------------------
# Pages and settings.
# ---------------------------------------------------------------------------


@router.get("/health")
async def health() -> dict:
    """Return a liveness payload with the API version."""
    return {"status": "ok", "version": __version__}


@router.get("/pages")
async def list_pages(request: Request) -> dict:
    """Return every page with its settings and section counts."""
    return {"pages": _settings(request).pages_overview()}


@router.get("/pages/{page}")
async def get_page(page: str, request: Request) -> dict:
    """Return a page's settings grouped by section in canonical order.

    Raises:
        HTTPException: 404 if the page has no settings.
    """
    sections = _settings(request).grouped_by_section(page)
    if not sections:
        raise HTTPException(status_code=404, detail=f"Page not found: {page}")
    return {"page": page, "sections": sections}


@router.get("/settings/{page}")
async def list_settings(page: str, request: Request, section: str | None = None) -> dict:
    """Return the flat settings of a page, optionally of one section."""
    return {"settings": _settings(request).list(page, section)}


@router.patch("/settings")
async def update_settings(req: BatchUpdateRequest, request: Request) -> dict:
    """Apply a batch of value edits atomically.

    Returns:
        Dictionary with ``success`` and the updated ``settings``.

    Raises:
        HTTPException: 422 with per-item ``errors`` if any item is invalid;
            nothing is written in that case.
    """
    try:
        updated = _settings(request).batch_update([item.model_dump() for item in req.settings])
    except ContentError as e:
        raise _http_error(e) from e
    return {"success": True, "settings": updated}


@router.post("/settings/{page}/{section}/groups/{kind}")
async def add_group_member(page: str, section: str, kind: GroupKind, request: Request) -> dict:
    """Create the next member of a repeating group.

    Returns:
        Dictionary with ``success``, the new ``index`` and created ``settings``.
    """
    try:
        created = _settings(request).add_group_member(page, section, kind)
    except ContentError as e:
        raise _http_error(e) from e

    index = int(created[0]["key"][len(kind):].split("_", 1)[0])
    return {"success": True, "kind": kind, "index": index, "settings": created}


@router.delete("/settings/{page}/{section}/groups/{kind}/{index}")
async def remove_group_member(
    page: str, section: str, kind: GroupKind, index: int, request: Request
) -> dict:
    """Delete every setting of one group member.  Absent members are a no-op."""
    removed = _settings(request).remove_group_member(page, section, kind, index)
    return {"success": True, "kind": kind, "index": index, "removed": removed}


# ---------------------------------------------------------------------------
# Asset collections.
# ---------------------------------------------------------------------------


@router.get("/collections/{collection}/assets")
async def list_assets(collection: str, request: Request) -> dict:
    """Return a collection's images in display order.

    Images whose files were removed from the media directory are pruned
    before listing.
    """
    try:
        _assets(request).reconcile(collection, request.app.state.config.media_dir)
        assets = _assets(request).list(collection)
    except ContentError as e:
        raise _http_error(e) from e
    return {"collection": collection, "assets": assets}


@router.post("/collections/{collection}/assets")
async def upload_assets(
    collection: str,
    request: Request,
    files: list[UploadFile] = File(...),
    category: str | None = Form(default=None),
    alt_text: str | None = Form(default=None),
) -> dict:
    """Upload images to the end of a collection.

    Every file is validated before anything is stored; one bad file rejects
    the whole upload.

    Returns:
        Dictionary with ``success``, ``message`` and the created ``assets``.

    Raises:
        HTTPException: 400 for unreadable, oversized, or disallowed images,
            an invalid collection name, or an unknown category.
    """
    cfg: GalleryCmsConfig = request.app.state.config

    try:
        validate_collection_name(collection)
        inspected = []
        for upload in files:
            data = await upload.read()
            image_format, width, height = inspect_image(
                data, cfg.allowed_image_types, cfg.max_upload_bytes
            )
            inspected.append((upload.filename or "image", data, image_format, width, height))
    except ContentError as e:
        logger.warning(f"Rejected upload to {collection}: {e}")
        raise _http_error(e) from e

    stored = []
    for original_name, data, image_format, width, height in inspected:
        filename = store_file(cfg.media_dir, collection, original_name, data, image_format)
        stored.append(
            {
                "filename": filename,
                "original_name": original_name,
                "category": category,
                "alt_text": alt_text if alt_text is not None else original_name.rsplit(".", 1)[0],
                "width": width,
                "height": height,
                "file_size": len(data),
            }
        )

    try:
        created = _assets(request).add(collection, stored)
    except ContentError as e:
        for item in stored:
            delete_file(cfg.media_dir, collection, item["filename"])
        raise _http_error(e) from e

    return {
        "success": True,
        "message": f"{len(created)} image(s) uploaded successfully!",
        "assets": created,
    }


@router.put("/collections/{collection}/assets/order")
async def reorder_assets(collection: str, req: ReorderRequest, request: Request) -> dict:
    """Persist a complete new order.

    Raises:
        HTTPException: 422 if ``order`` is not a permutation of the
            collection's ids.
    """
    try:
        assets = _assets(request).reorder(collection, req.order)
    except ContentError as e:
        logger.warning(f"Rejected reorder for {collection}: {e}")
        raise _http_error(e) from e
    return {"success": True, "message": "Image order updated!", "assets": assets}


@router.post("/collections/{collection}/assets/{asset_id}/primary")
async def set_primary_asset(collection: str, asset_id: int, request: Request) -> dict:
    """Make one image the primary image of its collection."""
    try:
        assets = _assets(request).set_primary(collection, asset_id)
    except ContentError as e:
        raise _http_error(e) from e
    return {"success": True, "message": "Primary image updated!", "assets": assets}


@router.patch("/collections/{collection}/assets/{asset_id}")
async def update_asset(
    collection: str, asset_id: int, req: AssetUpdateRequest, request: Request
) -> dict:
    """Update an image's category and/or alt text."""
    try:
        asset = _assets(request).update(
            collection, asset_id, category=req.category, alt_text=req.alt_text
        )
    except ContentError as e:
        raise _http_error(e) from e
    return {"success": True, "message": "Image updated successfully!", "asset": asset}


@router.delete("/collections/{collection}/assets/{asset_id}")
async def delete_asset(collection: str, asset_id: int, request: Request) -> dict:
    """Delete an image and its file.

    If the image was primary, the new first image becomes primary.
    """
    try:
        deleted = _assets(request).delete(collection, asset_id)
    except ContentError as e:
        raise _http_error(e) from e

    delete_file(request.app.state.config.media_dir, collection, deleted["filename"])
    return {
        "success": True,
        "message": "Image deleted successfully!",
        "deleted": asset_id,
        "assets": _assets(request).list(collection),
    }


# ---------------------------------------------------------------------------
# Category registry.
# ---------------------------------------------------------------------------


@router.get("/categories")
async def list_categories(request: Request) -> dict:
    """Return the category names and how many images use each."""
    taxonomy = _taxonomy(request)
    return {"categories": taxonomy.list(), "usage": taxonomy.usage()}


@router.post("/categories")
async def create_category(req: CategoryCreateRequest, request: Request) -> dict:
    """Create a category.

    Raises:
        HTTPException: 409 if the name exists (case-insensitively).
    """
    try:
        names = _taxonomy(request).create(req.name)
    except ContentError as e:
        raise _http_error(e) from e
    return {"success": True, "categories": names}


@router.put("/categories/{name}")
async def rename_category(name: str, req: CategoryRenameRequest, request: Request) -> dict:
    """Rename a category and every image tagged with it."""
    try:
        names = _taxonomy(request).rename(name, req.new_name)
    except ContentError as e:
        raise _http_error(e) from e
    return {"success": True, "categories": names}


@router.delete("/categories/{name}")
async def delete_category(name: str, request: Request) -> dict:
    """Delete a category; its images move to ``uncategorized``."""
    try:
        names = _taxonomy(request).delete(name)
    except ContentError as e:
        raise _http_error(e) from e
    return {"success": True, "categories": names}


# ---------------------------------------------------------------------------
# Application factory.
# ---------------------------------------------------------------------------


def create_app(cfg: GalleryCmsConfig | None = None) -> FastAPI:
    """Build a FastAPI application bound to one configuration.

    The database and the table-level stores are created here and kept on
    ``app.state`` so route handlers (and tests) share a single instance.

    Args:
        cfg: Configuration to use.  Defaults to the global ``config``.

    Returns:
        The configured application.
    """
    cfg = cfg or config

    app = FastAPI(
        title="Gallery CMS",
        description="Content settings, image collections, and categories for a gallery site.",
        version=__version__,
    )

    database = ContentDatabase(cfg.database_path, cfg.default_categories)
    app.state.config = cfg
    app.state.settings_db = SettingsDB(database)
    app.state.asset_db = AssetDB(database)
    app.state.taxonomy_db = TaxonomyDB(database)

    if cfg.seed_on_startup:
        seed_defaults(app.state.settings_db)

    # Allow cross-origin requests so the admin frontend can be served from a
    # different port during development.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)
    app.mount("/media", StaticFiles(directory=str(cfg.media_dir)), name="media")

    logger.info(f"Gallery CMS API ready (database: {cfg.database_path})")
    return app


app = create_app()


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host and port from :data:`~gallerycms.core.config.config` (which
    loads from ``GALLERYCMS_SERVER_HOST`` and ``GALLERYCMS_SERVER_PORT``
    environment variables).  Defaults to ``0.0.0.0:7860``.
    """
    import uvicorn

    uvicorn.run(
        "gallerycms.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
