"""Async HTTP client for the Gallery CMS API.

All editor persistence goes through :class:`CmsClient`.  Responses are
returned as decoded JSON; failures are raised as the editor error taxonomy:

==============================  ============================
Failure                         Raised as
==============================  ============================
``httpx.TransportError``        ``TransientNetworkError``
HTTP 409                        ``ConflictError``
HTTP 422                        ``ValidationError``
any other 4xx / 5xx             ``ServerRejection``
==============================  ============================

Usage Example
-------------
    async with CmsClient("http://127.0.0.1:7860") as client:
        settings = await client.list_settings("contact", section="faq")
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from gallerycms.core.config import config

from .errors import CmsError, ConflictError, ServerRejection, TransientNetworkError, ValidationError

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> tuple[str, list]:
    """Extract ``(message, item errors)`` from an error response body."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase, []

    detail = body.get("detail", body) if isinstance(body, dict) else body
    if isinstance(detail, str):
        return detail, []
    if isinstance(detail, dict):
        return str(detail.get("message", detail)), list(detail.get("errors", []))
    if isinstance(detail, list):
        # Request validation failures: [{"loc": [...], "msg": "..."}]
        messages = [item.get("msg", str(item)) if isinstance(item, dict) else str(item) for item in detail]
        return "; ".join(messages), detail
    return str(detail), []


def error_from_response(response: httpx.Response) -> CmsError:
    """Map an HTTP error response onto the editor error taxonomy."""
    message, errors = _error_message(response)
    if response.status_code == 409:
        return ConflictError(message)
    if response.status_code == 422:
        return ValidationError(message, errors)
    return ServerRejection(response.status_code, message)


class CmsClient:
    """Thin async wrapper around the CMS REST API.

    Args:
        base_url: API root.  Defaults to ``config.api_base_url``.
        http: Pre-configured ``httpx.AsyncClient`` (tests pass one bound to
            the application through ``httpx.ASGITransport``).
    """

    def __init__(self, base_url: str | None = None, http: httpx.AsyncClient | None = None):
        self._http = http or httpx.AsyncClient(base_url=base_url or config.api_base_url)

    async def __aenter__(self) -> CmsClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.TransportError as e:
            logger.warning(f"{method} {path} failed: {e!r}")
            raise TransientNetworkError(f"Could not reach the server ({type(e).__name__})") from e

        if response.is_error:
            error = error_from_response(response)
            logger.warning(f"{method} {path} rejected with {response.status_code}: {error}")
            raise error
        return response.json()

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    async def list_pages(self) -> list[dict]:
        return (await self._request("GET", "/api/pages"))["pages"]

    async def get_page(self, page: str) -> dict[str, list[dict]]:
        """Return a page's settings keyed by section in display order."""
        return (await self._request("GET", f"/api/pages/{page}"))["sections"]

    async def list_settings(self, page: str, section: str | None = None) -> list[dict]:
        params = {"section": section} if section is not None else None
        return (await self._request("GET", f"/api/settings/{page}", params=params))["settings"]

    async def batch_update(self, updates: list[tuple[int, str]]) -> list[dict]:
        """Send value edits as one atomic batch.

        Raises:
            ValidationError: With per-item ``errors`` if the batch was refused
        """
        payload = {"settings": [{"id": setting_id, "value": value} for setting_id, value in updates]}
        return (await self._request("PATCH", "/api/settings", json=payload))["settings"]

    async def add_group_member(self, page: str, section: str, kind: str) -> list[dict]:
        """Create the next member of a group and return its settings."""
        path = f"/api/settings/{page}/{section}/groups/{kind}"
        return (await self._request("POST", path))["settings"]

    async def remove_group_member(self, page: str, section: str, kind: str, index: int) -> int:
        path = f"/api/settings/{page}/{section}/groups/{kind}/{index}"
        return (await self._request("DELETE", path))["removed"]

    # ------------------------------------------------------------------
    # Assets
    # ------------------------------------------------------------------

    async def list_assets(self, collection: str) -> list[dict]:
        return (await self._request("GET", f"/api/collections/{collection}/assets"))["assets"]

    async def upload_assets(
        self,
        collection: str,
        files: list[tuple[str, bytes]],
        category: str | None = None,
    ) -> list[dict]:
        """Upload ``(filename, bytes)`` pairs and return the created assets."""
        data = {"category": category} if category else None
        response = await self._request(
            "POST",
            f"/api/collections/{collection}/assets",
            files=[("files", (name, content)) for name, content in files],
            data=data,
        )
        return response["assets"]

    async def delete_asset(self, collection: str, asset_id: int) -> list[dict]:
        """Delete an asset and return the remaining collection."""
        path = f"/api/collections/{collection}/assets/{asset_id}"
        return (await self._request("DELETE", path))["assets"]

    async def set_primary(self, collection: str, asset_id: int) -> list[dict]:
        path = f"/api/collections/{collection}/assets/{asset_id}/primary"
        return (await self._request("POST", path))["assets"]

    async def reorder(self, collection: str, ordered_ids: list[int]) -> list[dict]:
        """Persist a complete order; the server rejects non-permutations."""
        path = f"/api/collections/{collection}/assets/order"
        return (await self._request("PUT", path, json={"order": list(ordered_ids)}))["assets"]

    async def update_asset(
        self,
        collection: str,
        asset_id: int,
        category: str | None = None,
        alt_text: str | None = None,
    ) -> dict:
        payload = {}
        if category is not None:
            payload["category"] = category
        if alt_text is not None:
            payload["alt_text"] = alt_text
        path = f"/api/collections/{collection}/assets/{asset_id}"
        return (await self._request("PATCH", path, json=payload))["asset"]

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    async def list_categories(self) -> list[str]:
        return (await self._request("GET", "/api/categories"))["categories"]

    async def create_category(self, name: str) -> list[str]:
        return (await self._request("POST", "/api/categories", json={"name": name}))["categories"]

    async def rename_category(self, old_name: str, new_name: str) -> list[str]:
        response = await self._request(
            "PUT", f"/api/categories/{old_name}", json={"new_name": new_name}
        )
        return response["categories"]

    async def delete_category(self, name: str) -> list[str]:
        return (await self._request("DELETE", f"/api/categories/{name}"))["categories"]
