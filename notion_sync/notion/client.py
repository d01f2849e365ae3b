"""HTTP client for the Notion API."""

from typing import Any, Dict, List, Optional
import logging

import httpx

from ..core.exceptions import (
    NotionAPIError,
    RateLimitedError,
    RemoteUnavailableError,
    SourceNotFoundError,
)
from .models import NotionDatabase, NotionPage
from .properties import PropertyValue, encode_properties


DEFAULT_BASE_URL = "https://api.notion.com/v1"
DEFAULT_API_VERSION = "2022-06-28"
DEFAULT_TIMEOUT = 30.0
PAGE_SIZE = 100


class NotionClient:
    """Blocking Notion client implementing the remote side of a mapping.

    Rate limits and server errors are raised, never retried here; the next
    scheduled pass picks the work up again.
    """

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        api_version: str = DEFAULT_API_VERSION,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.logger = logger or logging.getLogger(__name__)
        self.base_url = base_url.rstrip("/")
        self.api_version = api_version
        self._client = httpx.Client(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {token}",
                "Notion-Version": api_version,
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    def __enter__(self) -> "NotionClient":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    # -- connection / schema --------------------------------------------------

    def test_connection(self) -> bool:
        """Check that the token is accepted."""
        self._request("GET", "/users/me")
        return True

    def get_database(self, database_id: str) -> NotionDatabase:
        try:
            data = self._request("GET", f"/databases/{database_id}")
        except NotionAPIError as exc:
            if exc.status_code == 404:
                raise SourceNotFoundError("Notion database", database_id) from exc
            raise
        return NotionDatabase.from_api(data)

    # -- records --------------------------------------------------------------

    def list_records(self, database_id: str) -> List[NotionPage]:
        """Return every live page in the database, following pagination."""
        pages: List[NotionPage] = []
        cursor: Optional[str] = None

        while True:
            body: Dict[str, Any] = {"page_size": PAGE_SIZE}
            if cursor:
                body["start_cursor"] = cursor

            try:
                data = self._request("POST", f"/databases/{database_id}/query", json=body)
            except NotionAPIError as exc:
                if exc.status_code == 404:
                    raise SourceNotFoundError("Notion database", database_id) from exc
                raise

            for result in data.get("results", []):
                page = NotionPage.from_api(result)
                if not page.archived:
                    pages.append(page)

            cursor = data.get("next_cursor") if data.get("has_more") else None
            if not cursor:
                break

        self.logger.debug(f"Fetched {len(pages)} pages from database {database_id}")
        return pages

    def get_record(self, page_id: str) -> NotionPage:
        return NotionPage.from_api(self._request("GET", f"/pages/{page_id}"))

    def create_record(self, database_id: str, properties: Dict[str, PropertyValue]) -> NotionPage:
        body = {
            "parent": {"database_id": database_id},
            "properties": encode_properties(properties),
        }
        page = NotionPage.from_api(self._request("POST", "/pages", json=body))
        self.logger.debug(f"Created page {page.id} in database {database_id}")
        return page

    def update_record(self, page_id: str, properties: Dict[str, PropertyValue]) -> NotionPage:
        body = {"properties": encode_properties(properties)}
        return NotionPage.from_api(self._request("PATCH", f"/pages/{page_id}", json=body))

    def archive_record(self, page_id: str) -> NotionPage:
        page = NotionPage.from_api(
            self._request("PATCH", f"/pages/{page_id}", json={"archived": True})
        )
        self.logger.debug(f"Archived page {page_id}")
        return page

    # -- transport ------------------------------------------------------------

    def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            response = self._client.request(method, path, json=json)
        except httpx.TransportError as exc:
            self.logger.warning(f"Notion request {method} {path} failed: {exc}")
            raise RemoteUnavailableError(f"Could not reach Notion: {exc}") from exc

        if response.status_code == 429:
            raise RateLimitedError(_parse_retry_after(response.headers.get("Retry-After")))

        if response.status_code >= 500:
            raise RemoteUnavailableError(
                f"Notion unavailable: HTTP {response.status_code} for {method} {path}"
            )

        if not response.is_success:
            code = None
            message = response.reason_phrase or f"HTTP {response.status_code}"
            try:
                payload = response.json()
            except ValueError:
                payload = None
            if isinstance(payload, dict):
                code = payload.get("code")
                message = payload.get("message", message)
            raise NotionAPIError(response.status_code, code, message)

        return response.json()


def _parse_retry_after(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None
