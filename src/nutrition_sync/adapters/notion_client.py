"""Notion REST API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx


class NotionClient(Protocol):
    """Interface for the Notion endpoints used by the app."""

    async def create_page(
        self,
        database_id: str,
        properties: dict[str, object],
        children: list[dict[str, object]] | None = None,
    ) -> dict[str, object]:
        """Create a page in a database."""

    async def update_page(
        self, page_id: str, properties: dict[str, object]
    ) -> dict[str, object]:
        """Update page properties."""

    async def retrieve_page(self, page_id: str) -> dict[str, object]:
        """Fetch a page with its properties."""

    async def retrieve_database(self, database_id: str) -> dict[str, object]:
        """Fetch database metadata."""

    async def query_database(
        self,
        database_id: str,
        filter_: dict[str, object] | None = None,
        start_cursor: str | None = None,
        page_size: int = 100,
    ) -> dict[str, object]:
        """Query a database page by page."""


@dataclass
class HttpxNotionClient(NotionClient):
    """HTTPX-backed Notion client."""

    api_key: str
    http_client: httpx.AsyncClient
    base_url: str = "https://api.notion.com/v1"
    notion_version: str = "2022-06-28"

    @classmethod
    def create(
        cls, api_key: str, base_url: str, notion_version: str
    ) -> "HttpxNotionClient":
        """Create a Notion client with a managed httpx session."""
        return cls(
            api_key=api_key,
            http_client=httpx.AsyncClient(),
            base_url=base_url,
            notion_version=notion_version,
        )

    async def create_page(
        self,
        database_id: str,
        properties: dict[str, object],
        children: list[dict[str, object]] | None = None,
    ) -> dict[str, object]:
        """Create a page in a database."""
        payload: dict[str, object] = {
            "parent": {"database_id": database_id},
            "properties": properties,
        }
        if children:
            payload["children"] = children
        return await self._request("POST", "/pages", json=payload)

    async def update_page(
        self, page_id: str, properties: dict[str, object]
    ) -> dict[str, object]:
        """Update page properties."""
        return await self._request(
            "PATCH", f"/pages/{page_id}", json={"properties": properties}
        )

    async def retrieve_page(self, page_id: str) -> dict[str, object]:
        """Fetch a page with its properties."""
        return await self._request("GET", f"/pages/{page_id}")

    async def retrieve_database(self, database_id: str) -> dict[str, object]:
        """Fetch database metadata."""
        return await self._request("GET", f"/databases/{database_id}")

    async def query_database(
        self,
        database_id: str,
        filter_: dict[str, object] | None = None,
        start_cursor: str | None = None,
        page_size: int = 100,
    ) -> dict[str, object]:
        """Query a database page by page."""
        payload: dict[str, object] = {"page_size": page_size}
        if filter_ is not None:
            payload["filter"] = filter_
        if start_cursor is not None:
            payload["start_cursor"] = start_cursor
        return await self._request(
            "POST", f"/databases/{database_id}/query", json=payload
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, object] | None = None,
    ) -> dict[str, object]:
        response = await self.http_client.request(
            method,
            f"{self.base_url}{path}",
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Notion-Version": self.notion_version,
            },
            json=json,
            timeout=15,
        )
        response.raise_for_status()
        return response.json()
