"""
HTTP client for the back-office API.

Thin wrapper over httpx.AsyncClient that knows the list path and list key
of every synced collection and turns error responses into ApiError.
"""

import logging
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx

from roadledger.app.core.config import settings
from roadledger.app.services.change_notifier import Collection
from roadledger.app.sync.events import ServerEvent, iter_events

logger = logging.getLogger("roadledger.sync.api")

# collection -> (path under the API prefix, key holding the rows in list responses)
COLLECTION_PATHS: Dict[Collection, tuple] = {
    Collection.PARTIES: ("/parties", "parties"),
    Collection.SUPPLIERS: ("/suppliers", "suppliers"),
    Collection.VEHICLES: ("/vehicles", "vehicles"),
    Collection.LOADING_SLIPS: ("/loading-slips", "loading_slips"),
    Collection.MEMOS: ("/memos", "memos"),
    Collection.BILLS: ("/bills", "bills"),
    Collection.BANKING_ENTRIES: ("/banking", "entries"),
    Collection.CASHBOOK_ENTRIES: ("/cashbook", "entries"),
    Collection.FUEL_WALLETS: ("/fuel/wallets", "wallets"),
    Collection.FUEL_TRANSACTIONS: ("/fuel/transactions", "transactions"),
    Collection.PARTY_COMMISSION_LEDGER: ("/party-commission-ledger", "entries"),
    Collection.POD_FILES: ("/pod", "files"),
    Collection.LEDGER_ENTRIES: ("/ledgers", "entries"),
}


class ApiError(Exception):
    """Non-2xx response from the back-office API."""

    def __init__(self, status_code: int, message: str, error_code: Optional[str] = None, details: Optional[dict] = None):
        self.status_code = status_code
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(f"{status_code} {error_code or ''} {message}".replace("  ", " "))

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ApiError":
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        return cls(
            status_code=response.status_code,
            message=body.get("message") or response.reason_phrase or "Request failed",
            error_code=body.get("error_code"),
            details=body.get("details"),
        )


def collection_path(collection) -> tuple:
    return COLLECTION_PATHS[Collection(collection)]


class ApiClient:
    """
    Async client for the collections, version counters and events stream.

    Args:
        base_url: API root including the version prefix, e.g. http://host:8000/v1
        timeout: Per-request timeout in seconds
        page_size: Page size used by list_all
        transport: Optional httpx transport (tests pass httpx.MockTransport)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        page_size: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout if timeout is not None else settings.sync_request_timeout_seconds
        self.page_size = page_size or settings.sync_page_size
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.sync_api_base_url,
            timeout=self.timeout,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        response = await self._client.request(method, path, **kwargs)
        if response.is_error:
            raise ApiError.from_response(response)
        return response.json()

    async def list_page(self, collection, page: int = 1) -> dict:
        path, _ = collection_path(collection)
        return await self._request("GET", path, params={"page": page, "page_size": self.page_size})

    async def list_all(self, collection) -> List[dict]:
        """Every row of a collection, following pages until the reported total is reached."""
        _, key = collection_path(collection)
        rows: List[dict] = []
        page = 1
        while True:
            body = await self.list_page(collection, page)
            batch = body.get(key, [])
            rows.extend(batch)
            if not batch or len(rows) >= body.get("total", 0):
                break
            page += 1
        logger.debug("Fetched %s %s rows", len(rows), Collection(collection).value)
        return rows

    async def get(self, collection, record_id: int) -> dict:
        path, _ = collection_path(collection)
        return await self._request("GET", f"{path}/{record_id}")

    async def create(self, collection, data: dict) -> dict:
        path, _ = collection_path(collection)
        return await self._request("POST", path, json=data)

    async def update(self, collection, record_id: int, data: dict) -> dict:
        path, _ = collection_path(collection)
        return await self._request("PUT", f"{path}/{record_id}", json=data)

    async def delete(self, collection, record_id: int) -> dict:
        path, _ = collection_path(collection)
        return await self._request("DELETE", f"{path}/{record_id}")

    async def get_versions(self) -> Dict[str, int]:
        body = await self._request("GET", "/sync/versions")
        return body.get("versions", {})

    async def stream_events(self) -> AsyncIterator[ServerEvent]:
        """Yield events from /events until the server closes the stream."""
        timeout = httpx.Timeout(self.timeout, read=None)
        async with self._client.stream("GET", "/events", timeout=timeout) as response:
            if response.is_error:
                await response.aread()
                raise ApiError.from_response(response)
            async for event in iter_events(response.aiter_lines()):
                yield event
