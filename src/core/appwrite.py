from __future__ import annotations

import json
from threading import Lock
from typing import Any, Dict, List, Optional, Sequence, Tuple

import httpx

from src.core.config import Settings


class Query:
    """Builders for Appwrite query strings.

    Appwrite accepts each query as a JSON object with ``method``, an optional
    ``attribute`` and a ``values`` list. Passing a list to :meth:`equal`
    matches any of its members.
    """

    @staticmethod
    def _build(method: str, attribute: Optional[str] = None, values: Optional[Sequence[Any]] = None) -> str:
        payload: Dict[str, Any] = {"method": method}
        if attribute is not None:
            payload["attribute"] = attribute
        if values is not None:
            payload["values"] = list(values)
        return json.dumps(payload, separators=(",", ":"))

    @staticmethod
    def _as_values(value: Any) -> List[Any]:
        if isinstance(value, (list, tuple, set)):
            return list(value)
        return [value]

    @classmethod
    def equal(cls, attribute: str, value: Any) -> str:
        return cls._build("equal", attribute, cls._as_values(value))

    @classmethod
    def greater_than_equal(cls, attribute: str, value: Any) -> str:
        return cls._build("greaterThanEqual", attribute, [value])

    @classmethod
    def less_than_equal(cls, attribute: str, value: Any) -> str:
        return cls._build("lessThanEqual", attribute, [value])

    @classmethod
    def select(cls, attributes: Sequence[str]) -> str:
        return cls._build("select", values=attributes)

    @classmethod
    def limit(cls, limit: int) -> str:
        return cls._build("limit", values=[limit])

    @classmethod
    def cursor_after(cls, document_id: str) -> str:
        return cls._build("cursorAfter", values=[document_id])


class AppwriteClient:
    _shared_client: httpx.Client | None = None
    _client_lock: Lock = Lock()

    def __init__(self, settings: Settings, http_client: Optional[httpx.Client] = None) -> None:
        self.base_url = settings.appwrite_url.rstrip("/")
        self.project_id = settings.appwrite_project_id
        self.api_key = settings.appwrite_api_key
        self.database_id = settings.appwrite_database_id
        self._client = http_client or self._get_shared_client(settings.appwrite_timeout_seconds)

    @classmethod
    def _get_shared_client(cls, timeout: float) -> httpx.Client:
        if cls._shared_client is not None:
            return cls._shared_client
        with cls._client_lock:
            if cls._shared_client is None:
                cls._shared_client = httpx.Client(
                    timeout=timeout,
                    limits=httpx.Limits(max_keepalive_connections=20, max_connections=100),
                )
        return cls._shared_client

    def list_documents(
        self, collection_id: str, queries: Optional[List[str]] = None
    ) -> Tuple[List[Dict[str, Any]], Optional[int]]:
        params: List[Tuple[str, str]] = [("queries[]", query) for query in queries or []]
        headers = {
            "X-Appwrite-Project": self.project_id,
            "X-Appwrite-Key": self.api_key,
            "Content-Type": "application/json",
        }
        url = f"{self.base_url}/databases/{self.database_id}/collections/{collection_id}/documents"
        response = self._client.get(url, headers=headers, params=params)
        response.raise_for_status()
        payload = response.json()
        documents = payload.get("documents") or []
        total = payload.get("total")
        return documents, int(total) if total is not None else None
