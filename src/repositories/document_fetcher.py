from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from src.core.appwrite import Query
from src.core.errors import DocumentFetchError

logger = logging.getLogger(__name__)

DEFAULT_PAGE_LIMIT = 2000
DEFAULT_MAX_PAGES = 500


class DocumentStore(Protocol):
    def list_documents(
        self, collection_id: str, queries: Optional[List[str]] = None
    ) -> Tuple[List[Dict[str, Any]], Optional[int]]: ...


def fetch_all_documents(
    store: DocumentStore,
    collection_id: str,
    queries: Sequence[str],
    page_limit: int = DEFAULT_PAGE_LIMIT,
    max_pages: int = DEFAULT_MAX_PAGES,
) -> List[Dict[str, Any]]:
    """Page through a collection with ``cursorAfter`` until a short page.

    Store errors propagate on the first failing page. Exceeding ``max_pages``
    raises ``DocumentFetchError`` instead of looping forever.
    """
    documents: List[Dict[str, Any]] = []
    cursor: Optional[str] = None
    for page_number in range(1, max_pages + 1):
        page_queries = [*queries, Query.limit(page_limit)]
        if cursor:
            page_queries.append(Query.cursor_after(cursor))

        page, total = store.list_documents(collection_id, page_queries)
        documents.extend(page)
        logger.debug(
            "Fetched page %s of %s: %s documents (total=%s)",
            page_number,
            collection_id,
            len(page),
            total,
        )
        if len(page) < page_limit:
            return documents
        cursor = page[-1]["$id"]

    logger.error(
        "Aborting fetch of %s after %s pages of %s documents", collection_id, max_pages, page_limit
    )
    raise DocumentFetchError(
        f"Fetching {collection_id} exceeded {max_pages} pages of {page_limit} documents"
    )
