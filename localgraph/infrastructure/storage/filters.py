"""Helpers shared by the storage adapters."""

import hashlib
import json
from typing import Any, Dict, Iterable, List
from uuid import uuid4

from localgraph.domain.schema import StorageItem, StorageQuery


def generate_item_id() -> str:
    return uuid4().hex


def calculate_checksum(content: Dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON form of ``content``."""
    encoded = json.dumps(content, sort_keys=True, default=str).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()


def filter_items(items: Iterable[StorageItem], query: StorageQuery) -> List[StorageItem]:
    """Apply kind/tag/user filters, ordering and pagination to ``items``."""
    results = list(items)

    if query.kind:
        results = [item for item in results if item.kind == query.kind]

    if query.tags:
        wanted = set(query.tags)
        results = [item for item in results if wanted.intersection(item.metadata.tags)]

    if query.user_id:
        results = [item for item in results if item.metadata.user_id == query.user_id]

    results.sort(
        key=lambda item: getattr(item.metadata, query.order_by),
        reverse=query.order == "desc",
    )

    return results[query.offset:query.offset + query.limit]
