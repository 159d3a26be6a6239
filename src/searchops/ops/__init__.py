"""Write operations and typed response models."""

from .bulk import BulkBatcher, insert_batcher, update_batcher
from .results import (
    BulkDeleteResult,
    BulkInsertResult,
    BulkItem,
    BulkOperationResult,
    Hit,
    Hits,
    NodeInfo,
    RefreshResult,
    SearchResult,
    WriteResult,
)

__all__ = [
    "BulkBatcher",
    "insert_batcher",
    "update_batcher",
    "BulkDeleteResult",
    "BulkInsertResult",
    "BulkItem",
    "BulkOperationResult",
    "Hit",
    "Hits",
    "NodeInfo",
    "RefreshResult",
    "SearchResult",
    "WriteResult",
]
