# soh/batching.py
import logging
from typing import List

from django.db import transaction

from .models import StockItem

logger = logging.getLogger(__name__)

DEFAULT_BATCH_CAPACITY = 490


class StockItemBatch:
    """
    Accumulates StockItem instances and writes them in atomic chunks of at
    most `capacity` rows.

    `add()` flushes on its own as soon as `capacity` items are pending, so the
    caller only needs a final `flush()` for the remainder. Every flush opens
    its own transaction: earlier chunks stay committed if a later one fails.
    """

    def __init__(self, capacity: int = DEFAULT_BATCH_CAPACITY):
        if capacity < 1:
            raise ValueError("Batch capacity must be at least 1.")
        self.capacity = capacity
        self._pending: List[StockItem] = []
        self.committed_sizes: List[int] = []

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def items_written(self) -> int:
        return sum(self.committed_sizes)

    @property
    def batches_committed(self) -> int:
        return len(self.committed_sizes)

    def add(self, item: StockItem) -> None:
        self._pending.append(item)
        if len(self._pending) >= self.capacity:
            self.flush()

    def flush(self) -> int:
        """Commit the pending items as one batch. Returns how many were written."""
        if not self._pending:
            return 0

        items, self._pending = self._pending, []
        with transaction.atomic():
            StockItem.objects.bulk_create(items)

        self.committed_sizes.append(len(items))
        logger.debug(f"Committed stock item batch #{self.batches_committed} ({len(items)} rows).")
        return len(items)
