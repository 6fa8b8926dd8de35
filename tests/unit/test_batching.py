"""
Unit tests for StockItemBatch.
"""
from unittest import mock

import pytest

from soh.batching import StockItemBatch
from soh.models import StockItem

pytestmark = [pytest.mark.unit, pytest.mark.django_db]


def _items(reference, count):
    return [
        StockItem(
            project_id=reference.project_id,
            soh_data_reference=reference,
            sku=f'B-{n}',
            description='Batched',
            qty_on_hand=1,
        )
        for n in range(count)
    ]


def _fill(batch, items):
    for item in items:
        batch.add(item)


class TestStockItemBatch:
    def test_add_flushes_at_capacity_and_flush_commits_remainder(self, completed_reference):
        batch = StockItemBatch(capacity=490)

        _fill(batch, _items(completed_reference, 981))
        assert batch.committed_sizes == [490, 490]
        assert batch.pending_count == 1

        assert batch.flush() == 1
        assert batch.committed_sizes == [490, 490, 1]
        assert batch.items_written == 981
        assert completed_reference.stock_items.filter(sku__startswith='B-').count() == 981

    def test_fewer_rows_than_capacity_is_a_single_batch(self, completed_reference):
        batch = StockItemBatch(capacity=490)

        _fill(batch, _items(completed_reference, 489))
        assert batch.committed_sizes == []

        batch.flush()
        assert batch.committed_sizes == [489]

    def test_exact_multiple_leaves_nothing_for_final_flush(self, completed_reference):
        batch = StockItemBatch(capacity=490)

        _fill(batch, _items(completed_reference, 980))

        assert batch.flush() == 0
        assert batch.committed_sizes == [490, 490]

    def test_flush_of_empty_batch_writes_nothing(self):
        batch = StockItemBatch()

        assert batch.flush() == 0
        assert batch.batches_committed == 0

    def test_capacity_must_be_positive(self):
        with pytest.raises(ValueError):
            StockItemBatch(capacity=0)

    def test_committed_batches_survive_a_later_failure(self, completed_reference):
        batch = StockItemBatch(capacity=2)
        real_bulk_create = StockItem.objects.bulk_create
        calls = []

        def flaky_bulk_create(items, *args, **kwargs):
            calls.append(len(items))
            if len(calls) == 2:
                raise RuntimeError("database went away")
            return real_bulk_create(items, *args, **kwargs)

        with mock.patch.object(StockItem.objects, 'bulk_create', side_effect=flaky_bulk_create):
            items = _items(completed_reference, 4)
            batch.add(items[0])
            batch.add(items[1])
            batch.add(items[2])
            with pytest.raises(RuntimeError):
                batch.add(items[3])

        assert batch.committed_sizes == [2]
        assert completed_reference.stock_items.filter(sku__startswith='B-').count() == 2
