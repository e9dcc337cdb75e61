"""Factory Boy factories and test doubles for test data generation.

Available helpers
-----------------
WorkItemRowFactory     — raw ``work_items`` row dict (pending by default)
make_work_item         — validated WorkItem built from a factory row
InMemoryWorkItemStore  — WorkItemStore double with failure injection
"""

from __future__ import annotations

from tests.factories.stores import InMemoryWorkItemStore
from tests.factories.work_items import WorkItemRowFactory, make_work_item

__all__ = [
    "InMemoryWorkItemStore",
    "WorkItemRowFactory",
    "make_work_item",
]
