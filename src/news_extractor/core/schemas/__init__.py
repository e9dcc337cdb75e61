"""Pydantic schemas for data validation.

Sub-modules:
    work_item — WorkItem, WorkStatus and the lifecycle transition table
"""

from __future__ import annotations
