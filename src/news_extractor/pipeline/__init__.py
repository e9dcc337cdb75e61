"""Batch extraction pipeline.

Sub-modules:
- ``outcomes``       — tagged attempt outcomes and the batch report
- ``result_writer``  — turns outcomes into store updates
- ``outbox``         — local spill file for updates that failed to persist
- ``ledger``         — attempt counting and the give-up decision
- ``dispatcher``     — bounded-concurrency batch execution
- ``runner``         — one end-to-end invocation
"""
