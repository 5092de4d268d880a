"""Services Layer: async orchestrators around the pure core.

Invariants:
    - Every service reads and writes through KitMapRepository, never through the ORM
    - Services own the transaction: commit on success, rollback on a rejected write
"""
