from esa_rationale.utils.db import MAX_HISTORY_ROWS, AuditStore

__all__ = [
    "AuditStore",
    "MAX_HISTORY_ROWS",
]
