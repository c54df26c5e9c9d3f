from src.services import (
    collab_view_service,
    handover_ledger,
    handover_service,
    handover_state_machine,
    task_store_service,
)


__all__ = [
    "collab_view_service",
    "handover_ledger",
    "handover_service",
    "handover_state_machine",
    "task_store_service",
]
