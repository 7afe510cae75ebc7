"""Protocol interfaces for all wax_trigger components."""

from wax_trigger.interfaces.filter import ResultFilter
from wax_trigger.interfaces.store import CursorStore
from wax_trigger.interfaces.clients import ChainInfoClient, HistoryClient

__all__ = [
    "ResultFilter",
    "CursorStore",
    "ChainInfoClient", "HistoryClient",
]
