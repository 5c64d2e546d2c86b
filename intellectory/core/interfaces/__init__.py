"""Abstract interfaces (ports) for infrastructure adapters."""

from intellectory.core.interfaces.llm import (
    HealthStatus,
    ILLMProvider,
    LLMResponse,
)
from intellectory.core.interfaces.stores import (
    IActivityLogStore,
    IBinStore,
    IStockStore,
    ISupplierStore,
    ITeamStore,
)
from intellectory.core.interfaces.table_client import ITableClient, Row, check_identifier

__all__ = [
    # LLM
    "ILLMProvider",
    "LLMResponse",
    "HealthStatus",
    # Storage
    "ITableClient",
    "Row",
    "check_identifier",
    "IStockStore",
    "IActivityLogStore",
    "ISupplierStore",
    "IBinStore",
    "ITeamStore",
]
