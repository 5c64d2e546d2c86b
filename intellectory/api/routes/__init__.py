"""API route modules."""

from intellectory.api.routes.bins import router as bins_router
from intellectory.api.routes.commands import router as commands_router
from intellectory.api.routes.health import router as health_router
from intellectory.api.routes.reports import router as reports_router
from intellectory.api.routes.stock import router as stock_router
from intellectory.api.routes.suppliers import router as suppliers_router
from intellectory.api.routes.teams import router as teams_router

__all__ = [
    "health_router",
    "teams_router",
    "stock_router",
    "suppliers_router",
    "bins_router",
    "commands_router",
    "reports_router",
]
