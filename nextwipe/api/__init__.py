"""nextwipe API layer: routes, schemas and middleware."""

from nextwipe.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from nextwipe.api.routes import router
from nextwipe.api.schemas import (
    CalendarResponse,
    CronResponse,
    ErrorResponse,
    EventsResponse,
    GamesResponse,
    HealthResponse,
)

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "configure_cors",
    "router",
    "CalendarResponse",
    "CronResponse",
    "ErrorResponse",
    "EventsResponse",
    "GamesResponse",
    "HealthResponse",
]
