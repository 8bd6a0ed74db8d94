"""Route handlers for Web API."""

from eyelevel.web.routes.analyze import router as analyze_router
from eyelevel.web.routes.entries import router as entries_router
from eyelevel.web.routes.health import router as health_router
from eyelevel.web.routes.students import router as students_router

__all__ = [
    "analyze_router",
    "entries_router",
    "health_router",
    "students_router",
]
