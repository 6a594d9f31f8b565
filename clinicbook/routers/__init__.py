# Routers package
from . import appointments_router
from . import availability_router
from . import schedules_router

__all__ = [
    "appointments_router",
    "availability_router",
    "schedules_router",
]
