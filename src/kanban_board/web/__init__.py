"""
Web board module - FastAPI-based web interface.
"""

from .app import (
    create_app,
    KanbanWeb,
    WebConfig,
    run_server,
)

__all__ = [
    "create_app",
    "KanbanWeb",
    "WebConfig",
    "run_server",
]
