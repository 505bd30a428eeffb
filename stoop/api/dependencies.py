"""FastAPI dependencies shared by the route modules."""

from fastapi import Request

from stoop.services.context import AppContext


def get_context(request: Request) -> AppContext:
    """Return the service graph attached to the running app."""
    return request.app.state.context
