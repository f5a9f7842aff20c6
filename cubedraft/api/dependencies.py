from fastapi import Request

from cubedraft.services.context import DraftContext


def get_context(request: Request) -> DraftContext:
    """Dependency that provides the application's draft context."""
    context: DraftContext = request.app.state.context
    return context
