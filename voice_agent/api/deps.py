from fastapi import HTTPException, status

from voice_agent.core.container import Container, get_container
from voice_agent.core.errors import Conflict, MalformedInput, ToolError, UpstreamUnavailable


def container_dep() -> Container:
    """Overridable in tests via app.dependency_overrides."""
    return get_container()


def http_error(exc: ToolError) -> HTTPException:
    if isinstance(exc, MalformedInput):
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, Conflict):
        code = status.HTTP_409_CONFLICT
    elif isinstance(exc, UpstreamUnavailable):
        code = status.HTTP_502_BAD_GATEWAY
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=code, detail=exc.message)
