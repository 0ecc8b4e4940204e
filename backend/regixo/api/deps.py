from fastapi import Request, Response

from regixo.db.session import get_db
from regixo.services.throttle import resolve_client_ip

__all__ = ["get_db", "get_client_ip", "preflight_response"]


def get_client_ip(request: Request) -> str:
    """Dependency resolving the originating address used for throttling"""
    return resolve_client_ip(request.headers)


def preflight_response() -> Response:
    """Bare OPTIONS answer; real CORS preflights are handled by the middleware"""
    return Response(status_code=204)
