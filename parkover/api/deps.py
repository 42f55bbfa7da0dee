"""Request dependencies shared by the v1 endpoints."""

from typing import Optional

from fastapi import Header, HTTPException, Request

from parkover.container import Services
from parkover.identity import RequestIdentity
from parkover.results import Result


def get_services(request: Request) -> Services:
    return request.app.state.services


async def bind_user(x_user_id: Optional[str] = Header(None)) -> Optional[str]:
    """Bind the caller's id (set by the fronting identity provider) to this request."""
    RequestIdentity.set_user_id(x_user_id)
    return x_user_id


def unwrap(result: Result):
    """Return a successful value or raise the failure as an HTTP error."""
    if result.ok:
        return result.value
    raise HTTPException(status_code=result.error.status_code, detail=result.error.detail)
