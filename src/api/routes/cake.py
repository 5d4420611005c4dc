"""Bearer-token protected routes."""

from fastapi import APIRouter, Depends, Header
from fastapi.responses import PlainTextResponse

from api.dependencies import get_auth_middleware
from api.responses import to_response
from services.auth_middleware import AuthMiddleware, get_cake

router = APIRouter(tags=["cake"], default_response_class=PlainTextResponse)


@router.get("/cake")
def read_cake(
    authorization: str | None = Header(None),
    auth: AuthMiddleware = Depends(get_auth_middleware),
):
    """Return the caller's favorite cake. 401 "unauthorized" without a valid token."""
    return to_response(auth.wrap(get_cake)(authorization))
