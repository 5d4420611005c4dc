from fastapi import Request

from port.user_repository import UserRepository
from services.auth_middleware import AuthMiddleware
from services.token_service import TokenService
from services.user_service import UserService


def get_user_repo(request: Request) -> UserRepository:
    return request.app.state.user_repo


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_user_service(request: Request) -> UserService:
    return UserService(
        get_user_repo(request),
        get_token_service(request),
        request.app.state.credential_verifier,
    )


def get_auth_middleware(request: Request) -> AuthMiddleware:
    return AuthMiddleware(get_token_service(request), get_user_repo(request))
