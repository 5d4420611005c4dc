"""User routes (register, login, profile changes).

Handlers only unpack the JSON body and write out the OperationResult;
all rules live in UserService.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from api.dependencies import get_user_service
from api.models import (
    ChangeCakeRequest,
    ChangeEmailRequest,
    ChangePasswordRequest,
    LoginRequest,
    RegisterRequest,
)
from api.responses import to_response
from services.user_service import UserService

router = APIRouter(prefix="/user", tags=["user"], default_response_class=PlainTextResponse)


@router.post("/register", status_code=201)
def register(request: RegisterRequest, service: UserService = Depends(get_user_service)):
    """Register a new user. 201 "registered", 422 on invalid fields, 409 on duplicate email."""
    return to_response(service.register(request.email, request.password, request.favorite_cake))


@router.post("/jwt")
def issue_jwt(request: LoginRequest, service: UserService = Depends(get_user_service)):
    """Exchange email and password for a signed token (response body)."""
    return to_response(service.authenticate(request.email, request.password))


@router.api_route("/me", methods=["GET", "POST"])
def show_my_cake(request: LoginRequest, service: UserService = Depends(get_user_service)):
    return to_response(service.show_my_cake(request.email, request.password))


@router.post("/favorite_cake")
def change_cake(request: ChangeCakeRequest, service: UserService = Depends(get_user_service)):
    return to_response(service.change_cake(request.email, request.password, request.new_cake))


@router.post("/email")
def change_email(request: ChangeEmailRequest, service: UserService = Depends(get_user_service)):
    return to_response(service.change_email(request.email, request.password, request.new_email))


@router.post("/password")
def change_password(request: ChangePasswordRequest, service: UserService = Depends(get_user_service)):
    return to_response(service.change_password(request.email, request.password, request.new_pass))
