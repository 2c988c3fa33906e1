"""
Auth API routes: register, login, logout, current user.

Route prefix: /api/auth
"""
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request, status
from sqlalchemy.orm import Session

from ..auth_flow import AuthFlow
from ..db import get_db
from ..exceptions import DuplicateEmailError, InvalidCredentialsError, MalformedTokenError, InvalidTokenError
from ..schemas import AuthResponse, MessageResponse, PublicUser, UserCreate, UserLogin
from ..tokens import parse_bearer
from ..users import UserStore, normalize_email
from ..utils.event_logger import log_auth_event

router = APIRouter(prefix="/api/auth", tags=["auth"])


def get_auth_flow(request: Request, db: Session = Depends(get_db)) -> AuthFlow:
    """Build the flow from the process-scoped token issuer and session cache."""
    return AuthFlow(
        UserStore(db),
        request.app.state.token_issuer,
        request.app.state.session_cache,
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(payload: UserCreate, request: Request, flow: AuthFlow = Depends(get_auth_flow)):
    try:
        result = flow.register(payload.email, payload.password, payload.name)
    except DuplicateEmailError:
        log_auth_event("register_conflict", request=request, email=normalize_email(payload.email))
        raise
    log_auth_event("register_success", result.user.id, request)
    return AuthResponse(message="Registration successful", token=result.token, user=result.user)


@router.post("/login", response_model=AuthResponse)
def login(credentials: UserLogin, request: Request, flow: AuthFlow = Depends(get_auth_flow)):
    try:
        result = flow.login(credentials.email, credentials.password)
    except InvalidCredentialsError:
        log_auth_event("login_failure", request=request, email=normalize_email(credentials.email))
        raise
    log_auth_event("login_success", result.user.id, request)
    return AuthResponse(message="Login successful", token=result.token, user=result.user)


@router.post("/logout", response_model=MessageResponse)
def logout(
    request: Request,
    flow: AuthFlow = Depends(get_auth_flow),
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
):
    # Succeeds whatever the state of the token or the cache
    user_id = flow.logout(parse_bearer(authorization))
    log_auth_event("logout", user_id, request)
    return MessageResponse(message="Logout successful")


@router.get("/me", response_model=PublicUser)
def current_user(
    flow: AuthFlow = Depends(get_auth_flow),
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
):
    """Return the account behind a bearer token. Stateless: the cache is not consulted."""
    token = parse_bearer(authorization)
    if token is None:
        raise MalformedTokenError("Missing bearer token")
    claims = flow.authenticate(token)
    user = flow.users.get(claims["sub"])
    if user is None:
        raise InvalidTokenError("Token subject no longer exists")
    return flow.users.to_public_view(user)
