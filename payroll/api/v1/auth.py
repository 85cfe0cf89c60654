# payroll/api/v1/auth.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from payroll.api.deps import (
    CurrentIdentity,
    RefreshIdentity,
    get_current_identity,
    get_db,
    get_refresh_identity,
    get_token_issuer,
)
from payroll.core.tokens import TokenIssuer
from payroll.schemas.auth import (
    LoginRequest,
    LoginResponse,
    LogoutResponse,
    SignupRequest,
    SignupResponse,
    TokenPairOut,
)
from payroll.services.auth import AuthService

router = APIRouter()


def get_auth_service(
    db: Session = Depends(get_db),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> AuthService:
    return AuthService(db, issuer)


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
def signup(body: SignupRequest, service: AuthService = Depends(get_auth_service)):
    return service.signup(body.email, body.password)


@router.post("/login", response_model=LoginResponse, response_model_by_alias=True)
def login(body: LoginRequest, service: AuthService = Depends(get_auth_service)):
    return service.login(body.email, body.password)


# Refresh token travels as Authorization: Bearer <refresh_token>
@router.post("/refresh", response_model=TokenPairOut)
def refresh(
    identity: RefreshIdentity = Depends(get_refresh_identity),
    service: AuthService = Depends(get_auth_service),
):
    return service.refresh(identity.id, identity.refresh_token)


@router.post("/logout", response_model=LogoutResponse)
def logout(
    identity: CurrentIdentity = Depends(get_current_identity),
    service: AuthService = Depends(get_auth_service),
):
    return service.logout(identity.id)
