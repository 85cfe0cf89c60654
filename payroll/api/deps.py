from enum import Enum
from typing import Callable, Optional

from fastapi import Depends, Header, Request
from pydantic import BaseModel

from payroll.core.errors import Forbidden, InvalidTokenError, Unauthorized
from payroll.core.tokens import TokenIssuer, TokenKind, token_issuer
from payroll.db.session import get_db  # noqa: F401  re-exported for routers

NO_TENANT = "Company not set up for this account"


class CurrentIdentity(BaseModel):
    id: str
    email: Optional[str] = None
    company_id: Optional[str] = None


class RefreshIdentity(CurrentIdentity):
    refresh_token: str


class TenantPolicy(str, Enum):
    OPTIONAL = "optional"   # e.g. company creation
    REQUIRED = "required"   # tenant-scoped resources


def get_token_issuer() -> TokenIssuer:
    return token_issuer


# ----------------------------------------------------------------------
# Bearer from the Authorization header (no OAuth2PasswordBearer)
# ----------------------------------------------------------------------
def get_bearer_token(authorization: Optional[str] = Header(None, alias="Authorization")) -> str:
    parts = (authorization or "").split()
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1]:
        raise Unauthorized("Missing token")
    return parts[1]


# ----------------------------------------------------------------------
# Access guard
# ----------------------------------------------------------------------
def get_current_identity(
    request: Request,
    token: str = Depends(get_bearer_token),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> CurrentIdentity:
    try:
        claims = issuer.verify(TokenKind.ACCESS, token)
    except InvalidTokenError:
        raise Unauthorized("Invalid token")

    identity = CurrentIdentity(id=claims.sub, email=claims.email, company_id=claims.company_id)
    request.state.identity = identity
    return identity


def require_identity(tenant: TenantPolicy = TenantPolicy.OPTIONAL) -> Callable[..., CurrentIdentity]:
    """
    Use: Depends(require_identity(TenantPolicy.REQUIRED))
    Rejects tokens without a companyId claim on tenant-scoped endpoints.
    """
    def _checker(identity: CurrentIdentity = Depends(get_current_identity)) -> CurrentIdentity:
        if tenant is TenantPolicy.REQUIRED and not identity.company_id:
            raise Forbidden(NO_TENANT)
        return identity

    return _checker


# ----------------------------------------------------------------------
# Refresh guard: the raw token is kept so the service can hash-compare it
# ----------------------------------------------------------------------
def get_refresh_identity(
    request: Request,
    authorization: Optional[str] = Header(None, alias="Authorization"),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> RefreshIdentity:
    token = get_bearer_token(authorization)
    try:
        claims = issuer.verify(TokenKind.REFRESH, token)
    except InvalidTokenError:
        raise Unauthorized("Invalid refresh token")

    if not claims.sub or not claims.email:
        raise Unauthorized("Invalid refresh token")

    _, _, raw = (authorization or "").partition(" ")
    raw = raw.strip()
    if not raw:
        raise Unauthorized("Missing refresh token")

    identity = RefreshIdentity(
        id=claims.sub,
        email=claims.email,
        company_id=claims.company_id,
        refresh_token=raw,
    )
    request.state.identity = identity
    return identity
