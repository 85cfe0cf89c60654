# payroll/core/tokens.py
from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from pydantic import BaseModel

from payroll.core.config import Settings, settings as default_settings
from payroll.core.errors import InvalidTokenError


class TokenKind(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


class TokenClaims(BaseModel):
    """Decoded, verified claim set. ``company_id`` is None until the user owns a company."""

    sub: str
    email: Optional[str] = None
    company_id: Optional[str] = None
    type: TokenKind
    jti: Optional[str] = None
    iat: Optional[int] = None
    exp: int

    @property
    def has_tenant(self) -> bool:
        return self.company_id is not None


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TokenIssuer:
    """Signs and verifies access/refresh JWTs, each kind with its own secret and TTL."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or default_settings

    def _secret(self, kind: TokenKind) -> str:
        if kind is TokenKind.ACCESS:
            return self.settings.JWT_ACCESS_SECRET
        return self.settings.JWT_REFRESH_SECRET

    def ttl(self, kind: TokenKind) -> int:
        if kind is TokenKind.ACCESS:
            return self.settings.JWT_ACCESS_EXPIRES_SEC
        return self.settings.JWT_REFRESH_EXPIRES_SEC

    def sign(
        self,
        kind: TokenKind,
        *,
        sub: str,
        email: str,
        company_id: Optional[str],
        expires_in: Optional[int] = None,
    ) -> str:
        now = _now()
        lifetime = self.ttl(kind) if expires_in is None else expires_in
        payload: Dict[str, Any] = {
            "sub": str(sub),
            "email": email,
            "companyId": company_id,
            "type": kind.value,
            "jti": uuid.uuid4().hex,
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(seconds=lifetime)).timestamp()),
        }
        return jwt.encode(payload, self._secret(kind), algorithm=self.settings.JWT_ALGORITHM)

    def issue_pair(self, *, sub: str, email: str, company_id: Optional[str]) -> TokenPair:
        return TokenPair(
            access_token=self.sign(TokenKind.ACCESS, sub=sub, email=email, company_id=company_id),
            refresh_token=self.sign(TokenKind.REFRESH, sub=sub, email=email, company_id=company_id),
        )

    def verify(self, kind: TokenKind, token: str) -> TokenClaims:
        if not token:
            raise InvalidTokenError("Empty token")
        try:
            payload = jwt.decode(token, self._secret(kind), algorithms=[self.settings.JWT_ALGORITHM])
        except JWTError as exc:
            raise InvalidTokenError(str(exc)) from exc

        if not isinstance(payload, dict):
            raise InvalidTokenError("Malformed claims")
        if payload.get("type") != kind.value:
            raise InvalidTokenError(f"Expected a {kind.value} token")
        if not payload.get("sub") or not isinstance(payload.get("exp"), int):
            raise InvalidTokenError("Missing required claims")

        company_id = payload.get("companyId")
        return TokenClaims(
            sub=str(payload["sub"]),
            email=payload.get("email"),
            company_id=str(company_id) if company_id else None,
            type=kind,
            jti=payload.get("jti"),
            iat=payload.get("iat"),
            exp=payload["exp"],
        )


token_issuer = TokenIssuer()
