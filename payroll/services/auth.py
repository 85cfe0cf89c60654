# payroll/services/auth.py
"""
Signup / login / refresh / logout orchestration.

A user holds at most one live refresh token: every login and every refresh
overwrites ``users.hashed_rt`` with the hash of the newly issued token, and
logout clears it. A refresh token that no longer matches that hash is rejected
even while its signature and expiry are still valid.
"""
from __future__ import annotations

import logging
from typing import Any, Dict

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from payroll.core.errors import Conflict, Unauthorized
from payroll.core.security_password import (
    hash_password,
    hash_refresh_token,
    verify_password,
    verify_refresh_token,
)
from payroll.core.tokens import TokenIssuer, TokenPair, token_issuer
from payroll.crud.company import company_crud
from payroll.crud.user import normalize_email, user_crud

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
REFRESH_NOT_ALLOWED = "Refresh not allowed"
EMAIL_IN_USE = "Email already in use"
SIGNUP_MESSAGE = "Signup successful. Please login to create your company."


class AuthService:
    def __init__(self, db: Session, issuer: TokenIssuer | None = None):
        self.db = db
        self.issuer = issuer or token_issuer

    def _issue_and_store(self, user_id: str, email: str, company_id: str | None) -> TokenPair:
        pair = self.issuer.issue_pair(sub=user_id, email=email, company_id=company_id)
        user_crud.set_refresh_hash(self.db, user_id, hash_refresh_token(pair.refresh_token))
        return pair

    def signup(self, email: str, password: str) -> Dict[str, Any]:
        email = normalize_email(email)
        if user_crud.get_by_email(self.db, email):
            raise Conflict(EMAIL_IN_USE)

        password_hash = hash_password(password)
        try:
            user = user_crud.create_with_password_hash(self.db, email=email, password_hash=password_hash)
        except IntegrityError:
            # lost a race against a concurrent signup for the same address
            self.db.rollback()
            raise Conflict(EMAIL_IN_USE)

        logger.info("User signed up", extra={"user_id": user.id})
        return {"user": {"id": user.id, "email": user.email}, "message": SIGNUP_MESSAGE}

    def login(self, email: str, password: str) -> Dict[str, Any]:
        email = normalize_email(email)
        user = user_crud.get_by_email(self.db, email)
        if not user or not verify_password(password, user.password_hash):
            logger.info("Login rejected", extra={"reason": "unknown_email" if not user else "bad_password"})
            raise Unauthorized(INVALID_CREDENTIALS)

        company_id = company_crud.get_id_by_user_id(self.db, user.id)
        pair = self._issue_and_store(user.id, user.email, company_id)

        logger.info("User logged in", extra={"user_id": user.id, "company_id": company_id})
        return {
            "user": {"id": user.id, "email": user.email, "companyId": company_id},
            "access_token": pair.access_token,
            "refresh_token": pair.refresh_token,
        }

    def refresh(self, user_id: str, refresh_token: str) -> Dict[str, str]:
        """Rotate the token pair. The caller must already have verified ``refresh_token``."""
        if not refresh_token:
            raise Unauthorized("Missing refresh token")
        if not user_id:
            raise Unauthorized("Missing user")

        user = user_crud.get_for_update(self.db, user_id)
        if not user or not user.hashed_rt:
            logger.warning("Refresh rejected", extra={"user_id": user_id, "reason": "no_active_session"})
            raise Unauthorized(REFRESH_NOT_ALLOWED)

        if not verify_refresh_token(refresh_token, user.hashed_rt):
            logger.warning("Refresh rejected", extra={"user_id": user_id, "reason": "superseded_token"})
            raise Unauthorized(REFRESH_NOT_ALLOWED)

        company_id = company_crud.get_id_by_user_id(self.db, user.id)
        pair = self._issue_and_store(user.id, user.email, company_id)

        logger.info("Tokens rotated", extra={"user_id": user.id, "company_id": company_id})
        return {"access_token": pair.access_token, "refresh_token": pair.refresh_token}

    def logout(self, user_id: str) -> Dict[str, bool]:
        if not user_id or not user_crud.set_refresh_hash(self.db, user_id, None):
            raise Unauthorized("Unknown user")
        logger.info("User logged out", extra={"user_id": user_id})
        return {"success": True}
