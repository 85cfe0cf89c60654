# payroll/client/api.py
"""
HTTP client for the payroll API with transparent token refresh.

Every non-auth request gets ``Authorization: Bearer <access>``. An access token
about to expire is refreshed before the request goes out, and a 401 triggers
one refresh-and-retry. Refresh calls are coalesced: however many requests need
a new token at the same moment, ``/auth/refresh`` is called once and they all
continue with its result. Rotation on the server makes this mandatory, since a
second concurrent refresh would present an already-superseded refresh token.
"""
from __future__ import annotations

import logging
import os
from typing import Any, Callable, Dict, Optional

import httpx

from payroll.client.singleflight import SingleFlight
from payroll.client.tokens import TokenStore

logger = logging.getLogger(__name__)

API_BASE = os.getenv("PAYROLL_API_URL", "http://localhost:3333/api")
DEFAULT_TIMEOUT = 20.0
REFRESH_WINDOW_SECONDS = 30

AUTH_PATHS = ("/auth/login", "/auth/signup", "/auth/refresh", "/auth/logout")


def is_auth_url(url: Any) -> bool:
    if not url:
        return False
    url = str(url)
    return any(path in url for path in AUTH_PATHS)


def error_message(exc: BaseException, fallback: str = "Something went wrong. Please try again.") -> str:
    """Server ``message`` verbatim when the error carries one, else ``fallback``."""
    if isinstance(exc, httpx.HTTPStatusError):
        try:
            body = exc.response.json()
        except ValueError:
            return fallback
        if isinstance(body, dict):
            message = body.get("message") or body.get("detail")
            if isinstance(message, str) and message:
                return message
    return fallback


class ApiClient:
    def __init__(
        self,
        base_url: str = API_BASE,
        *,
        token_store: Optional[TokenStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = DEFAULT_TIMEOUT,
        refresh_window: int = REFRESH_WINDOW_SECONDS,
        on_session_expired: Optional[Callable[[], Any]] = None,
    ):
        self.tokens = token_store or TokenStore()
        self.refresh_window = refresh_window
        self.on_session_expired = on_session_expired or self._default_session_expired
        self._refresh_flight: SingleFlight[Optional[str]] = SingleFlight()
        self._http = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    @staticmethod
    def _default_session_expired() -> None:
        logger.warning("Session expired; the user must log in again")

    # ------------------------------------------------------------------
    # refresh
    # ------------------------------------------------------------------
    async def _call_refresh(self) -> Optional[str]:
        refresh_token = self.tokens.get_refresh_token()
        if not refresh_token:
            return None

        logger.debug("Calling /auth/refresh")
        # Sent on the raw client so it never re-enters the refresh logic
        response = await self._http.post(
            "/auth/refresh",
            headers={"Authorization": f"Bearer {refresh_token}"},
        )
        if response.is_error:
            logger.info("Refresh rejected with HTTP %s", response.status_code)
            return None

        try:
            data = response.json()
        except ValueError:
            return None
        new_access = data.get("access_token") if isinstance(data, dict) else None
        if not new_access or not isinstance(new_access, str):
            return None
        new_refresh = data.get("refresh_token")
        self.tokens.save_tokens(new_access, new_refresh if isinstance(new_refresh, str) else None)
        logger.debug("Refresh succeeded")
        return new_access

    async def refresh_access_token(self) -> Optional[str]:
        """
        New access token, or None when there is no refresh token or the server
        rejected it. Transport errors propagate. Concurrent callers share one call.
        """
        if not self.tokens.get_refresh_token():
            return None
        return await self._refresh_flight.do(self._call_refresh)

    async def _access_token_for_request(self) -> Optional[str]:
        token = self.tokens.get_access_token()
        if (
            token
            and self.tokens.get_refresh_token()
            and self.tokens.is_expiring_soon(token, self.refresh_window)
        ):
            logger.debug("Access token expiring soon; refreshing before the request")
            try:
                fresh = await self.refresh_access_token()
            except httpx.TransportError as exc:
                logger.warning("Proactive refresh failed, sending current token: %s", exc)
                fresh = None
            if fresh:
                token = fresh
        return token

    # ------------------------------------------------------------------
    # requests
    # ------------------------------------------------------------------
    async def _send(self, method: str, url: str, headers: Dict[str, str], kwargs: Dict[str, Any]) -> httpx.Response:
        response = await self._http.request(method, url, headers=headers, **kwargs)
        response.raise_for_status()
        return response

    def _expire_session(self) -> None:
        """Clear the stored session and notify, once per session.

        Concurrent requests that share one rejected refresh all land here; only
        the first still finds tokens to clear, so only it calls the callback.
        """
        had_session = bool(
            self.tokens.get_access_token() or self.tokens.get_refresh_token() or self.tokens.get_user()
        )
        self.tokens.clear_tokens()
        if had_session:
            self.on_session_expired()

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        headers: Dict[str, str] = dict(kwargs.pop("headers", None) or {})

        # Auth endpoints go out exactly as the caller built them
        if is_auth_url(url):
            return await self._send(method, url, headers, kwargs)

        token = await self._access_token_for_request()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        else:
            headers.pop("Authorization", None)

        try:
            return await self._send(method, url, headers, kwargs)
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code != 401:
                raise
            original_error = exc

        # 401: refresh once and retry once
        if not self.tokens.get_refresh_token():
            logger.info("401 without a refresh token; ending session")
            self._expire_session()
            raise original_error

        current = self.tokens.get_access_token()
        if current and current != token:
            # another request already refreshed while this one was in flight
            new_token: Optional[str] = current
        else:
            logger.info("401 on %s %s; refreshing and retrying", method.upper(), url)
            new_token = await self.refresh_access_token()
        if not new_token:
            logger.info("Refresh failed after 401; ending session")
            self._expire_session()
            raise original_error

        headers["Authorization"] = f"Bearer {new_token}"
        # the retried request is not retried again
        return await self._send(method, url, headers, kwargs)

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    async def patch(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PATCH", url, **kwargs)

    async def put(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PUT", url, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("DELETE", url, **kwargs)

    # ------------------------------------------------------------------
    # auth helpers
    # ------------------------------------------------------------------
    async def login(self, email: str, password: str) -> Dict[str, Any]:
        response = await self.post("/auth/login", json={"email": email, "password": password})
        data = response.json() or {}
        if data.get("access_token") and data.get("refresh_token"):
            self.tokens.save_tokens(data["access_token"], data["refresh_token"], data.get("user"))
        return data

    async def signup(self, email: str, password: str) -> Dict[str, Any]:
        response = await self.post("/auth/signup", json={"email": email, "password": password})
        return response.json() or {}

    async def logout(self) -> None:
        """Revoke the refresh token server-side (best effort), then always end the local session."""
        token = self.tokens.get_access_token()
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        try:
            await self.post("/auth/logout", headers=headers)
        except httpx.HTTPError as exc:
            logger.info("Server logout failed, clearing local session anyway: %s", exc)
        finally:
            self._expire_session()
