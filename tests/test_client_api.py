import asyncio
import time

import httpx
import pytest
from jose import jwt

from payroll.client.api import ApiClient, error_message, is_auth_url
from payroll.client.singleflight import SingleFlight
from payroll.client.storage import MemoryStorage
from payroll.client.tokens import TokenStore
from payroll.core.tokens import TokenKind

BASE = "http://payroll.test/api"


def _jwt(exp_in):
    return jwt.encode({"sub": "u1", "exp": int(time.time()) + exp_in}, "k", algorithm="HS256")


def _store(access, refresh="rt-1"):
    store = TokenStore(MemoryStorage())
    store.save_tokens(access, refresh)
    return store


class FakeServer:
    """Accepts only ``valid`` access tokens and hands out ``fresh`` on refresh."""

    def __init__(self, valid, fresh, refresh_status=200, refresh_delay=0.02):
        self.valid = set(valid)
        self.fresh = fresh
        self.refresh_status = refresh_status
        self.refresh_delay = refresh_delay
        self.refresh_calls = 0
        self.seen = []

    async def __call__(self, request):
        if request.url.path.endswith("/auth/refresh"):
            self.refresh_calls += 1
            await asyncio.sleep(self.refresh_delay)
            if self.refresh_status != 200:
                return httpx.Response(self.refresh_status, json={"code": "UNAUTHORIZED", "message": "Refresh not allowed"})
            self.valid.add(self.fresh)
            return httpx.Response(200, json={"access_token": self.fresh, "refresh_token": "rt-2"})

        auth = request.headers.get("Authorization")
        self.seen.append((request.url.path, auth))
        if request.url.path.endswith("/auth/login"):
            return httpx.Response(200, json={
                "user": {"id": "u1", "email": "a@x.com", "companyId": None},
                "access_token": "login-access",
                "refresh_token": "login-refresh",
            })
        if request.url.path.endswith("/auth/logout"):
            return httpx.Response(200, json={"success": True})
        if auth and auth.removeprefix("Bearer ") in self.valid:
            return httpx.Response(200, json={"ok": True})
        return httpx.Response(401, json={"code": "UNAUTHORIZED", "message": "Invalid token"})


def _client(server, store, **kwargs):
    return ApiClient(BASE, token_store=store, transport=httpx.MockTransport(server), **kwargs)


def test_is_auth_url():
    assert is_auth_url("/auth/login")
    assert is_auth_url("http://x/api/auth/refresh")
    assert not is_auth_url("/departments")
    assert not is_auth_url(None)


def test_error_message_prefers_server_message():
    request = httpx.Request("GET", "http://x")
    response = httpx.Response(409, json={"code": "CONFLICT", "message": "Email already in use"}, request=request)
    exc = httpx.HTTPStatusError("conflict", request=request, response=response)
    assert error_message(exc) == "Email already in use"

    bare = httpx.HTTPStatusError("err", request=request, response=httpx.Response(500, text="boom", request=request))
    assert error_message(bare, "fallback") == "fallback"
    assert error_message(RuntimeError("x"), "fallback") == "fallback"


async def test_singleflight_shares_one_call():
    flight = SingleFlight()
    calls = 0

    async def work():
        nonlocal calls
        calls += 1
        await asyncio.sleep(0.01)
        return calls

    results = await asyncio.gather(*(flight.do(work) for _ in range(5)))
    assert results == [1] * 5
    assert not flight.in_flight

    assert await flight.do(work) == 2


async def test_singleflight_shares_failures():
    flight = SingleFlight()

    async def boom():
        await asyncio.sleep(0.01)
        raise RuntimeError("nope")

    results = await asyncio.gather(*(flight.do(boom) for _ in range(3)), return_exceptions=True)
    assert all(isinstance(r, RuntimeError) for r in results)
    assert not flight.in_flight


async def test_attaches_bearer_token():
    server = FakeServer(valid={"a1"}, fresh="unused")
    async with _client(server, _store("a1")) as client:
        res = await client.get("/departments")
    assert res.json() == {"ok": True}
    assert server.seen == [("/api/departments", "Bearer a1")]
    assert server.refresh_calls == 0


async def test_concurrent_401s_trigger_one_refresh():
    server = FakeServer(valid=set(), fresh="a2")
    store = _store("a1")
    async with _client(server, store) as client:
        responses = await asyncio.gather(*(client.get("/departments") for _ in range(5)))

    assert all(r.status_code == 200 for r in responses)
    assert server.refresh_calls == 1
    assert store.get_access_token() == "a2"
    assert store.get_refresh_token() == "rt-2"
    retried = [auth for _, auth in server.seen if auth == "Bearer a2"]
    assert len(retried) == 5


async def test_expiring_token_is_refreshed_before_sending():
    fresh = _jwt(900)
    server = FakeServer(valid={fresh}, fresh=fresh)
    store = _store(_jwt(10))
    async with _client(server, store) as client:
        results = await asyncio.gather(*(client.get("/departments") for _ in range(5)))

    assert all(r.status_code == 200 for r in results)
    assert server.refresh_calls == 1
    # nobody went out with the stale token
    assert {auth for _, auth in server.seen} == {f"Bearer {fresh}"}


async def test_rejected_refresh_ends_session_once():
    server = FakeServer(valid=set(), fresh="a2", refresh_status=401)
    store = _store("a1")
    expired = []
    async with _client(server, store, on_session_expired=lambda: expired.append(True)) as client:
        with pytest.raises(httpx.HTTPStatusError) as err:
            await client.get("/departments")

    assert err.value.response.status_code == 401
    assert server.refresh_calls == 1
    assert store.get_access_token() is None
    assert store.get_refresh_token() is None
    assert expired == [True]


async def test_concurrent_requests_with_rejected_refresh_end_session_once():
    server = FakeServer(valid=set(), fresh="a2", refresh_status=401)
    store = _store("a1")
    expired = []
    async with _client(server, store, on_session_expired=lambda: expired.append(True)) as client:
        results = await asyncio.gather(
            *(client.get("/departments") for _ in range(5)), return_exceptions=True
        )
        assert all(isinstance(r, httpx.HTTPStatusError) for r in results)
        assert server.refresh_calls == 1
        assert expired == [True]

        # later anonymous 401s do not end an already-ended session again
        with pytest.raises(httpx.HTTPStatusError):
            await client.get("/departments")

    assert server.refresh_calls == 1
    assert expired == [True]
    assert store.get_refresh_token() is None


async def test_401_without_refresh_token_ends_session():
    server = FakeServer(valid=set(), fresh="a2")
    store = TokenStore(MemoryStorage())
    store.save_tokens("a1")
    expired = []
    async with _client(server, store, on_session_expired=lambda: expired.append(True)) as client:
        with pytest.raises(httpx.HTTPStatusError):
            await client.get("/departments")
    assert server.refresh_calls == 0
    assert expired == [True]
    assert store.get_access_token() is None


async def test_retry_happens_only_once():
    server = FakeServer(valid=set(), fresh="a2")

    # the refreshed token is still refused
    async def refuse_everything(request):
        response = await server(request)
        server.valid.clear()
        return response

    store = _store("a1")
    async with ApiClient(BASE, token_store=store, transport=httpx.MockTransport(refuse_everything)) as client:
        with pytest.raises(httpx.HTTPStatusError) as err:
            await client.get("/departments")

    assert err.value.response.status_code == 401
    assert server.refresh_calls == 1
    assert len(server.seen) == 2
    # the refresh itself succeeded, so the session survives
    assert store.get_access_token() == "a2"


async def test_other_errors_are_not_retried():
    async def handler(request):
        return httpx.Response(500, json={"code": "INTERNAL_ERROR", "message": "Internal server error."})

    store = _store("a1")
    async with ApiClient(BASE, token_store=store, transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(httpx.HTTPStatusError) as err:
            await client.get("/departments")
    assert err.value.response.status_code == 500
    assert store.get_access_token() == "a1"


async def test_network_failure_during_refresh_keeps_tokens():
    async def handler(request):
        if request.url.path.endswith("/auth/refresh"):
            raise httpx.ConnectError("offline", request=request)
        return httpx.Response(401, json={"code": "UNAUTHORIZED", "message": "Invalid token"})

    store = _store("a1")
    expired = []
    async with ApiClient(
        BASE,
        token_store=store,
        transport=httpx.MockTransport(handler),
        on_session_expired=lambda: expired.append(True),
    ) as client:
        with pytest.raises(httpx.ConnectError):
            await client.get("/departments")

    assert store.get_access_token() == "a1"
    assert store.get_refresh_token() == "rt-1"
    assert expired == []


async def test_network_failure_during_proactive_refresh_sends_current_token():
    stale = _jwt(5)
    seen = []

    async def handler(request):
        if request.url.path.endswith("/auth/refresh"):
            raise httpx.ConnectError("offline", request=request)
        seen.append(request.headers.get("Authorization"))
        return httpx.Response(200, json={"ok": True})

    store = _store(stale)
    async with ApiClient(BASE, token_store=store, transport=httpx.MockTransport(handler)) as client:
        res = await client.get("/departments")

    assert res.status_code == 200
    assert seen == [f"Bearer {stale}"]
    assert store.get_refresh_token() == "rt-1"


async def test_auth_urls_pass_through_untouched():
    server = FakeServer(valid=set(), fresh="a2")
    store = _store(_jwt(5))
    async with _client(server, store) as client:
        data = await client.login("a@x.com", "secret1")

    assert server.refresh_calls == 0
    assert server.seen == [("/api/auth/login", None)]
    assert data["user"]["id"] == "u1"
    assert store.get_access_token() == "login-access"
    assert store.get_refresh_token() == "login-refresh"
    assert store.get_user() == {"id": "u1", "email": "a@x.com", "companyId": None}


async def test_logout_sends_access_token_and_clears_session():
    server = FakeServer(valid={"a1"}, fresh="a2")
    store = _store("a1")
    expired = []
    async with _client(server, store, on_session_expired=lambda: expired.append(True)) as client:
        await client.logout()

    assert server.seen == [("/api/auth/logout", "Bearer a1")]
    assert store.get_access_token() is None
    assert expired == [True]


async def test_logout_clears_session_even_when_server_fails():
    async def handler(request):
        raise httpx.ConnectError("offline", request=request)

    store = _store("a1")
    async with ApiClient(BASE, token_store=store, transport=httpx.MockTransport(handler)) as client:
        await client.logout()
    assert store.get_refresh_token() is None


async def test_end_to_end_transparent_refresh(app, issuer):
    transport = httpx.ASGITransport(app=app)
    store = TokenStore(MemoryStorage())
    async with ApiClient("http://testserver/api", token_store=store, transport=transport) as client:
        await client.signup("alice@example.com", "secret1")
        session = await client.login("alice@example.com", "secret1")
        assert (await client.get("/company/me")).json() is None

        # swap in an already-expired access token for the same user
        stale = issuer.sign(
            TokenKind.ACCESS,
            sub=session["user"]["id"],
            email="alice@example.com",
            company_id=None,
            expires_in=-60,
        )
        store.save_tokens(stale)
        previous_refresh = store.get_refresh_token()

        res = await client.get("/company/me")
        assert res.status_code == 200
        assert store.get_access_token() != stale
        assert store.get_refresh_token() != previous_refresh

        await client.logout()
        assert store.get_refresh_token() is None


async def test_validation_message_reaches_the_caller(app):
    transport = httpx.ASGITransport(app=app)
    async with ApiClient("http://testserver/api", token_store=TokenStore(MemoryStorage()), transport=transport) as client:
        with pytest.raises(httpx.HTTPStatusError) as err:
            await client.signup("alice@example.com", "123")
    assert err.value.response.status_code == 422
    assert error_message(err.value, "fallback").startswith("password:")
