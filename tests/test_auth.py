from urllib.parse import parse_qs

import httpx
import pytest
import respx

from kb_ke_util.auth import LOGIN_PATH, TOKEN_PATH, AuthToken, login, validate_token
from kb_ke_util.errors import AuthorizationError, InsecureTransportError, TransportError

from .stubs import AUTH_URL, TOKEN


@respx.mock
def test_validate_token_returns_user():
    route = respx.get(AUTH_URL + TOKEN_PATH).mock(
        return_value=httpx.Response(200, json={"user": "alice", "type": "Login"})
    )
    tok = validate_token(TOKEN, auth_url=AUTH_URL)
    assert tok == AuthToken(token=TOKEN, user_name="alice")
    assert route.calls.last.request.headers["Authorization"] == TOKEN


@respx.mock
def test_rejected_token_raises_authorization_error():
    respx.get(AUTH_URL + TOKEN_PATH).mock(
        return_value=httpx.Response(401, json={"error": {"httpcode": 401, "message": "10020 Invalid token"}})
    )
    with pytest.raises(AuthorizationError) as ei:
        validate_token("bad", auth_url=AUTH_URL)
    assert ei.value.http_status == 401
    assert "Invalid token" in ei.value.message


@respx.mock
def test_unreachable_auth_service_is_a_transport_error():
    respx.get(AUTH_URL + TOKEN_PATH).mock(side_effect=httpx.ConnectError("refused"))
    with pytest.raises(TransportError):
        validate_token(TOKEN, auth_url=AUTH_URL)


def test_empty_token_rejected_without_io():
    with pytest.raises(AuthorizationError):
        validate_token("", auth_url=AUTH_URL)


def test_plain_http_auth_needs_opt_in():
    with pytest.raises(InsecureTransportError):
        validate_token(TOKEN, auth_url="http://auth.local")


@respx.mock
def test_login_exchanges_credentials_for_token():
    route = respx.post(AUTH_URL + LOGIN_PATH).mock(
        return_value=httpx.Response(200, json={"token": "NEWTOKEN", "user_id": "bob"})
    )
    tok = login("bob", "s3cret", auth_url=AUTH_URL)
    assert tok.token == "NEWTOKEN"
    assert tok.user_name == "bob"

    form = parse_qs(route.calls.last.request.read().decode())
    assert form == {"user_id": ["bob"], "password": ["s3cret"], "fields": ["token,user_id"]}


@respx.mock
def test_login_failure():
    respx.post(AUTH_URL + LOGIN_PATH).mock(return_value=httpx.Response(401, text="LoginFailure"))
    with pytest.raises(AuthorizationError) as ei:
        login("bob", "wrong", auth_url=AUTH_URL)
    assert ei.value.message == "LoginFailure"


@respx.mock
def test_login_without_token_in_reply():
    respx.post(AUTH_URL + LOGIN_PATH).mock(return_value=httpx.Response(200, json={"user_id": "bob"}))
    with pytest.raises(AuthorizationError):
        login("bob", "s3cret", auth_url=AUTH_URL)


def test_token_repr_hides_secret():
    assert TOKEN not in repr(AuthToken(token=TOKEN, user_name="alice"))
