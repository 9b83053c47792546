"""Tests for session cookie encoding."""

import pytest
from starlette.requests import Request

from saaskit.web.cookies import (
    decode_session_cookie,
    encode_cleared_session_cookie,
    encode_cookie,
    encode_session_cookie,
    read_session_cookie,
)

SESSION_ID = "018f2a3b4c5d0123456789abcdef0123456789abcdef"


class TestEncode:
    def test_session_cookie(self):
        assert encode_session_cookie(SESSION_ID) == f"app_session={SESSION_ID}; Path=/; HttpOnly; Max-Age=86400; SameSite=Lax"

    def test_secure_flag_is_last(self):
        assert encode_session_cookie(SESSION_ID, secure=True) == (
            f"app_session={SESSION_ID}; Path=/; HttpOnly; Max-Age=86400; SameSite=Lax; Secure"
        )

    def test_custom_max_age(self):
        assert encode_session_cookie(SESSION_ID, max_age=60).endswith("Max-Age=60; SameSite=Lax")

    def test_cleared_cookie(self):
        assert encode_cleared_session_cookie() == "app_session=; Path=/; HttpOnly; Max-Age=0; SameSite=Lax"

    def test_generic_cookie(self):
        assert encode_cookie("app_oauth_state", "xyz", 600) == "app_oauth_state=xyz; Path=/; HttpOnly; Max-Age=600; SameSite=Lax"


class TestDecode:
    def test_reads_own_encoding(self):
        name_value = encode_session_cookie(SESSION_ID).split(";", 1)[0]
        assert decode_session_cookie(name_value) == SESSION_ID

    def test_ignores_other_cookies(self):
        header = f"theme=dark; app_session={SESSION_ID}; lang=en"
        assert decode_session_cookie(header) == SESSION_ID

    @pytest.mark.parametrize("header", [None, "", "theme=dark", "app_session="])
    def test_absent_or_empty(self, header):
        assert decode_session_cookie(header) is None


def _request(cookie_header: str | None) -> Request:
    headers = [(b"cookie", cookie_header.encode())] if cookie_header is not None else []
    return Request({"type": "http", "method": "GET", "path": "/", "headers": headers})


class TestReadFromRequest:
    def test_reads_session_id(self):
        assert read_session_cookie(_request(f"lang=en; app_session={SESSION_ID}")) == SESSION_ID

    @pytest.mark.parametrize("header", [None, "lang=en", "app_session="])
    def test_no_session_presented(self, header):
        assert read_session_cookie(_request(header)) is None
