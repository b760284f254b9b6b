"""Tests for the Back Office session client."""

from unittest.mock import MagicMock, patch

import pytest
import requests
from requests.cookies import create_cookie

from primo_pipes.collectors.session import (
    LOGIN_PATH,
    AuthenticatedRedirect,
    Deadline,
    OtherResponse,
    SessionHandle,
    _load_jar,
    _save_jar,
    classify_login_response,
    fetch,
    login,
)
from primo_pipes.exceptions import AuthError, FetchError, ProbeTimeoutError

MENU_URL = "https://primo.example.edu:1601/primo_publishing/admin/action/menus.do?menuKey=x"


def response(status_code=200, location=None, text=""):
    resp = MagicMock()
    resp.status_code = status_code
    resp.headers = {"Location": location} if location else {}
    resp.text = text
    return resp


@pytest.fixture
def jar_path(tmp_path):
    return str(tmp_path / "cookies.dat")


@pytest.fixture
def handle(base_url, jar_path):
    return SessionHandle(base_url=base_url, cookie_jar_path=jar_path, deadline=Deadline(15))


class TestClassifyLoginResponse:
    def test_main_menu_redirect(self):
        outcome = classify_login_response(response(302, MENU_URL))
        assert outcome == AuthenticatedRedirect(MENU_URL)

    def test_plain_200_is_not_success(self):
        outcome = classify_login_response(response(200))
        assert outcome == OtherResponse(200, None)

    def test_redirect_elsewhere(self):
        outcome = classify_login_response(response(302, "/primo_publishing/admin/login.jsp?error=1"))
        assert isinstance(outcome, OtherResponse)
        assert outcome.location.endswith("error=1")


class TestLogin:
    @patch.object(requests.Session, "request")
    def test_success_persists_jar(self, mock_request, base_url, jar_path):
        mock_request.return_value = response(302, MENU_URL)

        handle = login(base_url, "12", "monitor", "secret", jar_path)

        assert handle.base_url == base_url
        assert handle.cookie_jar_path == jar_path
        method, url = mock_request.call_args.args
        assert method == "POST"
        assert url == base_url + LOGIN_PATH
        kwargs = mock_request.call_args.kwargs
        assert kwargs["data"] == {"j_username": "monitor", "j_password": "secret", "customerId": "12"}
        assert kwargs["allow_redirects"] is False
        assert kwargs["timeout"] > 0
        with open(jar_path, encoding="utf-8") as f:
            assert f.readline().startswith("#LWP-Cookies")

    @patch.object(requests.Session, "request")
    def test_rejected_login(self, mock_request, base_url, jar_path, tmp_path):
        mock_request.return_value = response(200, text="<form>login</form>")

        with pytest.raises(AuthError) as exc:
            login(base_url, "12", "monitor", "wrong", jar_path)

        assert "monitor" in str(exc.value)
        assert "wrong" not in str(exc.value)
        assert not (tmp_path / "cookies.dat").exists()

    @patch.object(requests.Session, "request")
    def test_network_failure(self, mock_request, base_url, jar_path):
        mock_request.side_effect = requests.exceptions.ConnectionError("refused")
        with pytest.raises(FetchError):
            login(base_url, "12", "monitor", "secret", jar_path)

    def test_expired_deadline(self, base_url, jar_path):
        with pytest.raises(ProbeTimeoutError):
            login(base_url, "12", "monitor", "secret", jar_path, deadline=Deadline(0))


class TestFetch:
    @patch.object(requests.Session, "request")
    def test_returns_body(self, mock_request, handle):
        mock_request.return_value = response(200, text="<html>pipes</html>")
        assert fetch(handle.url("/x.do"), handle) == "<html>pipes</html>"
        assert mock_request.call_args.args == ("GET", handle.base_url + "/x.do")

    @patch.object(requests.Session, "request")
    def test_http_error(self, mock_request, handle):
        resp = response(500)
        resp.raise_for_status.side_effect = requests.exceptions.HTTPError("500 Server Error")
        mock_request.return_value = resp

        with pytest.raises(FetchError) as exc:
            fetch(handle.url("/x.do"), handle)
        assert exc.value.status_code == 500

    @patch.object(requests.Session, "request")
    def test_timeout_after_deadline_is_probe_timeout(self, mock_request, handle):
        def expire(*args, **kwargs):
            handle.deadline._expires_at = 0
            raise requests.exceptions.ReadTimeout("read timed out")

        mock_request.side_effect = expire
        with pytest.raises(ProbeTimeoutError):
            fetch(handle.url("/x.do"), handle)

    @patch.object(requests.Session, "request")
    def test_timeout_before_deadline_is_fetch_error(self, mock_request, handle):
        mock_request.side_effect = requests.exceptions.ConnectTimeout("connect timed out")
        with pytest.raises(FetchError):
            fetch(handle.url("/x.do"), handle)

    def test_probe_timeout_is_not_a_fetch_error(self):
        assert not issubclass(ProbeTimeoutError, FetchError)


class TestCookieJar:
    def test_discardable_cookies_survive_save(self, jar_path):
        jar = _load_jar(jar_path)
        jar.set_cookie(create_cookie("JSESSIONID", "abc123", domain="primo.example.edu", discard=True))
        _save_jar(jar)

        loaded = _load_jar(jar_path)
        assert [(c.name, c.value) for c in loaded] == [("JSESSIONID", "abc123")]

    def test_unreadable_jar_is_empty(self, tmp_path):
        path = tmp_path / "garbage.dat"
        path.write_text("this is not a cookie file\n")
        assert len(_load_jar(str(path))) == 0


class TestDeadline:
    def test_remaining_never_negative(self):
        assert Deadline(0).remaining() == 0.0
        assert Deadline(0).expired

    def test_check(self):
        Deadline(60).check()
        with pytest.raises(ProbeTimeoutError, match="timed out after 0 seconds"):
            Deadline(0).check()
