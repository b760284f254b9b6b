"""Authenticated HTTP session against the Primo Back Office.

The Back Office has no API: a session is opened by posting the login form
and is carried by cookies. The cookie jar file is the only state shared
between requests, so every request builds a fresh ``requests.Session`` bound
to the jar and saves it back afterwards.
"""

from __future__ import annotations

import logging
import os
import re
import time
from dataclasses import dataclass
from http.cookiejar import LoadError, LWPCookieJar
from typing import Optional, Union

import certifi
import requests
import urllib3
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..exceptions import AuthError, FetchError, ProbeError, ProbeTimeoutError

logger = logging.getLogger(__name__)

LOGIN_PATH = "/primo_publishing/admin/j_acegi_security_check"
MAIN_MENU_PATTERN = re.compile(r"menus\.do")

DEFAULT_COOKIE_JAR = "/tmp/check_primo_pipes_cookiejar.dat"
DEFAULT_TIMEOUT = 15
DEFAULT_USER_AGENT = "check-primo-pipes/1.0"
DEFAULT_CA_BUNDLE = certifi.where()


class Deadline:
    """Wall-clock budget for a whole probe run."""

    def __init__(self, seconds: float):
        self.seconds = seconds
        self._expires_at = time.monotonic() + seconds

    def remaining(self) -> float:
        return max(0.0, self._expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0

    def check(self, url: Optional[str] = None) -> None:
        if self.expired:
            raise ProbeTimeoutError(f"timed out after {self.seconds:g} seconds", url=url)


# --- Login outcome ------------------------------------------------------------

@dataclass(frozen=True)
class AuthenticatedRedirect:
    """Login answered with a redirect to the main menu."""

    location: str


@dataclass(frozen=True)
class OtherResponse:
    """Anything else, including a plain 200 re-rendering the login form."""

    status_code: int
    location: Optional[str] = None


LoginOutcome = Union[AuthenticatedRedirect, OtherResponse]


def classify_login_response(response: requests.Response) -> LoginOutcome:
    """Decide login success from the Location header alone."""
    location = response.headers.get("Location")
    if location and MAIN_MENU_PATTERN.search(location):
        return AuthenticatedRedirect(location)
    return OtherResponse(response.status_code, location)


@dataclass(frozen=True)
class SessionHandle:
    """Everything a fetch needs to reuse an authenticated session."""

    base_url: str
    cookie_jar_path: str
    deadline: Deadline
    verify: Union[bool, str] = True
    user_agent: str = DEFAULT_USER_AGENT

    def url(self, path: str) -> str:
        return self.base_url.rstrip("/") + path


# --- Cookie jar ---------------------------------------------------------------

def _load_jar(path: str) -> LWPCookieJar:
    jar = LWPCookieJar(path)
    if os.path.exists(path):
        try:
            jar.load(ignore_discard=True, ignore_expires=True)
        except (LoadError, OSError) as e:
            logger.warning("Ignoring unreadable cookie jar %s: %s", path, e)
    return jar


def _save_jar(jar: LWPCookieJar) -> None:
    # Session cookies are marked discardable; keep them for the next request.
    jar.save(ignore_discard=True, ignore_expires=True)


# --- HTTP ---------------------------------------------------------------------

def _make_session(jar: LWPCookieJar, verify: Union[bool, str], user_agent: str) -> requests.Session:
    session = requests.Session()
    adapter = HTTPAdapter(max_retries=Retry(total=0, redirect=False, raise_on_redirect=False))
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    session.verify = verify
    session.cookies = jar
    session.headers.update({"User-Agent": user_agent})
    if verify is False:
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
    return session


def _request(
    method: str,
    url: str,
    jar: LWPCookieJar,
    deadline: Deadline,
    verify: Union[bool, str],
    user_agent: str,
    **kwargs,
) -> requests.Response:
    deadline.check(url)
    session = _make_session(jar, verify, user_agent)
    try:
        logger.debug("%s %s (%.1fs left)", method, url, deadline.remaining())
        return session.request(method, url, timeout=deadline.remaining(), **kwargs)
    except requests.exceptions.Timeout as e:
        if deadline.expired:
            raise ProbeTimeoutError(f"timed out after {deadline.seconds:g} seconds", url=url, cause=e)
        raise FetchError(f"request timed out: {url}", url=url, cause=e)
    except requests.exceptions.SSLError as e:
        raise FetchError(f"TLS/SSL error for {url}: {e}", url=url, cause=e)
    except requests.exceptions.RequestException as e:
        raise FetchError(f"request failed for {url}: {e}", url=url, cause=e)
    finally:
        session.close()


def login(
    host: str,
    customer_id: str,
    username: str,
    password: str,
    cookie_jar_path: str = DEFAULT_COOKIE_JAR,
    deadline: Optional[Deadline] = None,
    verify: Union[bool, str] = True,
    user_agent: str = DEFAULT_USER_AGENT,
) -> SessionHandle:
    """Log in to the Back Office and persist the session cookies.

    Returns:
        A handle for subsequent ``fetch`` calls.

    Raises:
        AuthError: If the response is not a redirect to the main menu.
        FetchError: On network or TLS failure.
        ProbeTimeoutError: If the deadline expired.
    """
    handle = SessionHandle(
        base_url=host,
        cookie_jar_path=cookie_jar_path,
        deadline=deadline or Deadline(DEFAULT_TIMEOUT),
        verify=verify,
        user_agent=user_agent,
    )
    url = handle.url(LOGIN_PATH)
    jar = LWPCookieJar(cookie_jar_path)  # a fresh login starts from an empty jar
    response = _request(
        "POST",
        url,
        jar,
        handle.deadline,
        verify,
        user_agent,
        data={"j_username": username, "j_password": password, "customerId": customer_id},
        allow_redirects=False,
    )

    outcome = classify_login_response(response)
    if not isinstance(outcome, AuthenticatedRedirect):
        logger.debug("Login rejected: HTTP %s, Location=%r", outcome.status_code, outcome.location)
        raise AuthError(
            f"login failed for user {username} (customer id {customer_id}): "
            f"HTTP {outcome.status_code} without main menu redirect",
            url=url,
        )

    try:
        _save_jar(jar)
    except OSError as e:
        raise ProbeError(f"cannot write cookie jar {cookie_jar_path}: {e}", cause=e)
    logger.debug("Logged in as %s, redirected to %s", username, outcome.location)
    return handle


def fetch(url: str, session: SessionHandle) -> str:
    """GET a console page with the session's cookies.

    Raises:
        FetchError: On network failure or a non-2xx status.
        ProbeTimeoutError: If the deadline expired.
    """
    jar = _load_jar(session.cookie_jar_path)
    response = _request("GET", url, jar, session.deadline, session.verify, session.user_agent)
    try:
        response.raise_for_status()
    except requests.exceptions.HTTPError as e:
        raise FetchError(
            f"HTTP {response.status_code} for {url}",
            url=url,
            cause=e,
            status_code=response.status_code,
        )

    try:
        _save_jar(jar)
    except OSError as e:
        logger.warning("Could not update cookie jar %s: %s", session.cookie_jar_path, e)
    return response.text
