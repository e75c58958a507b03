"""Content-editing collaborators used to create redirect pages.

The ledger never writes wiki content itself. A redirect is created through a
:class:`ContentEditor`, which the host supplies:

* :class:`MediaWikiApiEditor` talks to a wiki's Action API over ``requests``
  (login, CSRF token, ``action=edit``).
* :class:`InMemoryContentEditor` keeps pages in a dict and backs the tests.

Every editor either completes the write or raises an :class:`EditError`
subclass. Callers rely on that: a failed edit must leave the ledger alone.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

import requests

from missed_pages.titles import Title

logger = logging.getLogger(__name__)

# API error codes that mean "someone else changed the page first".
_CONFLICT_CODES = frozenset({"editconflict", "pagedeleted", "articleexists"})


class EditError(RuntimeError):
    """Base class for refused content edits.

    Attributes:
        title: Prefixed text of the page that could not be written.
        code: Machine-readable reason (wiki API error code when available).
    """

    def __init__(self, title: str, code: str, message: str | None = None) -> None:
        super().__init__(message or f"Edit of {title!r} failed: {code}")
        self.title = title
        self.code = code


class EditConflict(EditError):
    """The page changed concurrently and the edit was not saved."""


class EditRejected(EditError):
    """The wiki refused the edit (permissions, protection, content policy)."""


def make_redirect_content(target: Title) -> str:
    """Return the wikitext of a redirect to ``target``."""
    return f"#REDIRECT [[{target.prefixed_text}]]"


class ContentEditor(Protocol):
    """Creates or overwrites a page with a redirect directive."""

    def save_redirect(self, source: Title, target: Title, editor: str, comment: str) -> None:
        """Write ``source`` as a redirect to ``target``, attributed to ``editor``.

        Raises:
            EditConflict: The page changed concurrently.
            EditRejected: The wiki refused the write.
        """
        ...


class InMemoryContentEditor:
    """Dict-backed editor; records every saved page and its attribution."""

    def __init__(self) -> None:
        self.pages: dict[str, str] = {}
        self.history: list[dict[str, str]] = []

    def save_redirect(self, source: Title, target: Title, editor: str, comment: str) -> None:
        content = make_redirect_content(target)
        self.pages[source.prefixed_db_key] = content
        self.history.append(
            {
                "title": source.prefixed_db_key,
                "content": content,
                "editor": editor,
                "comment": comment,
            }
        )

    def get_content(self, title: Title) -> str | None:
        return self.pages.get(title.prefixed_db_key)


class MediaWikiApiEditor:
    """Writes redirects through a MediaWiki Action API endpoint.

    The editor logs in lazily with bot credentials on the first save and
    reuses the session cookies afterwards. The acting user is recorded in the
    edit summary because the API attributes the edit to the bot account.

    Args:
        api_url: Full ``api.php`` URL.
        username: Bot account name (``User@BotName`` style is fine).
        password: Bot password.
        timeout_seconds: HTTP request timeout.
        session: Optional pre-built ``requests.Session``.
    """

    def __init__(
        self,
        *,
        api_url: str,
        username: str = "",
        password: str = "",
        timeout_seconds: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self._api_url = api_url
        self._username = username
        self._password = password
        self._timeout = timeout_seconds
        self._session = session or requests.Session()
        self._logged_in = False

    # ── HTTP helpers ──────────────────────────────────────────────────────────

    def _call(self, title: str, method: str, params: dict[str, Any]) -> dict[str, Any]:
        """Issue one API request and return the decoded JSON body.

        Transport and decoding failures become :class:`EditRejected`; an
        ``error`` object in the body is mapped by :meth:`_raise_api_error`.
        """
        payload = {**params, "format": "json", "formatversion": "2"}
        try:
            if method == "GET":
                response = self._session.get(self._api_url, params=payload, timeout=self._timeout)
            else:
                response = self._session.post(self._api_url, data=payload, timeout=self._timeout)
            response.raise_for_status()
            body = response.json()
        except requests.exceptions.RequestException as exc:
            logger.warning("Wiki API request failed for %r: %s", title, exc)
            raise EditRejected(title, "unreachable", f"Wiki API unavailable: {exc}") from exc
        except ValueError as exc:
            logger.warning("Wiki API returned invalid JSON for %r", title)
            raise EditRejected(title, "invalidjson", "Wiki API returned invalid JSON.") from exc

        if not isinstance(body, dict):
            raise EditRejected(title, "invalidjson", "Wiki API returned a non-object payload.")
        if "error" in body:
            self._raise_api_error(title, body["error"])
        return body

    @staticmethod
    def _raise_api_error(title: str, error: Any) -> None:
        code = "unknown"
        info = None
        if isinstance(error, dict):
            code = str(error.get("code", code))
            info = error.get("info")
        message = f"Edit of {title!r} failed: {code}" + (f" ({info})" if info else "")
        if code in _CONFLICT_CODES:
            raise EditConflict(title, code, message)
        raise EditRejected(title, code, message)

    def _token(self, title: str, kind: str) -> str:
        body = self._call(title, "GET", {"action": "query", "meta": "tokens", "type": kind})
        token = body.get("query", {}).get("tokens", {}).get(f"{kind}token")
        if not token:
            raise EditRejected(title, "notoken", f"Wiki API did not return a {kind} token.")
        return str(token)

    def _login(self, title: str) -> None:
        if self._logged_in or not self._username:
            return
        login_token = self._token(title, "login")
        body = self._call(
            title,
            "POST",
            {
                "action": "login",
                "lgname": self._username,
                "lgpassword": self._password,
                "lgtoken": login_token,
            },
        )
        result = body.get("login", {}).get("result")
        if result != "Success":
            raise EditRejected(title, "loginfailed", f"Wiki login failed: {result}")
        self._logged_in = True

    # ── ContentEditor ─────────────────────────────────────────────────────────

    def save_redirect(self, source: Title, target: Title, editor: str, comment: str) -> None:
        title = source.prefixed_text
        self._login(title)
        csrf_token = self._token(title, "csrf")
        body = self._call(
            title,
            "POST",
            {
                "action": "edit",
                "title": title,
                "text": make_redirect_content(target),
                "summary": f"{comment} (requested by {editor})",
                "token": csrf_token,
            },
        )
        result = body.get("edit", {}).get("result")
        if result != "Success":
            raise EditRejected(title, str(result or "failure"), f"Wiki refused edit: {result}")
        logger.info("Saved redirect %r -> %r for %s", title, target.prefixed_text, editor)
