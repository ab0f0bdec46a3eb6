"""Owner-side dashboard client that polls the inbox API."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx

from anon_inbox import constants
from anon_inbox.models.enums import MessageFilter
from anon_inbox.models.message import Message
from anon_inbox.services.filtering import count_by_purpose, filter_messages, parse_filter

LOG = logging.getLogger(__name__)


class DashboardError(RuntimeError):
    """Raised when the inbox API answers with an error envelope."""

    def __init__(self, message: str, kind: Optional[str] = None, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.status_code = status_code


class DashboardClient:
    """Keeps the last fetched inbox state and mirrors owner actions to the API.

    Local state is only replaced by a successful ``refresh``; failed calls add a
    notice and leave the last-known-good view untouched. Filtering always works
    from the last fetched sequence without another request.
    """

    def __init__(
        self,
        user_id: str,
        base_url: str = constants.API_BASE,
        http_client: Optional[httpx.Client] = None,
        timeout: float = 30,
    ) -> None:
        self.user_id = user_id
        self.base_url = base_url.rstrip("/")
        self._client = http_client or httpx.Client(base_url=self.base_url, timeout=timeout)
        self.messages: List[Message] = []
        self.accepting_messages: Optional[bool] = None
        self.filter = MessageFilter.ALL
        self.notices: List[Tuple[str, str]] = []

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "DashboardClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # HTTP -----------------------------------------------------------------------
    def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        headers = {constants.USER_ID_HEADER: self.user_id}
        try:
            response = self._client.request(method, path, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            raise DashboardError(f"Could not reach inbox API: {exc}", kind="transport") from exc
        try:
            body = response.json() if response.content else None
        except ValueError:
            body = None
        if response.status_code >= 400:
            detail = body if isinstance(body, dict) else {}
            raise DashboardError(
                detail.get("message") or f"API error {response.status_code}",
                kind=detail.get("kind"),
                status_code=response.status_code,
            )
        if body is None and response.content:
            raise DashboardError("Inbox API returned a non-JSON response", status_code=response.status_code)
        return body

    def _notify(self, level: str, text: str) -> None:
        self.notices.append((level, text))
        LOG.log(logging.ERROR if level == "error" else logging.INFO, text)

    # State ----------------------------------------------------------------------
    def refresh(self, announce: bool = False) -> List[Message]:
        """Replace local messages with the server's view."""
        try:
            data = self._request("GET", "/get-messages")
        except DashboardError as exc:
            self._notify("error", exc.message or "Failed to fetch messages")
            raise
        self.messages = [Message.model_validate(item) for item in data.get("messages", [])]
        if announce:
            self._notify("info", "Refreshed messages: showing latest messages")
        return self.messages

    def fetch_acceptance(self) -> bool:
        try:
            data = self._request("GET", "/accept-messages")
        except DashboardError as exc:
            self._notify("error", exc.message or "Failed to fetch message settings")
            raise
        self.accepting_messages = bool(data["isAcceptingMessage"])
        return self.accepting_messages

    def set_acceptance(self, value: bool) -> bool:
        """Show ``value`` immediately and roll back if the server rejects it."""
        previous = self.accepting_messages
        self.accepting_messages = value
        try:
            data = self._request("POST", "/accept-messages", {"acceptMessages": value})
        except DashboardError as exc:
            self.accepting_messages = previous
            self._notify("error", exc.message or "Failed to update message settings")
            raise
        self.accepting_messages = bool(data["isAcceptingMessage"])
        self._notify("info", data.get("message", "Message settings updated"))
        return self.accepting_messages

    def toggle_acceptance(self) -> bool:
        if self.accepting_messages is None:
            self.fetch_acceptance()
        return self.set_acceptance(not self.accepting_messages)

    def delete(self, message_id: str) -> bool:
        """Drop a message from the view, then ask the server to delete it.

        Returns True when the server confirmed the delete or reported the
        message already gone. Other failures leave the view optimistic until
        the next ``refresh``.
        """
        self.messages = [message for message in self.messages if message.id != message_id]
        try:
            self._request("DELETE", f"/delete-message/{message_id}")
        except DashboardError as exc:
            if exc.kind == "not_found":
                LOG.debug("message %s already deleted", message_id)
                return True
            self._notify("error", exc.message or "Failed to delete message")
            return False
        self._notify("info", "Message deleted")
        return True

    # Views ----------------------------------------------------------------------
    def set_filter(self, category: str | MessageFilter) -> List[Message]:
        self.filter = parse_filter(category)
        return self.visible_messages()

    def visible_messages(self, category: str | MessageFilter | None = None) -> List[Message]:
        return filter_messages(self.messages, category if category is not None else self.filter)

    def total(self) -> int:
        return len(self.visible_messages())

    def counts(self) -> Dict[str, int]:
        return count_by_purpose(self.messages)

    @staticmethod
    def profile_url(username: str, public_url: str = constants.PUBLIC_URL) -> str:
        return f"{public_url.rstrip('/')}/u/{username}"
