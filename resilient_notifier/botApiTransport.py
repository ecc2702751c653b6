from __future__ import annotations

import typing as t

import requests
from loguru import logger

from resilient_notifier import __version__
from resilient_notifier.deliveryModels import BotInfo
from resilient_notifier.notifierConfig import NotifierConfig
from resilient_notifier.notifierErrors import ApiError
from resilient_notifier.responseClassifier import classify_response, classify_transport_error


class BotApiTransport:
    """
    Thin HTTP layer over a requests.Session for the Bot API.

    Transport failures are converted to NetworkError / RequestTimeout; HTTP
    status handling is left to the response classifier.
    """

    def __init__(self, config: NotifierConfig, session: requests.Session | None = None) -> None:
        self._cfg = config
        if session is None:
            session = requests.Session()
            session.headers["User-Agent"] = f"resilient-notifier/{__version__}"
        self._session = session
        if self._cfg.session_headers:
            self._session.headers.update(self._cfg.session_headers)

    def endpoint(self, method: str) -> str:
        return f"{self._cfg.api_base_url}/bot{self._cfg.token}/{method}"

    def call(self, method: str, payload: dict[str, t.Any] | None = None) -> requests.Response:
        """POST a JSON payload, or GET when there is none."""
        url = self.endpoint(method)
        logger.debug(f"Calling {method}")
        try:
            if payload is None:
                return self._session.get(url, timeout=self._cfg.timeout_seconds)
            return self._session.post(url, json=payload, timeout=self._cfg.timeout_seconds)
        except requests.RequestException as e:
            raise classify_transport_error(e, self._cfg.token) from e

    def post_message(self, text: str) -> requests.Response:
        """sendMessage with HTML markup and link previews disabled."""
        payload = {
            "chat_id": self._cfg.chat_id,
            "text": text,
            "parse_mode": "HTML",
            "disable_web_page_preview": True,
        }
        return self.call("sendMessage", payload)

    def get_me(self) -> BotInfo:
        """Lightweight "who am I" call used to verify the token."""
        data = classify_response(self.call("getMe"), self._cfg.chat_id)
        if not data.get("ok", False) or not isinstance(data.get("result"), dict):
            raise ApiError(data.get("description") or "getMe returned no result")
        return BotInfo.from_api(data["result"])

    def probe(self, url: str, timeout: float = 10.0) -> requests.Response:
        """GET an arbitrary URL (used by diagnostics)."""
        try:
            return self._session.get(url, timeout=timeout)
        except requests.RequestException as e:
            raise classify_transport_error(e, self._cfg.token) from e

    def close(self) -> None:
        self._session.close()
