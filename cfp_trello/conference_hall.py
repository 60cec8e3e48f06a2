"""
Conference-Hall API client for CFP to Trello.
Fetches the event export and publishes deliberations (accept/reject talks).
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import ConferenceHallConfig
from .errors import RemoteError

logger = logging.getLogger(__name__)

STATE_SUBMITTED = "submitted"


@dataclass
class Talk:
    """A talk as known by Conference-Hall, reduced to what publication needs."""
    id: str
    title: str
    state: str

    def is_submitted(self) -> bool:
        return self.state == STATE_SUBMITTED

    @classmethod
    def from_api(cls, data: dict) -> "Talk":
        return cls(id=data["id"], title=data.get("title", ""), state=data.get("state", ""))


@dataclass
class EventExport:
    """Event name, format names and talks of an export."""
    name: str
    formats: list[str] = field(default_factory=list)
    talks: list[Talk] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict) -> "EventExport":
        return cls(
            name=data.get("name", ""),
            formats=[f["name"] for f in data.get("formats", [])],
            talks=[Talk.from_api(t) for t in data.get("talks", [])],
        )


class ConferenceHallClient:
    """Client for the Conference-Hall v1 API."""

    def __init__(self, config: ConferenceHallConfig):
        self.config = config

        # Set up session with retry logic
        self.session = requests.Session()
        retries = Retry(
            total=3,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
        )
        self.session.mount("https://", HTTPAdapter(max_retries=retries))

    def _api_url(self, endpoint: str) -> str:
        """Build full API URL."""
        return f"{self.config.base_url.rstrip('/')}/api/v1/{endpoint.lstrip('/')}"

    def _request(self, method: str, endpoint: str) -> Any:
        try:
            response = self.session.request(
                method,
                self._api_url(endpoint),
                params={"key": self.config.api_key},
                timeout=30,
            )
            response.raise_for_status()
            return response.json()
        except requests.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else None
            payload = e.response.text if e.response is not None else None
            raise RemoteError(f"Conference-Hall {method} {endpoint} failed: {e}", status_code, payload) from e
        except (requests.RequestException, ValueError) as e:
            raise RemoteError(f"Conference-Hall {method} {endpoint} failed: {e}") from e

    def get_raw_export(self) -> dict:
        """The event export, as the JSON document the loader parses."""
        return self._request("GET", f"/event/{self.config.event_id}")

    def get_export(self) -> EventExport:
        data = self.get_raw_export()
        try:
            return EventExport.from_api(data)
        except (KeyError, TypeError, AttributeError) as e:
            raise RemoteError(f"Conference-Hall export has an unexpected format: {e!r}") from e

    def _publish(self, talk: Talk, action: str) -> Optional[str]:
        endpoint = f"/proposal/{self.config.event_id}/{talk.id}/{action}"
        if self.config.dry_run:
            logger.info(f"[dry-run] {action} talk {talk.title!r}: PUT {self._api_url(endpoint)}")
            return "ok"
        data = self._request("PUT", endpoint)
        return data.get("result") if isinstance(data, dict) else None

    def accept(self, talk: Talk) -> Optional[str]:
        return self._publish(talk, "accept")

    def reject(self, talk: Talk) -> Optional[str]:
        return self._publish(talk, "reject")
