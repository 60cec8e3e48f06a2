"""
Trello API client for CFP to Trello.
Creates the boards, lists, labels, cards and comments of the deliberation boards.
"""

import logging
from typing import Any, Optional

import requests
from requests.adapters import HTTPAdapter
from requests_oauthlib import OAuth1
from urllib3.util.retry import Retry

from .auth import TrelloCredentials
from .config import TrelloConfig
from .errors import NotFoundError, RemoteError
from .trello_models import (
    Board,
    Card,
    Color,
    Label,
    Member,
    Organization,
    PermissionLevel,
    TrelloList,
)

logger = logging.getLogger(__name__)


class TrelloClient:
    """Client for interacting with Trello REST API v1.

    Calls are blocking and never replayed for writes: the retry policy only
    applies to idempotent methods, which excludes POST.
    """

    def __init__(self, config: TrelloConfig, credentials: TrelloCredentials):
        self.config = config

        # Set up session with retry logic
        self.session = requests.Session()
        retries = Retry(
            total=3,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
        )
        self.session.mount("https://", HTTPAdapter(max_retries=retries))
        self.session.auth = OAuth1(
            config.api_key,
            client_secret=config.api_secret,
            resource_owner_key=credentials.token,
            resource_owner_secret=credentials.token_secret,
        )

    def _api_url(self, endpoint: str) -> str:
        """Build full API URL."""
        return f"{self.config.api_base_url}/{endpoint.lstrip('/')}"

    def _request(self, method: str, endpoint: str, params: Optional[dict] = None,
                 timeout: int = 30) -> Any:
        """Send a request and return the decoded JSON body, or raise RemoteError."""
        try:
            response = self.session.request(
                method,
                self._api_url(endpoint),
                params=params,
                timeout=timeout,
            )
            response.raise_for_status()
            return response.json()
        except requests.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else None
            payload = e.response.text if e.response is not None else None
            raise RemoteError(f"Trello {method} {endpoint} failed: {e}", status_code, payload) from e
        except (requests.RequestException, ValueError) as e:
            raise RemoteError(f"Trello {method} {endpoint} failed: {e}") from e

    def _parse(self, model, data: Any, endpoint: str):
        """Build a Trello object from a response body, or raise RemoteError."""
        try:
            return model.from_api(data)
        except (KeyError, TypeError, ValueError) as e:
            raise RemoteError(f"Trello {endpoint} returned an unexpected payload: {e!r}") from e

    def _parse_all(self, model, data: Any, endpoint: str) -> list:
        if not isinstance(data, list):
            raise RemoteError(f"Trello {endpoint} returned an unexpected payload: expected a list")
        return [self._parse(model, item, endpoint) for item in data]

    def get_current_user(self) -> Member:
        """Return the member the access token belongs to."""
        return self._parse(Member, self._request("GET", "/members/me", timeout=10), "/members/me")

    def get_organization(self, name: str) -> Organization:
        """Get an organization from its technical name (the one found in Trello URLs)."""
        endpoint = f"/organizations/{name}"
        try:
            data = self._request("GET", endpoint)
        except RemoteError as e:
            if e.status_code in (400, 404):
                raise NotFoundError(f"Trello organization not found: {name}") from e
            raise
        return self._parse(Organization, data, endpoint)

    def create_board(self, name: str, organization: Organization,
                     visibility: PermissionLevel = PermissionLevel.ORG) -> Board:
        """Create an empty board (no default lists nor labels) in an organization."""
        data = self._request("POST", "/boards", params={
            "name": name,
            "defaultLabels": "false",
            "defaultLists": "false",
            "idOrganization": organization.id,
            "prefs_permissionLevel": visibility.value,
        })
        board = self._parse(Board, data, "/boards")
        logger.debug(f"Created board {board.id} - {board.name}")
        return board

    def create_list(self, name: str, board: Board, position: float) -> TrelloList:
        """Create a list in a board at an explicit position."""
        data = self._request("POST", "/lists", params={
            "name": name,
            "idBoard": board.id,
            "pos": position,
        })
        return self._parse(TrelloList, data, "/lists")

    def create_label(self, name: str, board: Board, color: Color) -> Label:
        """Create a label on a board. Labels are specific to one board."""
        data = self._request("POST", "/labels", params={
            "name": name,
            "color": color.value,
            "idBoard": board.id,
        })
        return self._parse(Label, data, "/labels")

    def create_card(self, name: str, description: str, trello_list: TrelloList,
                    label_ids: list[str]) -> Card:
        """Create a card at the bottom of a list."""
        data = self._request("POST", "/cards", params={
            "name": name,
            "desc": description,
            "idList": trello_list.id,
            "idLabels": ",".join(label_ids),
            "pos": "bottom",
        })
        return self._parse(Card, data, "/cards")

    def create_comment(self, text: str, card: Card) -> None:
        """Add a comment to a card."""
        self._request("POST", f"/cards/{card.id}/actions/comments", params={"text": text})

    def get_boards(self, organization: Organization,
                   visibility: PermissionLevel = PermissionLevel.ORG) -> list[Board]:
        """List the boards of an organization with the given visibility."""
        endpoint = f"/organizations/{organization.id}/boards"
        data = self._request("GET", endpoint, params={
            "filter": visibility.value,
            "fields": "id,name,url",
        })
        return self._parse_all(Board, data, endpoint)

    def get_lists(self, board: Board) -> list[TrelloList]:
        """List the open lists of a board."""
        endpoint = f"/boards/{board.id}/lists"
        return self._parse_all(TrelloList, self._request("GET", endpoint), endpoint)

    def get_cards(self, trello_list: TrelloList) -> list[Card]:
        """List the cards of a list."""
        endpoint = f"/lists/{trello_list.id}/cards"
        return self._parse_all(Card, self._request("GET", endpoint), endpoint)
