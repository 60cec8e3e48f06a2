"""
Trello authorization for CFP to Trello.
Runs the OAuth1 flow in the user's browser and keeps the access token on disk.
"""

import json
import logging
import os
import time
import webbrowser
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from http.server import HTTPServer, BaseHTTPRequestHandler
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import urlparse, parse_qs

import requests
from requests_oauthlib import OAuth1Session

from .config import TrelloConfig
from .errors import AuthError

logger = logging.getLogger(__name__)

REQUEST_TOKEN_URL = "https://trello.com/1/OAuthGetRequestToken"
AUTHORIZE_URL = "https://trello.com/1/OAuthAuthorizeToken"
ACCESS_TOKEN_URL = "https://trello.com/1/OAuthGetAccessToken"


@dataclass
class TrelloCredentials:
    """OAuth1 access token granted by the user."""
    token: str
    token_secret: str
    expires_at: datetime

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return self.expires_at <= now

    def to_dict(self) -> dict:
        return {
            "token": self.token,
            "token_secret": self.token_secret,
            "expires_at": self.expires_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TrelloCredentials":
        expires_at = datetime.fromisoformat(data["expires_at"])
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return cls(
            token=data["token"],
            token_secret=data["token_secret"],
            expires_at=expires_at,
        )


class TokenStore:
    """JSON file holding the Trello access token between runs."""

    def __init__(self, path: str):
        self.path = Path(path).expanduser()

    def load(self) -> Optional[TrelloCredentials]:
        """Return the stored credentials, or None when missing, unreadable or expired."""
        if not self.path.exists():
            return None

        try:
            with open(self.path, encoding="utf-8") as f:
                credentials = TrelloCredentials.from_dict(json.load(f))
        except (OSError, ValueError, KeyError) as e:
            logger.warning(f"Could not load stored Trello token from {self.path}: {e}")
            return None

        if credentials.is_expired():
            logger.info("Stored Trello token has expired, a new authorization is needed")
            return None
        return credentials

    def save(self, credentials: TrelloCredentials) -> None:
        """Write the credentials, readable by the current user only."""
        self.path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(credentials.to_dict(), f)
        os.chmod(self.path, 0o600)
        logger.debug(f"Saved Trello token to {self.path}")


class OAuthCallbackHandler(BaseHTTPRequestHandler):
    """Handle the OAuth callback."""

    def do_GET(self):
        """Process the callback with the OAuth verifier."""
        parsed = urlparse(self.path)

        if parsed.path != "/callback":
            self.send_response(404)
            self.end_headers()
            return

        params = parse_qs(parsed.query)
        if "oauth_verifier" in params:
            self.server.verifier = params["oauth_verifier"][0]
            self.send_response(200)
            self.send_header("Content-type", "text/html")
            self.end_headers()
            self.wfile.write(b"""
                <html>
                <body style="font-family: Arial; text-align: center; padding: 50px;">
                <h1 style="color: green;">Authorization Successful!</h1>
                <p>You can close this window and return to the terminal.</p>
                </body>
                </html>
            """)
        else:
            # Trello calls back without a verifier when access is denied
            self.server.denied = True
            self.send_response(400)
            self.send_header("Content-type", "text/html")
            self.end_headers()
            self.wfile.write(b"""
                <html>
                <body style="font-family: Arial; text-align: center; padding: 50px;">
                <h1 style="color: red;">Authorization Failed</h1>
                </body>
                </html>
            """)

    def log_message(self, format, *args):
        """Suppress default logging."""
        pass


class TrelloAuthorizer:
    """Obtain Trello credentials, from the token file or through the browser."""

    def __init__(self, config: TrelloConfig, store: Optional[TokenStore] = None,
                 open_browser: Callable[[str], bool] = webbrowser.open):
        self.config = config
        self.store = store or TokenStore(config.token_file)
        self.open_browser = open_browser

    @property
    def callback_uri(self) -> str:
        return f"http://localhost:{self.config.callback_port}/callback"

    def authorize(self) -> TrelloCredentials:
        """Return valid credentials, asking the user to authorize the app if needed."""
        credentials = self.store.load()
        if credentials:
            logger.info(f"Using stored Trello token (expires {credentials.expires_at:%Y-%m-%d})")
            return credentials

        credentials = self._run_oauth_flow()
        try:
            self.store.save(credentials)
        except OSError as e:
            logger.warning(f"Could not save Trello token, authorization will be asked again: {e}")
        return credentials

    def _run_oauth_flow(self) -> TrelloCredentials:
        oauth = OAuth1Session(
            self.config.api_key,
            client_secret=self.config.api_secret,
            callback_uri=self.callback_uri,
        )
        try:
            request_token = oauth.fetch_request_token(REQUEST_TOKEN_URL)
        except (requests.RequestException, ValueError) as e:
            raise AuthError(f"Could not get a Trello request token: {e}") from e

        auth_url = oauth.authorization_url(
            AUTHORIZE_URL,
            scope="read,write",
            expiration=f"{self.config.token_validity_days}days",
            name=self.config.app_name,
        )
        logger.info("Opening browser for Trello authorization...")
        logger.info(f"If browser doesn't open, visit: {auth_url}")
        self.open_browser(auth_url)

        verifier = self._wait_for_verifier()

        oauth = OAuth1Session(
            self.config.api_key,
            client_secret=self.config.api_secret,
            resource_owner_key=request_token["oauth_token"],
            resource_owner_secret=request_token["oauth_token_secret"],
            verifier=verifier,
        )
        try:
            access_token = oauth.fetch_access_token(ACCESS_TOKEN_URL)
        except (requests.RequestException, ValueError) as e:
            raise AuthError(f"Could not exchange the Trello verifier for an access token: {e}") from e

        logger.info("Trello authorization granted")
        return TrelloCredentials(
            token=access_token["oauth_token"],
            token_secret=access_token["oauth_token_secret"],
            expires_at=datetime.now(timezone.utc) + timedelta(days=self.config.token_validity_days),
        )

    def _wait_for_verifier(self) -> str:
        """Serve the callback URL until Trello redirects the user to it."""
        try:
            server = HTTPServer(("localhost", self.config.callback_port), OAuthCallbackHandler)
        except OSError as e:
            raise AuthError(f"Could not listen on port {self.config.callback_port}: {e}") from e

        server.verifier = None
        server.denied = False
        server.timeout = 1
        deadline = time.monotonic() + self.config.auth_timeout_seconds

        logger.info("Waiting for authorization callback...")
        try:
            while server.verifier is None and not server.denied:
                if time.monotonic() > deadline:
                    raise AuthError("Did not receive the Trello authorization in time")
                server.handle_request()
        finally:
            server.server_close()

        if server.denied:
            raise AuthError("Trello authorization was denied")
        return server.verifier
