"""Tests for Trello authorization and token storage."""
import json
import os
import pytest
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import MagicMock, Mock, patch
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from cfp_trello.auth import TokenStore, TrelloAuthorizer, TrelloCredentials
from cfp_trello.config import TrelloConfig
from cfp_trello.errors import AuthError


def _credentials(days=10):
    return TrelloCredentials(
        token="tok",
        token_secret="sec",
        expires_at=datetime.now(timezone.utc) + timedelta(days=days),
    )


def _config(tmp_path):
    return TrelloConfig(api_key="key", api_secret="secret", token_file=str(tmp_path / "trello.json"))


def test_credentials_expiry():
    """Credentials expire at their expiration date."""
    assert not _credentials(days=1).is_expired()
    assert _credentials(days=-1).is_expired()


def test_credentials_without_timezone_are_utc():
    """Naive dates in the token file are read as UTC."""
    credentials = TrelloCredentials.from_dict({
        "token": "t", "token_secret": "s", "expires_at": "2030-01-01T00:00:00",
    })
    assert credentials.expires_at.tzinfo == timezone.utc


def test_store_round_trip(tmp_path):
    """Saved credentials are loaded back."""
    store = TokenStore(str(tmp_path / "cfp-to-trello" / "trello.json"))
    credentials = _credentials()

    store.save(credentials)

    assert store.load() == credentials


def test_store_file_is_private(tmp_path):
    """The token file is readable by its owner only."""
    store = TokenStore(str(tmp_path / "trello.json"))
    store.save(_credentials())
    assert os.stat(store.path).st_mode & 0o777 == 0o600


def test_store_missing_file(tmp_path):
    """No token file means no credentials."""
    assert TokenStore(str(tmp_path / "nothing.json")).load() is None


def test_store_expired_token(tmp_path):
    """An expired token is ignored."""
    store = TokenStore(str(tmp_path / "trello.json"))
    store.save(_credentials(days=-1))
    assert store.load() is None


def test_store_corrupt_file(tmp_path):
    """An unreadable token file is ignored."""
    path = tmp_path / "trello.json"
    path.write_text("{not json", encoding="utf-8")
    assert TokenStore(str(path)).load() is None

    path.write_text(json.dumps({"token": "only"}), encoding="utf-8")
    assert TokenStore(str(path)).load() is None


def test_authorize_uses_stored_token(tmp_path):
    """A valid stored token skips the browser."""
    config = _config(tmp_path)
    TokenStore(config.token_file).save(_credentials())
    browser = Mock()

    with patch("cfp_trello.auth.OAuth1Session") as session_class:
        credentials = TrelloAuthorizer(config, open_browser=browser).authorize()

    assert credentials.token == "tok"
    browser.assert_not_called()
    session_class.assert_not_called()


def test_authorize_runs_oauth_flow(tmp_path):
    """Without a stored token the user authorizes in the browser and the token is saved."""
    config = _config(tmp_path)
    browser = Mock()
    session = MagicMock()
    session.fetch_request_token.return_value = {"oauth_token": "req", "oauth_token_secret": "reqsec"}
    session.authorization_url.return_value = "https://trello.com/1/OAuthAuthorizeToken?oauth_token=req"
    session.fetch_access_token.return_value = {"oauth_token": "acc", "oauth_token_secret": "accsec"}

    authorizer = TrelloAuthorizer(config, open_browser=browser)
    with patch("cfp_trello.auth.OAuth1Session", return_value=session) as session_class, \
            patch.object(TrelloAuthorizer, "_wait_for_verifier", return_value="verif"):
        credentials = authorizer.authorize()

    assert credentials.token == "acc"
    assert credentials.token_secret == "accsec"
    assert credentials.expires_at > datetime.now(timezone.utc) + timedelta(days=29)
    browser.assert_called_once_with("https://trello.com/1/OAuthAuthorizeToken?oauth_token=req")
    session.authorization_url.assert_called_once()
    assert session.authorization_url.call_args.kwargs["scope"] == "read,write"
    assert session.authorization_url.call_args.kwargs["expiration"] == "30days"
    assert session_class.call_args.kwargs["verifier"] == "verif"
    assert TokenStore(config.token_file).load() == credentials


def test_request_token_failure(tmp_path):
    """A Trello error during the flow is an AuthError."""
    session = MagicMock()
    session.fetch_request_token.side_effect = ValueError("Token request failed with code 401")

    with patch("cfp_trello.auth.OAuth1Session", return_value=session):
        with pytest.raises(AuthError):
            TrelloAuthorizer(_config(tmp_path), open_browser=Mock()).authorize()


def test_denied_authorization_saves_nothing(tmp_path):
    """A denied authorization leaves no token behind."""
    config = _config(tmp_path)
    session = MagicMock()
    session.fetch_request_token.return_value = {"oauth_token": "req", "oauth_token_secret": "reqsec"}

    with patch("cfp_trello.auth.OAuth1Session", return_value=session), \
            patch.object(TrelloAuthorizer, "_wait_for_verifier",
                         side_effect=AuthError("Trello authorization was denied")):
        with pytest.raises(AuthError, match="denied"):
            TrelloAuthorizer(config, open_browser=Mock()).authorize()

    session.fetch_access_token.assert_not_called()
    assert not Path(config.token_file).exists()
