import pickle
from unittest.mock import patch

import pytest

from albumsync.auth import AuthManager
from albumsync.config import DEFAULT_CONFIG, SCOPES


class PicklableCreds:
    def __init__(self, valid=True, expired=False, refresh_token=None):
        self.valid = valid
        self.expired = expired
        self.refresh_token = refresh_token
        self.refreshed = False

    def refresh(self, request):
        self.refreshed = True
        self.valid = True


@pytest.fixture
def manager(tmp_path):
    secrets = tmp_path / "credentials.json"
    secrets.write_text("{}")
    return AuthManager(secrets, tmp_path / "tokens" / "token.json")


def test_scopes_are_read_and_append_only():
    assert sorted(s.rsplit(".", 1)[-1] for s in SCOPES) == ["appendonly", "readonly"]


def test_from_config_uses_configured_paths(tmp_path):
    config = dict(DEFAULT_CONFIG)
    config.update({"credentialsFile": str(tmp_path / "c.json"), "tokenFile": str(tmp_path / "t.json")})
    manager = AuthManager.from_config(config)
    assert manager.credentials_file == tmp_path / "c.json"
    assert manager.token_file == tmp_path / "t.json"


@patch("albumsync.auth.InstalledAppFlow")
def test_valid_token_is_reused(mock_flow, manager):
    manager.token_file.parent.mkdir()
    manager.token_file.write_bytes(pickle.dumps(PicklableCreds()))

    creds = manager.authenticate()

    assert creds.valid
    mock_flow.from_client_secrets_file.assert_not_called()


@patch("albumsync.auth.Request")
@patch("albumsync.auth.InstalledAppFlow")
def test_expired_token_is_refreshed_and_saved(mock_flow, mock_request, manager):
    manager.token_file.parent.mkdir()
    manager.token_file.write_bytes(pickle.dumps(PicklableCreds(valid=False, expired=True, refresh_token="r")))

    creds = manager.authenticate()

    assert creds.refreshed
    assert pickle.loads(manager.token_file.read_bytes()).refreshed
    mock_flow.from_client_secrets_file.assert_not_called()


@patch("albumsync.auth.InstalledAppFlow")
def test_corrupt_token_runs_consent_flow(mock_flow, manager):
    manager.token_file.parent.mkdir()
    manager.token_file.write_bytes(b"not a pickle")
    mock_flow.from_client_secrets_file.return_value.run_local_server.return_value = PicklableCreds()

    creds = manager.authenticate()

    assert creds.valid
    mock_flow.from_client_secrets_file.assert_called_once_with(str(manager.credentials_file), SCOPES)
    assert isinstance(pickle.loads(manager.token_file.read_bytes()), PicklableCreds)


@patch("albumsync.auth.InstalledAppFlow")
def test_missing_token_creates_token_dir(mock_flow, manager):
    mock_flow.from_client_secrets_file.return_value.run_local_server.return_value = PicklableCreds()
    manager.authenticate()
    assert manager.token_file.exists()


def test_missing_client_secrets_raises(tmp_path):
    manager = AuthManager(tmp_path / "absent.json", tmp_path / "token.json")
    with pytest.raises(FileNotFoundError):
        manager.authenticate()
