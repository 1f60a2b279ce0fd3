import pickle
from pathlib import Path
from typing import Sequence, Union

from google.auth.transport.requests import Request
from google_auth_oauthlib.flow import InstalledAppFlow
from loguru import logger

from albumsync.config import CREDENTIALS_FILE, SCOPES, TOKEN_FILE


class AuthManager:
    """
    OAuth for the Photos Library API. The pickled token is reused while
    valid, refreshed when expired, and replaced by a browser consent flow
    when missing or unreadable.
    """

    def __init__(
        self,
        credentials_file: Union[str, Path] = CREDENTIALS_FILE,
        token_file: Union[str, Path] = TOKEN_FILE,
        scopes: Sequence[str] = SCOPES,
    ):
        self.credentials_file = Path(credentials_file)
        self.token_file = Path(token_file)
        self.scopes = list(scopes)
        self.creds = None

    @classmethod
    def from_config(cls, config: dict) -> "AuthManager":
        return cls(config["credentialsFile"], config["tokenFile"])

    def _load_token(self):
        if not self.token_file.exists():
            return None
        with open(self.token_file, "rb") as token:
            try:
                return pickle.load(token)
            except (pickle.UnpicklingError, EOFError) as e:
                logger.warning(f"Token file {self.token_file} unreadable ({e}); re-authenticating.")
        self.token_file.unlink()
        return None

    def _save_token(self):
        self.token_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.token_file, "wb") as token:
            pickle.dump(self.creds, token)

    def _run_consent_flow(self):
        if not self.credentials_file.exists():
            raise FileNotFoundError(f"OAuth client secrets not found at {self.credentials_file}")
        flow = InstalledAppFlow.from_client_secrets_file(str(self.credentials_file), self.scopes)
        return flow.run_local_server(port=0)

    def authenticate(self):
        """Return valid credentials, refreshing or re-consenting as needed."""
        self.creds = self._load_token()
        if self.creds and self.creds.valid:
            return self.creds

        if self.creds and self.creds.expired and self.creds.refresh_token:
            logger.info("Refreshing expired Google Photos token")
            self.creds.refresh(Request())
        else:
            self.creds = self._run_consent_flow()
        self._save_token()
        return self.creds
