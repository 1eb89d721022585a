"""Google credential loading and bearer-token provider."""

import logging
from collections.abc import Sequence
from pathlib import Path

import google.auth
from google.auth.credentials import Credentials
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2 import service_account

from src.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

SCOPES: tuple[str, ...] = (
    "https://www.googleapis.com/auth/display-video",
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive.readonly",
)


def load_credentials(credentials_file: str | None = None, scopes: Sequence[str] = SCOPES) -> Credentials:
    """Load a service account file, or application default credentials.

    Args:
        credentials_file: Path to a service account JSON file (optional)
        scopes: OAuth scopes to request

    Raises:
        ConfigurationError: If no usable credentials are found
    """
    try:
        if credentials_file:
            path = Path(credentials_file).expanduser()
            if not path.exists():
                raise ConfigurationError(f"Credentials file not found: {path}")
            return service_account.Credentials.from_service_account_file(str(path), scopes=list(scopes))

        credentials, project = google.auth.default(scopes=list(scopes))
        logger.debug(f"Using application default credentials (project: {project})")
        return credentials
    except (GoogleAuthError, ValueError) as e:
        raise ConfigurationError(f"Unable to load Google credentials: {e}") from e


class GoogleTokenProvider:
    """Callable returning a fresh OAuth access token for each API call."""

    def __init__(self, credentials: Credentials):
        self.credentials = credentials
        self._request = Request()

    def __call__(self) -> str:
        if not self.credentials.valid:
            logger.debug("Refreshing Google access token")
            self.credentials.refresh(self._request)
        return self.credentials.token
