import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import dotenv_values

from testrail_runs.config import APIKEY_KEY, CREDENTIALS_PATH, USER_KEY


class CredentialsError(Exception):
    """Raised when the credentials file cannot be read."""


@dataclass(frozen=True)
class Credentials:
    username: str
    api_key: str


class CredentialsLoader:
    """
    Reads TestRail credentials from a key-value properties file.

    TESTRAIL_USER / TESTRAIL_APIKEY in the environment take precedence over
    the file. Missing keys come back as empty strings; they are not validated.
    """
    def __init__(self, file_path: str = CREDENTIALS_PATH):
        self.file_path = Path(file_path)
        self.logger = logging.getLogger("testrail.credentials")

    def load(self) -> Credentials:
        if not self.file_path.is_file():
            raise CredentialsError(f"Credentials file not found: {self.file_path}")

        try:
            values = dotenv_values(self.file_path)
        except (OSError, UnicodeDecodeError) as e:
            raise CredentialsError(f"Could not read {self.file_path}: {e}") from e

        username = os.getenv("TESTRAIL_USER") or values.get(USER_KEY) or ""
        api_key = os.getenv("TESTRAIL_APIKEY") or values.get(APIKEY_KEY) or ""

        if not username or not api_key:
            self.logger.warning(f"{USER_KEY} or {APIKEY_KEY} is empty in {self.file_path}")

        self.logger.debug(f"Loaded credentials for '{username}' from {self.file_path}")
        return Credentials(username=username, api_key=api_key)
