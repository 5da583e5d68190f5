from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from testrail_runs.core.client import APIError
from testrail_runs.core.credentials import Credentials, CredentialsError

NOW = datetime(2026, 10, 18, 21, 5, 33)


class FakeClient:
    """
    Stands in for TestRailAPIClient. Answers are looked up by URI prefix; an
    exception instance as an answer is raised instead of returned.
    """
    def __init__(self, answers: Optional[Dict[str, Any]] = None):
        self.answers = answers or {}
        self.calls: List[Tuple[str, str, Any]] = []
        self.credentials = None

    def set_credentials(self, username: str, api_key: str) -> None:
        self.credentials = (username, api_key)

    def send_get(self, uri: str) -> Any:
        self.calls.append(("GET", uri, None))
        return self._answer(uri)

    def send_post(self, uri: str, data: Dict[str, Any]) -> Any:
        self.calls.append(("POST", uri, data))
        return self._answer(uri)

    def uris(self, method: Optional[str] = None) -> List[str]:
        return [uri for m, uri, _ in self.calls if method is None or m == method]

    def _answer(self, uri: str) -> Any:
        for prefix, answer in self.answers.items():
            if uri.startswith(prefix):
                if isinstance(answer, Exception):
                    raise answer
                return answer
        raise APIError(404, f"no answer for {uri}")


class FakeCredentialsLoader:
    def __init__(self, credentials: Optional[Credentials] = None, fail: bool = False):
        self.credentials = credentials or Credentials("jane@example.com", "secret")
        self.fail = fail

    def load(self) -> Credentials:
        if self.fail:
            raise CredentialsError("Credentials file not found: config.properties")
        return self.credentials
