"""
Daily run bookkeeping for TestRail.

A RunSessionManager finds (or creates) today's run for a project, caches the
mapping from case ID to the run's test ID, and posts results by case ID.
Failures are logged and turned into sentinels; nothing raises past the
public methods.
"""
import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

import click
import requests

from testrail_runs.config import COMMENT_PREFIX, NO_RUN, RUN_TIMESTAMP_FORMAT
from testrail_runs.core.client import APIError, TestRailAPIClient
from testrail_runs.core.credentials import CredentialsError, CredentialsLoader
from testrail_runs.core.results import CaseResult, ErrorKind, Result


class SessionState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"


@dataclass
class RunSession:
    project_id: Optional[int] = None
    run_id: int = NO_RUN
    case_map: Dict[int, int] = field(default_factory=dict)
    state: SessionState = SessionState.UNINITIALIZED


def start_of_day(now: datetime) -> int:
    """Local midnight of the day containing `now`, in Unix seconds."""
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return int(midnight.timestamp())


def run_name(prefix: str, now: datetime) -> str:
    return f"{prefix}: {now.strftime(RUN_TIMESTAMP_FORMAT)}"


API_PREFIX = "/api/v2/"


def _records(payload: Any, key: str) -> List[Dict[str, Any]]:
    # Newer TestRail versions wrap bulk endpoints in {"offset", "limit", "size", key: [...]}
    if isinstance(payload, dict) and key in payload:
        payload = payload[key]
    if not isinstance(payload, list):
        raise ValueError(f"Expected a list of {key}, got {type(payload).__name__}")
    return payload


class RunSessionManager:
    """
    Owns the single RunSession of a reporting process.
    """
    def __init__(
        self,
        client: TestRailAPIClient,
        credentials_loader: Optional[CredentialsLoader] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.client = client
        self.credentials_loader = credentials_loader or CredentialsLoader()
        self.clock = clock
        self.session = RunSession()
        self.logger = logging.getLogger("testrail.session")

    @property
    def is_ready(self) -> bool:
        return self.session.state is SessionState.READY

    def authenticate(self) -> bool:
        """Loads credentials into the client. False if they could not be read."""
        try:
            credentials = self.credentials_loader.load()
        except CredentialsError as e:
            self.logger.error(f"Could not load credentials: {e}")
            return False

        self.logger.info(f"Username: {credentials.username}")
        self.client.set_credentials(credentials.username, credentials.api_key)
        return True

    def initialize(self, run_name_prefix: str, project_id: int) -> None:
        self.logger.info("Initializing TestRail run")
        if not self.authenticate():
            return

        self.session.state = SessionState.INITIALIZING
        self.session.project_id = project_id

        run_id = self.resolve_daily_run(project_id)
        if run_id == NO_RUN:
            run_id = self.create_run(run_name(run_name_prefix, self.clock()), project_id)
        self.session.run_id = run_id

        if run_id == NO_RUN:
            self.logger.error(f"No run available for project {project_id}; results will not be posted")
        else:
            self.load_case_map(run_id)

        self.session.state = SessionState.READY
        self.logger.info(f"TestRun initialized (run {run_id}, {len(self.session.case_map)} tests)")

    def resolve_daily_run(self, project_id: int) -> int:
        """
        Returns the ID of a run created today in `project_id`, or NO_RUN.

        The first run in the API's response order wins; it is not guaranteed
        to be the most recent one.
        """
        result = self._fetch_daily_run(project_id)
        if not result.is_ok:
            self.logger.error(
                f"Could not list today's runs for project {project_id}: {result.detail}",
                exc_info=result.exception,
            )
        return result.unwrap_or(NO_RUN)

    def create_run(self, name: str, project_id: int) -> int:
        result = self._add_run(name, project_id)
        if not result.is_ok:
            self.logger.error(f"Could not create run '{name}': {result.detail}", exc_info=result.exception)
        return result.unwrap_or(NO_RUN)

    def load_case_map(self, run_id: int) -> None:
        result = self._fetch_tests(run_id)
        if not result.is_ok:
            self.logger.error(f"Could not load tests of run {run_id}: {result.detail}", exc_info=result.exception)
            return

        for record in result.value:
            self.session.case_map[record["case_id"]] = record["id"]
        self.logger.debug(f"Mapped {len(result.value)} tests for run {run_id}")

    def post_result(self, case_id: int, status_id: int, message: str) -> None:
        self.post_result_checked(case_id, status_id, message)

    def post_result_checked(self, case_id: int, status_id: int, message: str) -> Result:
        """Same as post_result, but hands the outcome back to the caller."""
        result = self._add_result(case_id, CaseResult(status_id, COMMENT_PREFIX + message))
        if result.error is ErrorKind.LOOKUP_MISS:
            self.logger.warning(f"Test Case {case_id} does not exist in test suite.")
        elif not result.is_ok:
            self.logger.error(f"Could not post result for case {case_id}: {result.detail}", exc_info=result.exception)
        return result

    def case_exists(self, case_id: int) -> bool:
        return case_id in self.session.case_map

    def get_case_info(self, case_id: int) -> None:
        try:
            case = self.client.send_get(f"get_case/{case_id}")
        except (requests.RequestException, APIError):
            self.logger.exception(f"Could not fetch case {case_id}")
            return
        if not isinstance(case, dict):
            self.logger.error(f"Unexpected response for case {case_id}: {case!r}")
            return

        click.echo("\n--- Test Rail Test Info ---")
        click.echo(f"Date Created: {_format_epoch(case.get('created_on'))}")
        click.echo(f"Updated On: {_format_epoch(case.get('updated_on'))}")
        click.echo(f"Title: {case.get('title')}")
        click.echo(f"Description: {case.get('custom_expected')}")
        click.echo(f"Id: {case.get('id')}")
        click.echo(f"Suite Id: {case.get('suite_id')}")

    # --- Result-returning steps ---

    def _fetch_daily_run(self, project_id: int) -> Result:
        since = start_of_day(self.clock())
        try:
            runs = _records(
                self.client.send_get(f"get_runs/{project_id}&created_after={since}"), "runs"
            )
            if not runs:
                return Result.ok(NO_RUN)
            return Result.ok(int(runs[0]["id"]))
        except (requests.RequestException, APIError) as e:
            return Result.fail(ErrorKind.TRANSPORT, str(e), e)
        except (ValueError, KeyError, TypeError) as e:
            return Result.fail(ErrorKind.PARSE, repr(e), e)

    def _add_run(self, name: str, project_id: int) -> Result:
        try:
            run = self.client.send_post(f"add_run/{project_id}", {"name": name, "include_all": True})
            self.logger.info(f"Created run '{name}' ({run['id']})")
            return Result.ok(int(run["id"]))
        except (requests.RequestException, APIError) as e:
            return Result.fail(ErrorKind.TRANSPORT, str(e), e)
        except (ValueError, KeyError, TypeError) as e:
            return Result.fail(ErrorKind.PARSE, repr(e), e)

    def _fetch_tests(self, run_id: int) -> Result:
        records = []
        uri = f"get_tests/{run_id}"
        seen = set()
        try:
            while uri and uri not in seen:
                seen.add(uri)
                payload = self.client.send_get(uri)
                tests = _records(payload, "tests")
                records.extend({"case_id": int(t["case_id"]), "id": int(t["id"])} for t in tests)
                uri = _next_page(payload)
            return Result.ok(records)
        except (requests.RequestException, APIError) as e:
            return Result.fail(ErrorKind.TRANSPORT, str(e), e)
        except (ValueError, KeyError, TypeError) as e:
            return Result.fail(ErrorKind.PARSE, repr(e), e)

    def _add_result(self, case_id: int, case_result: CaseResult) -> Result:
        test_id = self.session.case_map.get(case_id)
        if test_id is None:
            return Result.fail(ErrorKind.LOOKUP_MISS, f"case {case_id}")
        try:
            return Result.ok(self.client.send_post(f"add_result/{test_id}", case_result.to_payload()))
        except (requests.RequestException, APIError) as e:
            return Result.fail(ErrorKind.TRANSPORT, str(e), e)


def _next_page(payload: Any) -> Optional[str]:
    # Paginated answers carry {"_links": {"next": "/api/v2/get_tests/5&limit=250&offset=250"}}
    if not isinstance(payload, dict):
        return None
    next_link = (payload.get("_links") or {}).get("next")
    if not next_link:
        return None
    _, _, uri = next_link.partition(API_PREFIX)
    return uri or next_link.lstrip("/")


def _format_epoch(value: Any) -> str:
    if value is None:
        return "-"
    try:
        return datetime.fromtimestamp(int(value)).strftime("%m/%d/%y %I:%M %p")
    except (TypeError, ValueError, OverflowError, OSError):
        return str(value)
