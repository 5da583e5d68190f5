import sys
from typing import Tuple

import click

from testrail_runs.config import (
    CREDENTIALS_PATH as DEFAULT_CREDENTIALS_PATH,
    NO_RUN,
    PROJECT_ID as DEFAULT_PROJECT_ID,
    RUN_NAME as DEFAULT_RUN_NAME,
    TESTRAIL_BASE_URL as DEFAULT_BASE_URL,
)
from testrail_runs.utils.logger import setup_logger
from testrail_runs.core.client import TestRailAPIClient
from testrail_runs.core.credentials import CredentialsLoader
from testrail_runs.core.session import RunSessionManager


def build_manager(base_url: str, config_path: str, insecure: bool) -> RunSessionManager:
    client = TestRailAPIClient(base_url, insecure=insecure)
    return RunSessionManager(client, CredentialsLoader(config_path))


@click.group()
@click.option('--base-url', '-u', default=DEFAULT_BASE_URL, help='TestRail instance URL')
@click.option('--config', '-c', 'config_path', default=DEFAULT_CREDENTIALS_PATH, help='Path to the credentials properties file')
@click.option('--verbose', '-v', is_flag=True, help='Verbose logging')
@click.option('--insecure', '-k', is_flag=True, help='Disable SSL certificate verification')
@click.pass_context
def main(ctx, base_url, config_path, verbose, insecure):
    """
    Report automated test results to a daily TestRail run.
    """
    logger = setup_logger(verbose=verbose)

    if insecure:
        import urllib3
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
        logger.warning("SSL certificate verification disabled!")

    ctx.obj = build_manager(base_url, config_path, insecure)


@main.command()
@click.option('--run-name', '-n', default=DEFAULT_RUN_NAME, help='Prefix of the daily run name')
@click.option('--project-id', '-p', default=DEFAULT_PROJECT_ID, type=int, help='TestRail project ID')
@click.option('--result', '-r', 'results', multiple=True, type=(int, int, str),
              help='CASE_ID STATUS_ID MESSAGE; may be repeated')
@click.pass_obj
def report(manager: RunSessionManager, run_name: str, project_id: int, results: Tuple[Tuple[int, int, str], ...]):
    """
    Initialize today's run and post the given results.
    """
    manager.initialize(run_name, project_id)
    if not manager.is_ready:
        click.echo(click.style("FATAL: TestRail session could not be initialized", fg='red', bold=True))
        sys.exit(1)

    run_id = manager.session.run_id
    if run_id == NO_RUN:
        click.echo(click.style(f"FATAL: no TestRail run could be found or created in project {project_id}", fg='red', bold=True))
        sys.exit(1)

    posted = 0
    failed = 0
    for case_id, status_id, message in results:
        if not manager.case_exists(case_id):
            click.echo(click.style(f"Skipping case {case_id}: not part of run {run_id}", fg='yellow'))
            continue
        if manager.post_result_checked(case_id, status_id, message).is_ok:
            posted += 1
        else:
            click.echo(click.style(f"Failed to post result for case {case_id}", fg='red'))
            failed += 1

    click.echo(f"Run {run_id}: {posted}/{len(results)} results posted")
    sys.exit(0 if failed == 0 else 1)


def _require_credentials(manager: RunSessionManager) -> None:
    if not manager.authenticate():
        click.echo(click.style("FATAL: TestRail credentials could not be loaded", fg='red', bold=True))
        sys.exit(1)


@main.command('daily-run')
@click.option('--project-id', '-p', default=DEFAULT_PROJECT_ID, type=int, help='TestRail project ID')
@click.pass_obj
def daily_run(manager: RunSessionManager, project_id: int):
    """
    Print the ID of the run created today, if any.
    """
    _require_credentials(manager)

    run_id = manager.resolve_daily_run(project_id)
    if run_id == NO_RUN:
        click.echo(f"No run created today in project {project_id}")
    else:
        click.echo(f"Today's run: {run_id}")


@main.command('case-info')
@click.argument('case_id', type=int)
@click.pass_obj
def case_info(manager: RunSessionManager, case_id: int):
    """
    Print the details of a TestRail case.
    """
    _require_credentials(manager)
    manager.get_case_info(case_id)


if __name__ == '__main__':
    main()
