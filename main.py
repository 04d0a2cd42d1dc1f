"""
Cloud Foundry task scheduler - command line entry point.

Runs a single "cloudfoundry-task" job: resolves the target app in the
current space, submits the task and waits for it to finish.

Must run inside a Cloud Foundry app container (VCAP_APPLICATION and
VCAP_SERVICES set) with the credential service bound.

Usage:
    python main.py --name nightly-report --command "bin/report" --app report-worker

Exit codes:
    0: task SUCCEEDED
    1: any failure (see log)
"""

import argparse
import signal
import sys
from typing import List, Optional

from dotenv import load_dotenv

from src.cloudfoundry import JOB_TYPE, CloudFoundryTaskHandler
from src.cloudfoundry.models import CONFIG_APP_NAME, CONFIG_CREDENTIALS_SERVICE
from src.infra.config import Settings
from src.infra.logging_config import setup_logging
from src.scheduler import Executor, Job, JobRunStatus


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        description="Run a one-shot Cloud Foundry task and wait for it to finish",
    )
    parser.add_argument("--name", required=True, help="Task name")
    parser.add_argument("--command", required=True, help="Command to run in the app container")
    parser.add_argument("--app", required=True, help="Target app name (cf-appname)")
    parser.add_argument(
        "--credentials-service",
        default=None,
        help="Bound service holding the platform login (cf-credentials-service)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (overrides LOG_LEVEL)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run the CLI and return the process exit code."""
    load_dotenv()
    args = build_parser().parse_args(argv)
    settings = Settings.from_env()

    logger = setup_logging(args.log_level or settings.log_level, settings.log_dir)

    executor = Executor()
    handler = CloudFoundryTaskHandler(
        backoff_factory=settings.backoff_factory(),
        credentials_service=settings.credentials_service,
        http_timeout=settings.http_timeout,
    )
    executor.register(JOB_TYPE, handler)

    def signal_handler(signum, frame):
        signal_name = "SIGINT" if signum == signal.SIGINT else "SIGTERM"
        logger.info(f"{signal_name} received - stopping at next status check")
        executor.cancel_current()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    params = {CONFIG_APP_NAME: args.app}
    if args.credentials_service:
        params[CONFIG_CREDENTIALS_SERVICE] = args.credentials_service

    job = Job.create(
        name=args.name,
        command=args.command,
        job_type=JOB_TYPE,
        params=params,
    )

    job_run = executor.execute(job)

    if job_run.status == JobRunStatus.COMPLETED:
        logger.info(f"Task '{job.name}' completed")
        return 0

    logger.error(f"Task '{job.name}' failed: {job_run.error}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
