"""
Cloud Foundry task runner and job handler.

TaskRunner drives one run:
1. Resolve the target app in the space (AppResolver)
2. Submit a single task against it (never retried)
3. Poll the task until it reaches a terminal state

Poll loop state machine:
    RUNNING   → sleep (backoff with jitter), fetch again
    SUCCEEDED → return
    FAILED    → TaskFailedError
    other     → UnknownTaskStateError

A status fetch error aborts the loop unchanged. There is no deadline. A
cancelled run stops just before submission or at the next sleep between
fetches.

CloudFoundryTaskHandler plugs TaskRunner into the scheduler as the
"cloudfoundry-task" job type.
"""

import logging
import threading
from typing import Callable, Dict, List, Optional, Protocol

from src.scheduler.entities import Job
from src.scheduler.executor import ExecutionContext, JobHandler

from .backoff import Backoff
from .client import DEFAULT_TIMEOUT_SECONDS, CloudFoundryClient
from .environment import DEFAULT_CREDENTIALS_SERVICE, Environment, build_space_context
from .errors import TaskCancelledError, TaskFailedError, UnknownTaskStateError
from .models import (
    CONFIG_COMMAND,
    CONFIG_CREDENTIALS_SERVICE,
    CONFIG_NAME,
    AppIdentity,
    RemoteTask,
    SpaceContext,
    TaskSpec,
    TaskState,
)
from .resolver import AppResolver


logger = logging.getLogger(__name__)

JOB_TYPE = "cloudfoundry-task"


class TaskClient(Protocol):
    """Protocol for the platform client capabilities a run needs."""

    def list_apps_by_query(self, filters: Dict[str, str]) -> List[AppIdentity]:
        ...

    def create_task(self, name: str, command: str, droplet_guid: str) -> RemoteTask:
        ...

    def get_task_by_guid(self, guid: str) -> RemoteTask:
        ...


class TaskRunner:
    """
    Submits one task and blocks until it finishes.

    A TaskRunner owns its backoff state and task snapshots; nothing is
    shared between runners.
    """

    def __init__(
        self,
        client: TaskClient,
        space: SpaceContext,
        backoff_factory: Callable[[], Backoff] = Backoff,
        wait: Optional[Callable[[float], bool]] = None,
        cancel_event: Optional[threading.Event] = None,
    ):
        """
        Initialize TaskRunner.

        Args:
            client: Platform API client
            space: Space context for the run
            backoff_factory: Builds the poll delay generator for a run
            wait: Sleeps for the given seconds and returns True if the run
                was cancelled meanwhile (injectable for testing)
            cancel_event: Cancellation flag shared with the caller; a fresh
                one is created when omitted
        """
        self.client = client
        self.space = space
        self.resolver = AppResolver(client)
        self._backoff_factory = backoff_factory
        self._cancelled = threading.Event() if cancel_event is None else cancel_event
        self._wait = wait or self._cancelled.wait

    def cancel(self) -> None:
        """Stop before submission or at the next sleep. A submitted task keeps running."""
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def run(self, spec: TaskSpec) -> RemoteTask:
        """
        Run a task to completion.

        Args:
            spec: The task to run

        Returns:
            The final SUCCEEDED task snapshot

        Raises:
            AppNotFoundError / AppNotUniqueError: From app resolution
            TaskFailedError: If the task reports FAILED
            UnknownTaskStateError: If the task reports any other state
            TaskCancelledError: If cancel() was called before submission or while polling
            CloudFoundryAPIError / httpx.HTTPError: From the platform client
        """
        app = self.resolver.resolve(spec.target_app_name, self.space)

        if self.cancelled:
            logger.warning(f"[CF] Run cancelled before submitting task '{spec.name}'")
            raise TaskCancelledError()

        task = self.client.create_task(
            name=spec.name,
            command=spec.command,
            droplet_guid=app.guid,
        )
        logger.info(
            f"[CF] Submitted task '{spec.name}' ({task.guid}) to app '{app.name}'"
        )

        return self._wait_for_completion(task)

    def _wait_for_completion(self, task: RemoteTask) -> RemoteTask:
        delay = self._backoff_factory()

        while True:
            seconds = delay.duration()
            if self._wait(seconds) or self.cancelled:
                logger.warning(
                    f"[CF] Polling cancelled for task {task.guid}; "
                    "remote task may be orphaned"
                )
                raise TaskCancelledError(task.guid)

            task = self.client.get_task_by_guid(task.guid)

            if task.state == TaskState.RUNNING:
                logger.debug(
                    f"[CF] Task {task.guid} still RUNNING "
                    f"(poll {delay.attempt}, slept {seconds:.2f}s)"
                )
                continue

            if task.state == TaskState.SUCCEEDED:
                logger.info(f"[CF] Task {task.guid} SUCCEEDED after {delay.attempt} poll(s)")
                return task

            if task.state == TaskState.FAILED:
                raise TaskFailedError(task.guid, task.failure_reason)

            raise UnknownTaskStateError(task.guid, task.raw_state)


class CloudFoundryTaskHandler(JobHandler):
    """
    Job handler for the "cloudfoundry-task" job type.

    Job fields used:
        job.name, job.command
        job.params["cf-appname"]              (required)
        job.params["cf-credentials-service"]  (optional)
    """

    def __init__(
        self,
        environment: Optional[Environment] = None,
        client_factory: Optional[Callable[[SpaceContext], CloudFoundryClient]] = None,
        backoff_factory: Callable[[], Backoff] = Backoff,
        credentials_service: str = DEFAULT_CREDENTIALS_SERVICE,
        http_timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        """
        Initialize the handler.

        Args:
            environment: Platform environment accessor (defaults to os.environ)
            client_factory: Builds a client for a space (injectable for testing)
            backoff_factory: Builds the poll delay generator for each run
            credentials_service: Credential service used when a job names none
            http_timeout: Per-request timeout for the default client
        """
        self.environment = environment or Environment()
        self.credentials_service = credentials_service
        self.http_timeout = http_timeout
        self._client_factory = client_factory or self._create_client
        self._backoff_factory = backoff_factory
        self._cancel_event: Optional[threading.Event] = None

    def _create_client(self, space: SpaceContext) -> CloudFoundryClient:
        return CloudFoundryClient(
            api_address=space.api_address,
            username=space.credentials.username,
            password=space.credentials.password,
            timeout=self.http_timeout,
        )

    def execute(self, job: Job, context: ExecutionContext) -> None:
        """Run the job's task and block until it finishes."""
        cancel_event = threading.Event()
        self._cancel_event = cancel_event
        try:
            self._run(job, context, cancel_event)
        finally:
            self._cancel_event = None

    def _run(
        self, job: Job, context: ExecutionContext, cancel_event: threading.Event
    ) -> None:
        section = dict(job.params)
        section[CONFIG_NAME] = job.name
        section[CONFIG_COMMAND] = job.command
        spec = TaskSpec.from_config(section)

        service = section.get(CONFIG_CREDENTIALS_SERVICE) or self.credentials_service
        space = build_space_context(self.environment, service)

        context.logger.info(
            f"[CF] Run {context.job_run.run_id}: task '{spec.name}' "
            f"on app '{spec.target_app_name}' in space '{space.space_name}'"
        )

        with self._client_factory(space) as client:
            runner = TaskRunner(
                client,
                space,
                backoff_factory=self._backoff_factory,
                cancel_event=cancel_event,
            )
            runner.run(spec)

    def cancel(self) -> bool:
        """Cancel the current run; it stops before submission or at its next sleep."""
        cancel_event = self._cancel_event
        if cancel_event is None:
            return False
        cancel_event.set()
        return True
