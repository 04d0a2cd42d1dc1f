"""
Cloud Foundry API client.

Thin synchronous client over httpx covering the calls a task run needs:
- UAA password-grant login (lazy, renewed before the token expires)
- GET  /v2/apps?q=name:<name>&q=space_guid:<guid>  (all pages)
- POST /v3/apps/<guid>/tasks
- GET  /v3/tasks/<guid>

An authenticated request answered with 401 triggers one fresh login and is
sent again. Other non-2xx responses raise CloudFoundryAPIError. httpx
transport exceptions (timeouts, connection errors) propagate unchanged.
"""

import logging
import time
from typing import Callable, Dict, List, Optional

import httpx
from pydantic import ValidationError

from .errors import CloudFoundryAPIError
from .models import AppIdentity, RemoteTask
from .schemas import (
    AppListResponse,
    InfoResponse,
    TaskRequest,
    TaskResponse,
    TokenResponse,
)


logger = logging.getLogger(__name__)

# Client configuration
DEFAULT_TIMEOUT_SECONDS = 30.0
TOKEN_REFRESH_MARGIN_SECONDS = 60.0
UAA_CLIENT_ID = "cf"
UAA_CLIENT_SECRET = ""
USER_AGENT = "cf-task-scheduler/1.0"


class CloudFoundryClient:
    """
    Cloud Foundry API client bound to one API endpoint and one user.

    Usable as a context manager; close() releases the HTTP connection pool.
    """

    def __init__(
        self,
        api_address: str,
        username: str,
        password: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.BaseTransport] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize CloudFoundryClient.

        Args:
            api_address: Cloud Controller URL (e.g. https://api.example.com)
            username: Platform user name
            password: Platform password
            timeout: Per-request timeout in seconds
            transport: httpx transport (injectable for testing)
            clock: Monotonic time source for token expiry (injectable for testing)
        """
        self.api_address = api_address.rstrip("/")
        self._username = username
        self._password = password
        self._clock = clock
        self._token: Optional[str] = None
        self._token_expires_at: Optional[float] = None
        self._http = httpx.Client(
            timeout=timeout,
            transport=transport,
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
        )

    def __enter__(self) -> "CloudFoundryClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._http.close()

    # =========================================================================
    # Authentication
    # =========================================================================

    def login(self) -> str:
        """
        Obtain a bearer token via the UAA password grant.

        Returns:
            The access token
        """
        info = self._parse(
            InfoResponse,
            self._send("GET", f"{self.api_address}/v2/info", authenticated=False),
        )

        token_url = f"{info.token_endpoint.rstrip('/')}/oauth/token"
        response = self._send(
            "POST",
            token_url,
            authenticated=False,
            data={
                "grant_type": "password",
                "username": self._username,
                "password": self._password,
            },
            auth=(UAA_CLIENT_ID, UAA_CLIENT_SECRET),
        )
        token = self._parse(TokenResponse, response)
        self._token = token.access_token
        if token.expires_in is None:
            self._token_expires_at = None
        else:
            self._token_expires_at = (
                self._clock() + token.expires_in - TOKEN_REFRESH_MARGIN_SECONDS
            )

        logger.info(f"[CF] Logged in to {self.api_address} as {self._username}")
        return self._token

    def _token_valid(self) -> bool:
        if self._token is None:
            return False
        if self._token_expires_at is None:
            return True
        return self._clock() < self._token_expires_at

    # =========================================================================
    # Apps
    # =========================================================================

    def list_apps_by_query(self, filters: Dict[str, str]) -> List[AppIdentity]:
        """
        List apps matching every filter (logical AND), following all pages.

        Args:
            filters: e.g. {"name": "svc", "space_guid": "..."}

        Returns:
            Matching apps in platform order
        """
        params = [("q", f"{key}:{value}") for key, value in filters.items()]
        url: Optional[str] = f"{self.api_address}/v2/apps"
        apps: List[AppIdentity] = []

        while url is not None:
            page = self._parse(AppListResponse, self._send("GET", url, params=params))
            apps.extend(resource.to_identity() for resource in page.resources)
            # next_url already carries the query string
            url = f"{self.api_address}{page.next_url}" if page.next_url else None
            params = None

        logger.debug(f"[CF] App query {filters} matched {len(apps)} app(s)")
        return apps

    # =========================================================================
    # Tasks
    # =========================================================================

    def create_task(self, name: str, command: str, droplet_guid: str) -> RemoteTask:
        """
        Submit a one-shot task against an app.

        Args:
            name: Task name
            command: Shell command to run in the app's container
            droplet_guid: GUID of the app whose droplet runs the task

        Returns:
            The task as created
        """
        body = TaskRequest(name=name, command=command)
        response = self._send(
            "POST",
            f"{self.api_address}/v3/apps/{droplet_guid}/tasks",
            json=body.model_dump(),
        )
        task = self._parse(TaskResponse, response).to_remote_task()

        logger.info(f"[CF] Created task {task.guid} ({name}) on app {droplet_guid}")
        return task

    def get_task_by_guid(self, guid: str) -> RemoteTask:
        """Fetch a fresh snapshot of a task."""
        response = self._send("GET", f"{self.api_address}/v3/tasks/{guid}")
        return self._parse(TaskResponse, response).to_remote_task()

    # =========================================================================
    # HTTP helpers
    # =========================================================================

    def _send(
        self,
        method: str,
        url: str,
        authenticated: bool = True,
        **kwargs,
    ) -> httpx.Response:
        if not authenticated:
            response = self._http.request(method, url, **kwargs)
        else:
            if not self._token_valid():
                self.login()
            response = self._request_with_token(method, url, **kwargs)
            if response.status_code == 401:
                logger.info(f"[CF] {method} {url} rejected the token, logging in again")
                self.login()
                response = self._request_with_token(method, url, **kwargs)

        if not response.is_success:
            logger.warning(
                f"[CF] {method} {url} returned HTTP {response.status_code}"
            )
            raise CloudFoundryAPIError(method, url, response.status_code, response.text)

        return response

    def _request_with_token(self, method: str, url: str, **kwargs) -> httpx.Response:
        headers = dict(kwargs.pop("headers", {}))
        headers["Authorization"] = f"Bearer {self._token}"
        return self._http.request(method, url, headers=headers, **kwargs)

    @staticmethod
    def _parse(schema, response: httpx.Response):
        try:
            return schema.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise CloudFoundryAPIError(
                response.request.method,
                str(response.request.url),
                response.status_code,
                f"unexpected response body: {e}",
            ) from e
