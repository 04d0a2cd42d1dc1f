"""
Cloud Foundry environment accessor.

Reads the VCAP_APPLICATION and VCAP_SERVICES documents the platform injects
into every app container. The variables come from an explicit mapping
(os.environ by default) so tests can substitute a fake environment.

Environment Variables:
- VCAP_APPLICATION: JSON with cf_api, space_id, space_name
- VCAP_SERVICES: JSON mapping service label -> list of bound instances
"""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from pydantic import ValidationError

from .errors import CredentialServiceNotFoundError, PlatformEnvironmentError
from .models import Credentials, SpaceContext
from .schemas import VcapApplication, VcapService


logger = logging.getLogger(__name__)

VCAP_APPLICATION = "VCAP_APPLICATION"
VCAP_SERVICES = "VCAP_SERVICES"

DEFAULT_CREDENTIALS_SERVICE = "scheduler-cf-login"


@dataclass(frozen=True)
class ServiceBinding:
    """A service instance bound to the running app."""

    name: str
    label: Optional[str]
    credentials: dict


@dataclass(frozen=True)
class ServiceBindings:
    """All service instances bound to the running app."""

    bindings: List[ServiceBinding] = field(default_factory=list)

    def with_name(self, name: str) -> ServiceBinding:
        """
        Find a binding by instance name.

        Raises:
            CredentialServiceNotFoundError: If no binding has that name
        """
        for binding in self.bindings:
            if binding.name == name:
                return binding
        raise CredentialServiceNotFoundError(name)

    def __len__(self) -> int:
        return len(self.bindings)


@dataclass(frozen=True)
class PlatformApp:
    """The running app as described by the platform."""

    app_name: Optional[str]
    api_address: str
    space_id: str
    space_name: str
    services: ServiceBindings


class Environment:
    """Typed view over the platform's environment variables."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self._environ = os.environ if environ is None else environ

    def is_running_in_platform(self) -> bool:
        """True when VCAP_APPLICATION is present and non-empty."""
        return bool(self._environ.get(VCAP_APPLICATION))

    def current(self) -> PlatformApp:
        """
        Parse the current app's environment.

        Raises:
            PlatformEnvironmentError: If VCAP data is missing or malformed
        """
        if not self.is_running_in_platform():
            raise PlatformEnvironmentError(
                f"{VCAP_APPLICATION} is not set; not running in Cloud Foundry"
            )

        application = self._load_application()
        services = self._load_services()

        return PlatformApp(
            app_name=application.application_name,
            api_address=application.cf_api.rstrip("/"),
            space_id=application.space_id,
            space_name=application.space_name,
            services=services,
        )

    def _load_json(self, key: str, default: str) -> object:
        raw = self._environ.get(key) or default
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise PlatformEnvironmentError(f"{key} is not valid JSON: {e}") from e

    def _load_application(self) -> VcapApplication:
        data = self._load_json(VCAP_APPLICATION, "{}")
        if not isinstance(data, dict):
            raise PlatformEnvironmentError(f"{VCAP_APPLICATION} must be a JSON object")
        try:
            return VcapApplication.model_validate(data)
        except ValidationError as e:
            raise PlatformEnvironmentError(
                f"{VCAP_APPLICATION} is incomplete: {e.error_count()} invalid field(s)"
            ) from e

    def _load_services(self) -> ServiceBindings:
        data = self._load_json(VCAP_SERVICES, "{}")
        if not isinstance(data, dict):
            raise PlatformEnvironmentError(f"{VCAP_SERVICES} must be a JSON object")

        bindings: List[ServiceBinding] = []
        for label, instances in data.items():
            if not isinstance(instances, list):
                raise PlatformEnvironmentError(
                    f"{VCAP_SERVICES} entry '{label}' must be a list"
                )
            for instance in instances:
                try:
                    service = VcapService.model_validate(instance)
                except ValidationError as e:
                    raise PlatformEnvironmentError(
                        f"{VCAP_SERVICES} entry '{label}' is malformed"
                    ) from e
                bindings.append(
                    ServiceBinding(
                        name=service.name,
                        label=service.label or label,
                        credentials=service.credentials,
                    )
                )

        return ServiceBindings(bindings)


def build_space_context(
    environment: Environment,
    credentials_service: str = DEFAULT_CREDENTIALS_SERVICE,
) -> SpaceContext:
    """
    Resolve the space, API address and login for a run.

    No network calls are made; failing here means the run never reaches
    the platform API.

    Args:
        environment: Environment accessor
        credentials_service: Name of the bound service holding the login

    Returns:
        SpaceContext for the run

    Raises:
        PlatformEnvironmentError: If not running in Cloud Foundry or VCAP data is unusable
        CredentialServiceNotFoundError: If the credential service is not bound
        InvalidCredentialsError: If the binding lacks a username or password
    """
    if not environment.is_running_in_platform():
        raise PlatformEnvironmentError("not running in Cloud Foundry")

    app = environment.current()
    binding = app.services.with_name(credentials_service)
    credentials = Credentials.from_binding(binding.credentials)

    logger.debug(
        f"[CF] Space context resolved: space={app.space_name} "
        f"api={app.api_address} service={credentials_service}"
    )

    return SpaceContext(
        space_id=app.space_id,
        space_name=app.space_name,
        api_address=app.api_address,
        credentials=credentials,
    )
