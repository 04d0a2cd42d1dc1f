"""
App identity resolution.

Resolves a configured app name to exactly one app in the run's space.
"""

import logging
from typing import Dict, List, Protocol

from .errors import AppNotFoundError, AppNotUniqueError
from .models import AppIdentity, SpaceContext


logger = logging.getLogger(__name__)


class AppQueryClient(Protocol):
    """Protocol for the app listing capability of the platform client."""

    def list_apps_by_query(self, filters: Dict[str, str]) -> List[AppIdentity]:
        ...


class AppResolver:
    """
    Resolves an app name within a space.

    Cardinality policy:
        0 matches  → AppNotFoundError
        1 match    → that app
        >1 matches → AppNotUniqueError (the space filter should make names unique)

    The name and space filters go to the platform as one scoped query;
    results are never filtered client-side. Query errors propagate unchanged.
    """

    def __init__(self, client: AppQueryClient):
        self.client = client

    def resolve(self, app_name: str, space: SpaceContext) -> AppIdentity:
        """
        Resolve app_name in the given space.

        Args:
            app_name: Target app name
            space: Space the app must live in

        Returns:
            The single matching AppIdentity

        Raises:
            AppNotFoundError: If no app matches
            AppNotUniqueError: If more than one app matches
        """
        apps = self.client.list_apps_by_query(
            {"name": app_name, "space_guid": space.space_id}
        )

        if not apps:
            raise AppNotFoundError(app_name, space.space_name)

        if len(apps) > 1:
            logger.error(
                f"[CF] Space-scoped query for '{app_name}' returned {len(apps)} apps: "
                f"{[app.guid for app in apps]}"
            )
            raise AppNotUniqueError(app_name, space.space_name, len(apps))

        app = apps[0]
        logger.info(f"[CF] Resolved app '{app_name}' in space '{space.space_name}' to {app.guid}")
        return app
