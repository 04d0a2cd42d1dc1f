"""
Wire schemas for Cloud Foundry payloads.

Platform responses and the VCAP_* environment documents are validated here,
at the boundary, and converted to the immutable domain values in models.py.
Unknown fields are ignored.
"""

from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from .models import AppIdentity, RemoteTask


# =============================================================================
# VCAP Environment Schemas
# =============================================================================


class VcapApplication(BaseModel):
    """Subset of VCAP_APPLICATION used to locate the space and API."""

    application_name: Optional[str] = Field(default=None, alias="name")
    cf_api: str = Field(..., min_length=1, description="Cloud Controller API URL")
    space_id: str = Field(..., min_length=1, description="Space GUID")
    space_name: str = Field(..., min_length=1, description="Space name")


class VcapService(BaseModel):
    """One service instance bound to the app."""

    name: str
    label: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    credentials: dict = Field(default_factory=dict)


# =============================================================================
# Cloud Controller Schemas
# =============================================================================


class InfoResponse(BaseModel):
    """GET /v2/info"""

    token_endpoint: str = Field(..., min_length=1)
    api_version: Optional[str] = None


class TokenResponse(BaseModel):
    """UAA password grant response."""

    access_token: str
    token_type: str = "bearer"
    expires_in: Optional[int] = None


class AppMetadata(BaseModel):
    guid: str


class AppEntity(BaseModel):
    name: str
    space_guid: Optional[str] = None


class AppResource(BaseModel):
    """Single /v2/apps resource."""

    metadata: AppMetadata
    entity: AppEntity

    def to_identity(self) -> AppIdentity:
        return AppIdentity(guid=self.metadata.guid, name=self.entity.name)


class AppListResponse(BaseModel):
    """GET /v2/apps page."""

    total_results: int = 0
    next_url: Optional[str] = None
    resources: List[AppResource] = Field(default_factory=list)


class TaskRequest(BaseModel):
    """POST /v3/apps/:guid/tasks body."""

    name: str
    command: str


class TaskResult(BaseModel):
    failure_reason: Optional[str] = None


class TaskResponse(BaseModel):
    """A v3 task resource."""

    guid: str
    state: str
    name: Optional[str] = None
    command: Optional[str] = None
    sequence_id: Optional[int] = None
    result: Optional[TaskResult] = None
    links: Dict[str, dict] = Field(default_factory=dict)

    def to_remote_task(self) -> RemoteTask:
        return RemoteTask.from_state(
            guid=self.guid,
            raw_state=self.state,
            name=self.name,
            failure_reason=self.result.failure_reason if self.result else None,
        )
