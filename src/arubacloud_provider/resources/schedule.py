"""Scheduled jobs that call resource actions once or on a cron expression."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

from pydantic import Field, model_validator

from arubacloud_provider.resources.base import (
    ApiModel,
    RegionalModel,
    RestResource,
    mapping,
    nested,
)


class JobStep(ApiModel):
    name: str | None = None
    resource_uri: str = Field(..., min_length=1)
    action_uri: str = Field(..., min_length=1)
    http_verb: str = Field(..., min_length=1)
    body: str | None = None


class ScheduleJobProperties(ApiModel):
    enabled: bool = True
    schedule_job_type: Literal["OneShot", "Recurring"]
    schedule_at: str | None = None
    execute_until: str | None = None
    cron: str | None = None
    steps: list[JobStep] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_timing(self) -> ScheduleJobProperties:
        if self.schedule_job_type == "OneShot" and not self.schedule_at:
            raise ValueError("schedule_at is required for OneShot jobs")
        if self.schedule_job_type == "Recurring" and not self.cron:
            raise ValueError("cron is required for Recurring jobs")
        return self


class ScheduleJobModel(RegionalModel):
    properties: ScheduleJobProperties


class ScheduleJobResource(RestResource[ScheduleJobModel]):
    type_name = "schedulejob"
    label = "Schedule job"
    model = ScheduleJobModel
    collection_path = "/projects/{project_id}/providers/Aruba.Schedule/jobs"
    wait_for_ready = False

    def build_properties(
        self, config: ScheduleJobModel, current: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        return config.properties.to_api()

    def flatten(
        self, data: Mapping[str, Any], prior: ScheduleJobModel | None
    ) -> dict[str, Any]:
        remote = mapping(data.get("properties"))
        if not remote.get("scheduleJobType"):
            return {}
        properties = nested(ScheduleJobProperties, remote)
        return {"properties": properties} if properties is not None else {}
