"""Projects: the top-level container every other resource lives in."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import Field

from arubacloud_provider.resources.base import ResourceModel, RestResource, mapping


class ProjectModel(ResourceModel):
    name: str = Field(..., min_length=1)
    description: str | None = None
    tags: list[str] | None = None


class ProjectResource(RestResource[ProjectModel]):
    type_name = "project"
    label = "Project"
    model = ProjectModel
    collection_path = "/projects"
    wait_for_ready = False

    def build_properties(
        self, config: ProjectModel, current: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        current_properties = mapping((current or {}).get("properties"))
        properties: dict[str, Any] = {"default": bool(current_properties.get("default", False))}
        description = config.description or current_properties.get("description")
        if description is not None:
            properties["description"] = description
        return properties

    def flatten(self, data: Mapping[str, Any], prior: ProjectModel | None) -> dict[str, Any]:
        properties = mapping(data.get("properties"))
        if "description" not in properties:
            return {}
        return {"description": properties["description"]}
