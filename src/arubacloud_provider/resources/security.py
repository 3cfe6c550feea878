"""Key management services and their keys."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

from pydantic import Field

from arubacloud_provider.resources.base import (
    RegionalModel,
    ResourceModel,
    RestResource,
    mapping,
)

_SECURITY = "/projects/{project_id}/providers/Aruba.Security"


class KmsModel(RegionalModel):
    billing_period: Literal["Hour", "Month", "Year"] = "Hour"


class KmsResource(RestResource[KmsModel]):
    type_name = "kms"
    label = "KMS"
    model = KmsModel
    collection_path = f"{_SECURITY}/kms"
    wait_for_ready = False

    def build_properties(
        self, config: KmsModel, current: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        return {"billingPlan": {"billingPeriod": config.billing_period}}

    def flatten(self, data: Mapping[str, Any], prior: KmsModel | None) -> dict[str, Any]:
        billing = mapping(mapping(data.get("properties")).get("billingPlan"))
        period = billing.get("billingPeriod")
        return {"billing_period": period} if period else {}


class KmsKeyModel(ResourceModel):
    uri: str | None = None
    project_id: str = Field(..., min_length=1)
    kms_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    algorithm: str = Field(..., min_length=1, description='e.g. "Aes", "Rsa"')
    size: int | None = None
    description: str | None = None
    status: str | None = None


class KmsKeyResource(RestResource[KmsKeyModel]):
    """Key held by a KMS; keys are immutable once created."""

    type_name = "kms_key"
    label = "Key"
    model = KmsKeyModel
    collection_path = f"{_SECURITY}/kms/{{kms_id}}/keys"
    updatable = False
    wait_for_ready = False

    def build_request(
        self, config: KmsKeyModel, current: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        return {"name": config.name, "algorithm": config.algorithm}

    def response_id(self, data: Mapping[str, Any]) -> str | None:
        key_id = data.get("keyId") or data.get("name")
        return str(key_id) if key_id else None

    def flatten(self, data: Mapping[str, Any], prior: KmsKeyModel | None) -> dict[str, Any]:
        updates: dict[str, Any] = {}
        for key, field_name in (
            ("name", "name"),
            ("algorithm", "algorithm"),
            ("size", "size"),
            ("description", "description"),
            ("status", "status"),
        ):
            if data.get(key) is not None:
                updates[field_name] = data[key]
        return updates

    @staticmethod
    def remote_state(data: Mapping[str, Any]) -> str:
        status = data.get("status")
        return str(status) if status else "Unknown"
