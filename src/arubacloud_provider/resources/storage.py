"""Block storage volumes, snapshots, backups and restores."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

from pydantic import Field, model_validator

from arubacloud_provider.resources.base import (
    RegionalModel,
    RestResource,
    mapping,
    reference_of,
    reference_state,
    reference_uri,
)

_STORAGE = "/projects/{project_id}/providers/Aruba.Storage"

BillingPeriod = Literal["Hour", "Month", "Year"]


class BlockStorageModel(RegionalModel):
    uri: str | None = None
    size_gb: int = Field(..., gt=0)
    billing_period: BillingPeriod = "Hour"
    zone: str | None = None
    type: Literal["Standard", "Performance"] = "Standard"
    bootable: bool | None = None
    image: str | None = Field(default=None, description="Image for bootable volumes")

    @model_validator(mode="after")
    def _bootable_requires_image(self) -> BlockStorageModel:
        if self.bootable and not self.image:
            raise ValueError("image is required when bootable is set to true")
        return self


class BlockStorageResource(RestResource[BlockStorageModel]):
    type_name = "blockstorage"
    label = "BlockStorage"
    model = BlockStorageModel
    collection_path = f"{_STORAGE}/volumes"
    replace_on_change = frozenset({"type", "zone", "bootable", "image"})

    def build_properties(
        self, config: BlockStorageModel, current: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        properties: dict[str, Any] = {
            "sizeGb": config.size_gb,
            "billingPeriod": config.billing_period,
            "type": config.type,
        }
        if config.zone is not None:
            properties["zone"] = config.zone
        if config.bootable is not None:
            properties["bootable"] = config.bootable
        if config.image is not None:
            properties["image"] = config.image
        return properties

    def flatten(
        self, data: Mapping[str, Any], prior: BlockStorageModel | None
    ) -> dict[str, Any]:
        properties = mapping(data.get("properties"))
        updates: dict[str, Any] = {}
        for key, field_name in (
            ("sizeGb", "size_gb"),
            ("billingPeriod", "billing_period"),
            ("type", "type"),
            ("zone", "zone"),
            ("image", "image"),
        ):
            if properties.get(key):
                updates[field_name] = properties[key]
        if properties.get("bootable") is not None:
            updates["bootable"] = bool(properties["bootable"])
        return updates


class SnapshotModel(RegionalModel):
    uri: str | None = None
    billing_period: BillingPeriod = "Hour"
    volume_id: str = Field(..., min_length=1, description="Source volume id or URI")


class SnapshotResource(RestResource[SnapshotModel]):
    type_name = "snapshot"
    label = "Snapshot"
    model = SnapshotModel
    collection_path = f"{_STORAGE}/snapshots"
    replace_on_change = frozenset({"volume_id"})

    def build_properties(
        self, config: SnapshotModel, current: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        if current is not None:
            # The source volume cannot change; send back what the API holds.
            return {"volume": mapping(mapping(current.get("properties")).get("volume"))}
        return {
            "billingPeriod": config.billing_period,
            "volume": {
                "uri": reference_uri(config.volume_id, config.project_id, "Aruba.Storage/volumes")
            },
        }

    def flatten(self, data: Mapping[str, Any], prior: SnapshotModel | None) -> dict[str, Any]:
        properties = mapping(data.get("properties"))
        updates: dict[str, Any] = {}
        volume = reference_state(
            prior.volume_id if prior else None, reference_of(properties.get("volume"))
        )
        if volume:
            updates["volume_id"] = volume
        if properties.get("billingPeriod"):
            updates["billing_period"] = properties["billingPeriod"]
        return updates


class BackupModel(RegionalModel):
    type: Literal["Full", "Incremental"] = "Full"
    volume_id: str = Field(..., min_length=1)
    retention_days: int | None = Field(default=None, gt=0)
    billing_period: BillingPeriod = "Hour"


class BackupResource(RestResource[BackupModel]):
    type_name = "backup"
    label = "Backup"
    model = BackupModel
    collection_path = f"{_STORAGE}/backups"
    updatable = False

    def build_properties(
        self, config: BackupModel, current: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        properties: dict[str, Any] = {
            "type": config.type,
            "volume": {
                "uri": reference_uri(config.volume_id, config.project_id, "Aruba.Storage/volumes")
            },
            "billingPeriod": config.billing_period,
        }
        if config.retention_days is not None:
            properties["retentionDays"] = config.retention_days
        return properties

    def flatten(self, data: Mapping[str, Any], prior: BackupModel | None) -> dict[str, Any]:
        properties = mapping(data.get("properties"))
        updates: dict[str, Any] = {}
        volume = reference_state(
            prior.volume_id if prior else None, reference_of(properties.get("volume"))
        )
        if volume:
            updates["volume_id"] = volume
        for key, field_name in (
            ("type", "type"),
            ("retentionDays", "retention_days"),
            ("billingPeriod", "billing_period"),
        ):
            if properties.get(key):
                updates[field_name] = properties[key]
        return updates


class RestoreModel(RegionalModel):
    backup_id: str = Field(..., min_length=1)
    volume_id: str = Field(..., min_length=1, description="Target volume id or URI")


class RestoreResource(RestResource[RestoreModel]):
    type_name = "restore"
    label = "Restore"
    model = RestoreModel
    collection_path = f"{_STORAGE}/backups/{{backup_id}}/restores"
    updatable = False

    def build_properties(
        self, config: RestoreModel, current: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        return {
            "target": {
                "uri": reference_uri(config.volume_id, config.project_id, "Aruba.Storage/volumes")
            }
        }

    def flatten(self, data: Mapping[str, Any], prior: RestoreModel | None) -> dict[str, Any]:
        target = reference_of(mapping(data.get("properties")).get("target"))
        volume = reference_state(prior.volume_id if prior else None, target)
        return {"volume_id": volume} if volume else {}
