"""Compute resources: SSH key pairs and cloud servers."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import Field

from arubacloud_provider.resources.base import (
    RegionalModel,
    RestResource,
    mapping,
    reference_of,
    reference_state,
    reference_uri,
)

_COMPUTE = "/projects/{project_id}/providers/Aruba.Compute"


class KeyPairModel(RegionalModel):
    value: str = Field(..., min_length=1, description="Public key material")


class KeyPairResource(RestResource[KeyPairModel]):
    type_name = "keypair"
    label = "KeyPair"
    model = KeyPairModel
    collection_path = f"{_COMPUTE}/keyPairs"
    updatable = False
    wait_for_ready = False

    def build_properties(
        self, config: KeyPairModel, current: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        return {"value": config.value}

    def flatten(self, data: Mapping[str, Any], prior: KeyPairModel | None) -> dict[str, Any]:
        value = mapping(data.get("properties")).get("value")
        return {"value": value} if value else {}


class CloudServerModel(RegionalModel):
    uri: str | None = None
    zone: str = Field(..., min_length=1)
    vpc_id: str = Field(..., min_length=1)
    flavor_name: str = Field(..., min_length=1)
    boot_volume: str = Field(..., min_length=1, description="Template id or URI")
    elastic_ip_id: str | None = None
    key_pair_id: str | None = None
    subnets: list[str] = Field(default_factory=list)
    securitygroups: list[str] = Field(default_factory=list)


class CloudServerResource(RestResource[CloudServerModel]):
    type_name = "cloudserver"
    label = "CloudServer"
    model = CloudServerModel
    collection_path = f"{_COMPUTE}/cloudServers"
    replace_on_change = frozenset({"zone", "vpc_id", "boot_volume"})

    def build_properties(
        self, config: CloudServerModel, current: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        project = config.project_id
        properties: dict[str, Any] = {
            "flavorName": config.flavor_name,
            "zone": config.zone,
            "bootVolume": {
                "uri": reference_uri(config.boot_volume, project, "Aruba.Compute/templates")
            },
            "vpc": {"uri": reference_uri(config.vpc_id, project, "Aruba.Network/vpcs")},
            "subnets": [
                {"uri": reference_uri(subnet, project, "Aruba.Network/subnets")}
                for subnet in config.subnets
            ],
            "securityGroups": [
                {"uri": reference_uri(group, project, "Aruba.Network/securityGroups")}
                for group in config.securitygroups
            ],
        }
        if config.key_pair_id:
            properties["keyPair"] = {
                "uri": reference_uri(config.key_pair_id, project, "Aruba.Compute/keyPairs")
            }
        if config.elastic_ip_id:
            properties["elasticIp"] = {
                "uri": reference_uri(config.elastic_ip_id, project, "Aruba.Network/elasticIps")
            }
        return properties

    def flatten(self, data: Mapping[str, Any], prior: CloudServerModel | None) -> dict[str, Any]:
        properties = mapping(data.get("properties"))
        updates: dict[str, Any] = {}
        flavor = mapping(properties.get("flavor")).get("name") or properties.get("flavorName")
        if flavor:
            updates["flavor_name"] = flavor
        if properties.get("zone"):
            updates["zone"] = properties["zone"]

        for field_name, key in (
            ("vpc_id", "vpc"),
            ("boot_volume", "bootVolume"),
            ("key_pair_id", "keyPair"),
            ("elastic_ip_id", "elasticIp"),
        ):
            remote = reference_of(properties.get(key))
            if remote:
                configured = getattr(prior, field_name) if prior is not None else None
                updates[field_name] = reference_state(configured, remote)

        for field_name, key in (("subnets", "subnets"), ("securitygroups", "securityGroups")):
            remote_list = properties.get(key)
            if isinstance(remote_list, list):
                configured_list = getattr(prior, field_name) if prior is not None else []
                updates[field_name] = _reference_list(configured_list, remote_list)
        return updates


def _reference_list(configured: list[str], remote: list[Any]) -> list[str]:
    uris = [uri for uri in (reference_of(item) for item in remote) if uri]
    if len(configured) == len(uris):
        pairs = zip(configured, uris, strict=True)
        return [reference_state(value, uri) or value for value, uri in pairs]
    return [reference_state(None, uri) or uri for uri in uris]
