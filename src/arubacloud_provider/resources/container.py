"""Kubernetes-as-a-service clusters and container registries."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from arubacloud_provider.resources.base import (
    RegionalModel,
    RestResource,
    mapping,
    reference_field,
    reference_uri,
)

_CONTAINER = "/projects/{project_id}/providers/Aruba.Container"

BillingPeriod = Literal["Hour", "Month", "Year"]


class _Block(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class NodeCidr(_Block):
    address: str
    name: str


class KaasNetwork(_Block):
    vpc_uri_ref: str
    subnet_uri_ref: str
    security_group_name: str
    node_cidr: NodeCidr
    pod_cidr: str | None = None


class NodePool(_Block):
    name: str
    nodes: int = Field(..., ge=0)
    instance: str
    zone: str
    autoscaling: bool = False
    min_count: int | None = None
    max_count: int | None = None


class KaasSettings(_Block):
    kubernetes_version: str
    node_pools: list[NodePool] = Field(..., min_length=1)
    controlplane_ha: bool = False


class KaasModel(RegionalModel):
    uri: str | None = None
    network: KaasNetwork
    settings: KaasSettings
    billing_period: BillingPeriod = "Hour"


class KaasResource(RestResource[KaasModel]):
    type_name = "kaas"
    label = "KaaS"
    model = KaasModel
    collection_path = f"{_CONTAINER}/kaas"
    replace_on_change = frozenset({"network"})

    def build_properties(
        self, config: KaasModel, current: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        network = config.network
        project = config.project_id
        node_pools = []
        for pool in config.settings.node_pools:
            entry: dict[str, Any] = {
                "name": pool.name,
                "nodes": pool.nodes,
                "instance": pool.instance,
                "zone": pool.zone,
                "autoscaling": pool.autoscaling,
            }
            if pool.autoscaling:
                entry["minCount"] = pool.min_count
                entry["maxCount"] = pool.max_count
            node_pools.append(entry)

        properties: dict[str, Any] = {
            "vpc": {"uri": reference_uri(network.vpc_uri_ref, project, "Aruba.Network/vpcs")},
            "subnet": {
                "uri": reference_uri(network.subnet_uri_ref, project, "Aruba.Network/subnets")
            },
            "nodeCidr": {"address": network.node_cidr.address, "name": network.node_cidr.name},
            "securityGroup": {"name": network.security_group_name},
            "kubernetesVersion": {"value": config.settings.kubernetes_version},
            "nodePools": node_pools,
            "ha": config.settings.controlplane_ha,
            "billingPlan": {"billingPeriod": config.billing_period},
        }
        if network.pod_cidr:
            properties["podCidr"] = network.pod_cidr
        return properties

    def flatten(self, data: Mapping[str, Any], prior: KaasModel | None) -> dict[str, Any]:
        properties = mapping(data.get("properties"))
        if not properties:
            return {}
        version = mapping(properties.get("kubernetesVersion")).get("value")
        if prior is not None:
            if not version:
                return {}
            return {
                "settings": prior.settings.model_copy(update={"kubernetes_version": version})
            }

        node_cidr = mapping(properties.get("nodeCidr"))
        network = {
            "vpc_uri_ref": reference_field(None, "vpc_uri_ref", properties.get("vpc")),
            "subnet_uri_ref": reference_field(None, "subnet_uri_ref", properties.get("subnet")),
            "security_group_name": mapping(properties.get("securityGroup")).get("name", ""),
            "node_cidr": {
                "address": node_cidr.get("address", ""),
                "name": node_cidr.get("name", ""),
            },
            "pod_cidr": properties.get("podCidr"),
        }
        node_pools = [
            {
                "name": pool.get("name", ""),
                "nodes": pool.get("nodes", 0),
                "instance": pool.get("instance", ""),
                "zone": pool.get("zone", ""),
                "autoscaling": bool(pool.get("autoscaling", False)),
                "min_count": pool.get("minCount"),
                "max_count": pool.get("maxCount"),
            }
            for pool in (mapping(item) for item in properties.get("nodePools") or [])
        ]
        return {
            "network": network,
            "settings": {
                "kubernetes_version": version or "",
                "node_pools": node_pools,
                "controlplane_ha": bool(properties.get("ha", False)),
            },
        }


class RegistryNetwork(_Block):
    public_ip_uri_ref: str
    vpc_uri_ref: str
    subnet_uri_ref: str
    security_group_uri_ref: str


class RegistryStorage(_Block):
    block_storage_uri_ref: str


class RegistrySettings(_Block):
    concurrent_users_flavor: str | None = None
    admin_user: str | None = None


class ContainerRegistryModel(RegionalModel):
    uri: str | None = None
    network: RegistryNetwork
    storage: RegistryStorage
    settings: RegistrySettings | None = None
    billing_period: BillingPeriod = "Hour"


class ContainerRegistryResource(RestResource[ContainerRegistryModel]):
    type_name = "containerregistry"
    label = "ContainerRegistry"
    model = ContainerRegistryModel
    collection_path = f"{_CONTAINER}/registries"
    replace_on_change = frozenset({"network", "storage"})

    def build_properties(
        self, config: ContainerRegistryModel, current: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        network = config.network
        project = config.project_id
        properties: dict[str, Any] = {
            "publicIp": {
                "uri": reference_uri(
                    network.public_ip_uri_ref, project, "Aruba.Network/elasticIps"
                )
            },
            "vpc": {"uri": reference_uri(network.vpc_uri_ref, project, "Aruba.Network/vpcs")},
            "subnet": {
                "uri": reference_uri(network.subnet_uri_ref, project, "Aruba.Network/subnets")
            },
            "securityGroup": {
                "uri": reference_uri(
                    network.security_group_uri_ref, project, "Aruba.Network/securityGroups"
                )
            },
            "blockStorage": {
                "uri": reference_uri(
                    config.storage.block_storage_uri_ref, project, "Aruba.Storage/volumes"
                )
            },
            "billingPlan": {"billingPeriod": config.billing_period},
        }
        if config.settings is not None:
            if config.settings.admin_user:
                properties["adminUser"] = {"username": config.settings.admin_user}
            if config.settings.concurrent_users_flavor:
                properties["concurrentUsers"] = config.settings.concurrent_users_flavor
        return properties

    def flatten(
        self, data: Mapping[str, Any], prior: ContainerRegistryModel | None
    ) -> dict[str, Any]:
        properties = mapping(data.get("properties"))
        if not properties:
            return {}
        known = prior.network if prior is not None else None
        network = RegistryNetwork(
            public_ip_uri_ref=reference_field(
                known, "public_ip_uri_ref", properties.get("publicIp")
            ),
            vpc_uri_ref=reference_field(known, "vpc_uri_ref", properties.get("vpc")),
            subnet_uri_ref=reference_field(known, "subnet_uri_ref", properties.get("subnet")),
            security_group_uri_ref=reference_field(
                known, "security_group_uri_ref", properties.get("securityGroup")
            ),
        )
        storage = RegistryStorage(
            block_storage_uri_ref=reference_field(
                prior.storage if prior is not None else None,
                "block_storage_uri_ref",
                properties.get("blockStorage"),
            )
        )
        updates: dict[str, Any] = {"network": network, "storage": storage}
        if prior is None:
            admin_user = mapping(properties.get("adminUser")).get("username")
            if admin_user:
                updates["settings"] = RegistrySettings(admin_user=admin_user)
        return updates
