"""Managed database instances and the databases, users, grants and backups inside them."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

from pydantic import Field, SecretStr

from arubacloud_provider.resources.base import (
    ApiModel,
    RegionalModel,
    ResourceModel,
    RestResource,
    mapping,
    nested,
    reference_field,
    reference_uri,
)

_DATABASE = "/projects/{project_id}/providers/Aruba.Database"

BillingPeriod = Literal["Hour", "Month", "Year"]


class DbaasAutoscaling(ApiModel):
    enabled: bool
    available_space: int = Field(..., ge=0)
    step_size: int = Field(..., gt=0)


class DbaasStorage(ApiModel):
    size_gb: int = Field(..., gt=0)
    autoscaling: DbaasAutoscaling | None = None


class DbaasNetwork(ApiModel):
    vpc_uri_ref: str = Field(..., min_length=1)
    subnet_uri_ref: str = Field(..., min_length=1)
    security_group_uri_ref: str = Field(..., min_length=1)
    elastic_ip_uri_ref: str | None = None


class DbaasModel(RegionalModel):
    uri: str | None = None
    zone: str = Field(..., min_length=1)
    engine_id: str = Field(..., min_length=1, description='Engine, e.g. "mysql-8.0"')
    flavor: str = Field(..., min_length=1)
    storage: DbaasStorage
    network: DbaasNetwork
    billing_period: BillingPeriod | None = None


class DbaasResource(RestResource[DbaasModel]):
    type_name = "dbaas"
    label = "DBaaS"
    model = DbaasModel
    collection_path = f"{_DATABASE}/dbaas"
    replace_on_change = frozenset({"zone", "engine_id", "network"})

    def build_properties(
        self, config: DbaasModel, current: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        network = config.network
        project = config.project_id
        networking: dict[str, Any] = {
            "vpcUri": reference_uri(network.vpc_uri_ref, project, "Aruba.Network/vpcs"),
            "subnetUri": reference_uri(network.subnet_uri_ref, project, "Aruba.Network/subnets"),
            "securityGroupUri": reference_uri(
                network.security_group_uri_ref, project, "Aruba.Network/securityGroups"
            ),
        }
        if network.elastic_ip_uri_ref:
            networking["elasticIpUri"] = reference_uri(
                network.elastic_ip_uri_ref, project, "Aruba.Network/elasticIps"
            )

        properties: dict[str, Any] = {
            "zone": config.zone,
            "engine": {"id": config.engine_id},
            "flavor": {"name": config.flavor},
            "storage": config.storage.to_api(),
            "networking": networking,
        }
        if config.billing_period:
            properties["billingPlan"] = {"billingPeriod": config.billing_period}
        return properties

    def flatten(self, data: Mapping[str, Any], prior: DbaasModel | None) -> dict[str, Any]:
        properties = mapping(data.get("properties"))
        if not properties:
            return {}
        updates: dict[str, Any] = {}
        engine = mapping(properties.get("engine")).get("id")
        if engine:
            updates["engine_id"] = engine
        flavor = mapping(properties.get("flavor")).get("name")
        if flavor:
            updates["flavor"] = flavor
        if properties.get("zone"):
            updates["zone"] = properties["zone"]
        storage = nested(DbaasStorage, properties.get("storage"))
        if storage is not None:
            updates["storage"] = storage
        billing = mapping(properties.get("billingPlan")).get("billingPeriod")
        if billing:
            updates["billing_period"] = billing

        networking = mapping(properties.get("networking"))
        if networking:
            known = prior.network if prior is not None else None
            elastic_ip = networking.get("elasticIpUri")
            updates["network"] = DbaasNetwork(
                vpc_uri_ref=reference_field(known, "vpc_uri_ref", networking.get("vpcUri")),
                subnet_uri_ref=reference_field(
                    known, "subnet_uri_ref", networking.get("subnetUri")
                ),
                security_group_uri_ref=reference_field(
                    known, "security_group_uri_ref", networking.get("securityGroupUri")
                ),
                elastic_ip_uri_ref=(
                    reference_field(known, "elastic_ip_uri_ref", elastic_ip)
                    if elastic_ip
                    else None
                ),
            )
        return updates


class _DbaasChild(ResourceModel):
    project_id: str = Field(..., min_length=1)
    dbaas_id: str = Field(..., min_length=1)


class DatabaseModel(_DbaasChild):
    name: str = Field(..., min_length=1)


class DatabaseResource(RestResource[DatabaseModel]):
    """Logical database; the API addresses it by name."""

    type_name = "database"
    label = "Database"
    model = DatabaseModel
    collection_path = f"{_DATABASE}/dbaas/{{dbaas_id}}/databases"
    updatable = False

    def build_request(
        self, config: DatabaseModel, current: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        return {"name": config.name}

    def response_id(self, data: Mapping[str, Any]) -> str | None:
        name = data.get("name")
        return str(name) if name else None

    def flatten(self, data: Mapping[str, Any], prior: DatabaseModel | None) -> dict[str, Any]:
        name = data.get("name")
        return {"name": name} if name else {}

    @staticmethod
    def remote_state(data: Mapping[str, Any]) -> str:
        # Databases carry no status block; presence means usable.
        return str(mapping(data.get("status")).get("state") or "Active")


class DbaasUserModel(_DbaasChild):
    username: str = Field(..., min_length=1)
    password: SecretStr | None = Field(default=None, description="Write-only")


class DbaasUserResource(RestResource[DbaasUserModel]):
    type_name = "dbaasuser"
    label = "DBaaS user"
    model = DbaasUserModel
    collection_path = f"{_DATABASE}/dbaas/{{dbaas_id}}/users"
    updatable = False
    wait_for_ready = False

    def build_request(
        self, config: DbaasUserModel, current: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        body: dict[str, Any] = {"username": config.username}
        if config.password is not None:
            body["password"] = config.password.get_secret_value()
        return body

    def response_id(self, data: Mapping[str, Any]) -> str | None:
        username = data.get("username")
        return str(username) if username else None

    def flatten(self, data: Mapping[str, Any], prior: DbaasUserModel | None) -> dict[str, Any]:
        username = data.get("username")
        return {"username": username} if username else {}


class DatabaseGrantModel(_DbaasChild):
    database: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1, description="Username receiving the grant")
    role: str = Field(..., min_length=1, description='Role name, e.g. "liteadmin"')


class DatabaseGrantResource(RestResource[DatabaseGrantModel]):
    type_name = "databasegrant"
    label = "Database grant"
    model = DatabaseGrantModel
    collection_path = f"{_DATABASE}/dbaas/{{dbaas_id}}/databases/{{database}}/grants"
    updatable = False
    wait_for_ready = False

    def build_request(
        self, config: DatabaseGrantModel, current: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        return {"user": {"username": config.user_id}, "role": {"name": config.role}}

    def response_id(self, data: Mapping[str, Any]) -> str | None:
        username = mapping(data.get("user")).get("username")
        return str(username) if username else None

    def flatten(
        self, data: Mapping[str, Any], prior: DatabaseGrantModel | None
    ) -> dict[str, Any]:
        updates: dict[str, Any] = {}
        username = mapping(data.get("user")).get("username")
        if username:
            updates["user_id"] = username
        role = mapping(data.get("role")).get("name")
        if role:
            updates["role"] = role
        return updates


class DatabaseBackupModel(RegionalModel):
    uri: str | None = None
    zone: str = Field(..., min_length=1)
    dbaas_id: str = Field(..., min_length=1, description="DBaaS id or URI")
    database: str = Field(..., min_length=1, description="Database name or URI")
    billing_period: BillingPeriod = "Hour"


class DatabaseBackupResource(RestResource[DatabaseBackupModel]):
    type_name = "databasebackup"
    label = "Database backup"
    model = DatabaseBackupModel
    collection_path = f"{_DATABASE}/backups"
    updatable = False

    def build_properties(
        self, config: DatabaseBackupModel, current: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        dbaas_uri = reference_uri(config.dbaas_id, config.project_id, "Aruba.Database/dbaas")
        database_uri = config.database
        if not database_uri.startswith("/"):
            database_uri = f"{dbaas_uri}/databases/{config.database}"
        return {
            "zone": config.zone,
            "dbaaS": {"uri": dbaas_uri},
            "database": {"uri": database_uri},
            "billingPlan": {"billingPeriod": config.billing_period},
        }

    def flatten(
        self, data: Mapping[str, Any], prior: DatabaseBackupModel | None
    ) -> dict[str, Any]:
        properties = mapping(data.get("properties"))
        if not properties:
            return {}
        updates: dict[str, Any] = {}
        if properties.get("zone"):
            updates["zone"] = properties["zone"]
        billing = mapping(properties.get("billingPlan")).get("billingPeriod")
        if billing:
            updates["billing_period"] = billing
        dbaas = reference_field(prior, "dbaas_id", properties.get("dbaaS"))
        if dbaas:
            updates["dbaas_id"] = dbaas
        database = reference_field(prior, "database", properties.get("database"))
        if database:
            updates["database"] = database
        return updates
