"""Networking resources: VPCs, subnets, security groups, elastic IPs, peerings and VPNs."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

from pydantic import Field

from arubacloud_provider.resources.base import (
    ApiModel,
    RegionalModel,
    RestResource,
    mapping,
    nested,
    reference_field,
    reference_of,
    reference_state,
    reference_uri,
)

_NETWORK = "/projects/{project_id}/providers/Aruba.Network"


class VpcModel(RegionalModel):
    """Virtual private cloud."""


class VpcResource(RestResource[VpcModel]):
    type_name = "vpc"
    label = "VPC"
    model = VpcModel
    collection_path = f"{_NETWORK}/vpcs"

    def build_properties(
        self, config: VpcModel, current: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        properties = mapping((current or {}).get("properties"))
        properties.setdefault("default", False)
        return properties


class SubnetDhcpRange(ApiModel):
    start: str
    count: int


class SubnetRoute(ApiModel):
    address: str
    gateway: str


class SubnetDhcp(ApiModel):
    enabled: bool = True
    range: SubnetDhcpRange | None = None
    routes: list[SubnetRoute] | None = None
    dns: list[str] | None = None


class SubnetNetwork(ApiModel):
    address: str


class SubnetModel(RegionalModel):
    vpc_id: str = Field(..., min_length=1)
    type: Literal["Basic", "Advanced"] = "Basic"
    network: SubnetNetwork | None = None
    dhcp: SubnetDhcp | None = None


class SubnetResource(RestResource[SubnetModel]):
    type_name = "subnet"
    label = "Subnet"
    model = SubnetModel
    collection_path = f"{_NETWORK}/vpcs/{{vpc_id}}/subnets"
    replace_on_change = frozenset({"type"})

    def build_properties(
        self, config: SubnetModel, current: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        properties: dict[str, Any] = {"type": config.type, "default": False}
        if config.network is not None:
            properties["network"] = config.network.to_api()
        if config.dhcp is not None:
            properties["dhcp"] = config.dhcp.to_api()
        return properties

    def flatten(self, data: Mapping[str, Any], prior: SubnetModel | None) -> dict[str, Any]:
        properties = mapping(data.get("properties"))
        updates: dict[str, Any] = {}
        if properties.get("type"):
            updates["type"] = properties["type"]
        network = nested(SubnetNetwork, properties.get("network"))
        if network is not None:
            updates["network"] = network
        dhcp = nested(SubnetDhcp, properties.get("dhcp"))
        if dhcp is not None and (prior is None or prior.dhcp is not None):
            updates["dhcp"] = dhcp
        return updates


class SecurityGroupModel(RegionalModel):
    vpc_id: str = Field(..., min_length=1)
    uri: str | None = None


class SecurityGroupResource(RestResource[SecurityGroupModel]):
    type_name = "securitygroup"
    label = "SecurityGroup"
    model = SecurityGroupModel
    collection_path = f"{_NETWORK}/vpcs/{{vpc_id}}/securityGroups"

    def build_properties(
        self, config: SecurityGroupModel, current: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        return {"default": False}


class RuleTarget(ApiModel):
    kind: Literal["Ip", "SecurityGroup"]
    value: str


class SecurityRuleProperties(ApiModel):
    direction: Literal["Ingress", "Egress"]
    protocol: str
    port: str | None = None
    target: RuleTarget


class SecurityRuleModel(RegionalModel):
    vpc_id: str = Field(..., min_length=1)
    security_group_id: str = Field(..., min_length=1)
    uri: str | None = None
    properties: SecurityRuleProperties


class SecurityRuleResource(RestResource[SecurityRuleModel]):
    type_name = "securityrule"
    label = "SecurityRule"
    model = SecurityRuleModel
    collection_path = f"{_NETWORK}/vpcs/{{vpc_id}}/securityGroups/{{security_group_id}}/rules"
    # Direction, protocol, port and target are fixed at creation.
    replace_on_change = frozenset({"properties"})

    def build_properties(
        self, config: SecurityRuleModel, current: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        return config.properties.to_api()

    def flatten(
        self, data: Mapping[str, Any], prior: SecurityRuleModel | None
    ) -> dict[str, Any]:
        properties = nested(SecurityRuleProperties, data.get("properties"))
        return {} if properties is None else {"properties": properties}


class ElasticIpModel(RegionalModel):
    billing_period: Literal["Hour", "Month", "Year"] = "Hour"
    address: str | None = Field(default=None, description="Assigned public address")


class ElasticIpResource(RestResource[ElasticIpModel]):
    type_name = "elasticip"
    label = "ElasticIP"
    model = ElasticIpModel
    collection_path = f"{_NETWORK}/elasticIps"

    def build_properties(
        self, config: ElasticIpModel, current: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        return {"billingPlan": {"billingPeriod": config.billing_period}}

    def flatten(self, data: Mapping[str, Any], prior: ElasticIpModel | None) -> dict[str, Any]:
        properties = mapping(data.get("properties"))
        updates: dict[str, Any] = {}
        if properties.get("address"):
            updates["address"] = properties["address"]
        billing_period = mapping(properties.get("billingPlan")).get("billingPeriod")
        if billing_period:
            updates["billing_period"] = billing_period
        return updates


class VpcPeeringModel(RegionalModel):
    vpc_id: str = Field(..., min_length=1)
    peer_vpc: str = Field(..., min_length=1, description="Peer VPC id or URI")
    uri: str | None = None


class VpcPeeringResource(RestResource[VpcPeeringModel]):
    type_name = "vpcpeering"
    label = "VPCPeering"
    model = VpcPeeringModel
    collection_path = f"{_NETWORK}/vpcs/{{vpc_id}}/vpcPeerings"
    replace_on_change = frozenset({"peer_vpc"})

    def build_properties(
        self, config: VpcPeeringModel, current: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        remote = mapping(mapping((current or {}).get("properties")).get("remoteVpc"))
        if remote:
            return {"remoteVpc": remote}
        return {
            "remoteVpc": {
                "uri": reference_uri(config.peer_vpc, config.project_id, "Aruba.Network/vpcs")
            }
        }

    def flatten(self, data: Mapping[str, Any], prior: VpcPeeringModel | None) -> dict[str, Any]:
        remote = reference_of(mapping(data.get("properties")).get("remoteVpc"))
        peer = reference_state(prior.peer_vpc if prior else None, remote)
        return {"peer_vpc": peer} if peer else {}


class VpcPeeringRouteModel(RegionalModel):
    vpc_id: str = Field(..., min_length=1)
    vpc_peering_id: str = Field(..., min_length=1)
    local_network_address: str
    remote_network_address: str
    billing_period: Literal["Hour", "Month", "Year"] = "Hour"
    uri: str | None = None


class VpcPeeringRouteResource(RestResource[VpcPeeringRouteModel]):
    type_name = "vpcpeeringroute"
    label = "VPCPeeringRoute"
    model = VpcPeeringRouteModel
    collection_path = (
        f"{_NETWORK}/vpcs/{{vpc_id}}/vpcPeerings/{{vpc_peering_id}}/vpcPeeringRoutes"
    )

    def build_properties(
        self, config: VpcPeeringRouteModel, current: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        return {
            "localNetworkAddress": config.local_network_address,
            "remoteNetworkAddress": config.remote_network_address,
            "billingPlan": {"billingPeriod": config.billing_period},
        }

    def flatten(
        self, data: Mapping[str, Any], prior: VpcPeeringRouteModel | None
    ) -> dict[str, Any]:
        properties = mapping(data.get("properties"))
        updates: dict[str, Any] = {}
        for key, field_name in (
            ("localNetworkAddress", "local_network_address"),
            ("remoteNetworkAddress", "remote_network_address"),
        ):
            if properties.get(key):
                updates[field_name] = properties[key]
        return updates


class IkeSettings(ApiModel):
    lifetime: int | None = None
    encryption: str | None = None
    hash: str | None = None
    dh_group: str | None = None
    dpd_action: str | None = None
    dpd_interval: int | None = None
    dpd_timeout: int | None = None


class EspSettings(ApiModel):
    lifetime: int | None = None
    encryption: str | None = None
    hash: str | None = None
    pfs: str | None = None


class PskSettings(ApiModel):
    cloud_site: str | None = None
    on_prem_site: str | None = None
    secret: str | None = None


class VpnClientSettings(ApiModel):
    ike: IkeSettings | None = None
    esp: EspSettings | None = None
    psk: PskSettings | None = None
    peer_client_public_ip: str | None = None


class VpnTunnelProperties(ApiModel):
    vpn_type: str = "Site-To-Site"
    vpn_client_protocol: str = "ikev2"
    vpc_id: str
    subnet_id: str
    public_ip_id: str
    vpn_client_settings: VpnClientSettings | None = None


class VpnTunnelModel(RegionalModel):
    properties: VpnTunnelProperties


class VpnTunnelResource(RestResource[VpnTunnelModel]):
    type_name = "vpntunnel"
    label = "VPNTunnel"
    model = VpnTunnelModel
    collection_path = f"{_NETWORK}/vpnTunnels"

    def build_properties(
        self, config: VpnTunnelModel, current: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        tunnel = config.properties
        vpc_uri = reference_uri(tunnel.vpc_id, config.project_id, "Aruba.Network/vpcs")
        properties: dict[str, Any] = {
            "vpnType": tunnel.vpn_type,
            "vpnClientProtocol": tunnel.vpn_client_protocol,
            "ipConfigurations": {
                "vpc": {"uri": vpc_uri},
                "subnet": {
                    "uri": reference_uri(
                        tunnel.subnet_id, config.project_id, "Aruba.Network/subnets"
                    )
                },
                "publicIp": {
                    "uri": reference_uri(
                        tunnel.public_ip_id, config.project_id, "Aruba.Network/elasticIps"
                    )
                },
            },
        }
        if tunnel.vpn_client_settings is not None:
            properties["vpnClientSettings"] = tunnel.vpn_client_settings.to_api()
        return properties

    def flatten(self, data: Mapping[str, Any], prior: VpnTunnelModel | None) -> dict[str, Any]:
        remote = mapping(data.get("properties"))
        if not remote:
            return {}
        ip_configurations = mapping(remote.get("ipConfigurations"))
        known = prior.properties if prior is not None else None
        settings = nested(VpnClientSettings, remote.get("vpnClientSettings"))
        if known is not None and known.vpn_client_settings is not None:
            # The API never returns the pre-shared key.
            settings = known.vpn_client_settings
        properties = VpnTunnelProperties(
            vpn_type=remote.get("vpnType") or (known.vpn_type if known else "Site-To-Site"),
            vpn_client_protocol=remote.get("vpnClientProtocol")
            or (known.vpn_client_protocol if known else "ikev2"),
            vpc_id=reference_field(known, "vpc_id", ip_configurations.get("vpc")),
            subnet_id=reference_field(known, "subnet_id", ip_configurations.get("subnet")),
            public_ip_id=reference_field(
                known, "public_ip_id", ip_configurations.get("publicIp")
            ),
            vpn_client_settings=settings,
        )
        return {"properties": properties}


class VpnRouteProperties(ApiModel):
    cloud_subnet: str
    on_prem_subnet: str


class VpnRouteModel(RegionalModel):
    vpn_tunnel_id: str = Field(..., min_length=1)
    properties: VpnRouteProperties


class VpnRouteResource(RestResource[VpnRouteModel]):
    type_name = "vpnroute"
    label = "VPNRoute"
    model = VpnRouteModel
    collection_path = f"{_NETWORK}/vpnTunnels/{{vpn_tunnel_id}}/vpnRoutes"

    def build_properties(
        self, config: VpnRouteModel, current: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        return config.properties.to_api()

    def flatten(self, data: Mapping[str, Any], prior: VpnRouteModel | None) -> dict[str, Any]:
        properties = nested(VpnRouteProperties, data.get("properties"))
        return {} if properties is None else {"properties": properties}
