"""Resource adapters for every ArubaCloud resource type."""

from arubacloud_provider.resources.base import (
    PROVIDER_PREFIX,
    ApiModel,
    DataSource,
    RegionalModel,
    ResourceAdapter,
    ResourceModel,
    RestResource,
    reference_state,
    reference_uri,
)
from arubacloud_provider.resources.compute import (
    CloudServerModel,
    CloudServerResource,
    KeyPairModel,
    KeyPairResource,
)
from arubacloud_provider.resources.container import (
    ContainerRegistryModel,
    ContainerRegistryResource,
    KaasModel,
    KaasResource,
)
from arubacloud_provider.resources.database import (
    DatabaseBackupModel,
    DatabaseBackupResource,
    DatabaseGrantModel,
    DatabaseGrantResource,
    DatabaseModel,
    DatabaseResource,
    DbaasModel,
    DbaasResource,
    DbaasUserModel,
    DbaasUserResource,
)
from arubacloud_provider.resources.network import (
    ElasticIpModel,
    ElasticIpResource,
    SecurityGroupModel,
    SecurityGroupResource,
    SecurityRuleModel,
    SecurityRuleResource,
    SubnetModel,
    SubnetResource,
    VpcModel,
    VpcPeeringModel,
    VpcPeeringResource,
    VpcPeeringRouteModel,
    VpcPeeringRouteResource,
    VpcResource,
    VpnRouteModel,
    VpnRouteResource,
    VpnTunnelModel,
    VpnTunnelResource,
)
from arubacloud_provider.resources.project import ProjectModel, ProjectResource
from arubacloud_provider.resources.registry import (
    get_factory,
    register_factory,
    registered_factories,
)
from arubacloud_provider.resources.schedule import ScheduleJobModel, ScheduleJobResource
from arubacloud_provider.resources.security import (
    KmsKeyModel,
    KmsKeyResource,
    KmsModel,
    KmsResource,
)
from arubacloud_provider.resources.storage import (
    BackupModel,
    BackupResource,
    BlockStorageModel,
    BlockStorageResource,
    RestoreModel,
    RestoreResource,
    SnapshotModel,
    SnapshotResource,
)

__all__ = [
    "PROVIDER_PREFIX",
    "ApiModel",
    "BackupModel",
    "BackupResource",
    "BlockStorageModel",
    "BlockStorageResource",
    "CloudServerModel",
    "CloudServerResource",
    "ContainerRegistryModel",
    "ContainerRegistryResource",
    "DataSource",
    "DatabaseBackupModel",
    "DatabaseBackupResource",
    "DatabaseGrantModel",
    "DatabaseGrantResource",
    "DatabaseModel",
    "DatabaseResource",
    "DbaasModel",
    "DbaasResource",
    "DbaasUserModel",
    "DbaasUserResource",
    "ElasticIpModel",
    "ElasticIpResource",
    "KaasModel",
    "KaasResource",
    "KeyPairModel",
    "KeyPairResource",
    "KmsKeyModel",
    "KmsKeyResource",
    "KmsModel",
    "KmsResource",
    "ProjectModel",
    "ProjectResource",
    "RegionalModel",
    "ResourceAdapter",
    "ResourceModel",
    "RestResource",
    "RestoreModel",
    "RestoreResource",
    "ScheduleJobModel",
    "ScheduleJobResource",
    "SecurityGroupModel",
    "SecurityGroupResource",
    "SecurityRuleModel",
    "SecurityRuleResource",
    "SnapshotModel",
    "SnapshotResource",
    "SubnetModel",
    "SubnetResource",
    "VpcModel",
    "VpcPeeringModel",
    "VpcPeeringResource",
    "VpcPeeringRouteModel",
    "VpcPeeringRouteResource",
    "VpcResource",
    "VpnRouteModel",
    "VpnRouteResource",
    "VpnTunnelModel",
    "VpnTunnelResource",
    "get_factory",
    "reference_state",
    "reference_uri",
    "register_factory",
    "registered_factories",
]
