"""Registry of resource adapter classes keyed by type name."""

from __future__ import annotations

from arubacloud_provider.errors import UnknownResourceTypeError
from arubacloud_provider.resources.base import RestResource

ResourceFactory = type[RestResource]

_RESOURCE_FACTORIES: dict[str, ResourceFactory] = {}
_BUILTIN_FACTORIES_REGISTERED = False


def register_factory(factory: ResourceFactory, *, name: str | None = None) -> None:
    """Register an adapter class for a resource type.

    Args:
        factory: ``RestResource`` subclass implementing the lifecycle.
        name: Type name without the provider prefix; defaults to
            ``factory.type_name``.
    """
    _RESOURCE_FACTORIES[name or factory.type_name] = factory


def get_factory(type_name: str) -> ResourceFactory:
    """Return the adapter class for ``type_name`` (with or without prefix).

    Raises:
        UnknownResourceTypeError: If no adapter is registered under the name.
    """
    _ensure_builtin_factories()
    name = type_name.removeprefix("arubacloud_")
    try:
        return _RESOURCE_FACTORIES[name]
    except KeyError:
        raise UnknownResourceTypeError(type_name) from None


def registered_factories() -> list[ResourceFactory]:
    _ensure_builtin_factories()
    return list(_RESOURCE_FACTORIES.values())


def _ensure_builtin_factories() -> None:
    """Register built-in adapters once."""
    global _BUILTIN_FACTORIES_REGISTERED
    if _BUILTIN_FACTORIES_REGISTERED:
        return

    from arubacloud_provider.resources.compute import CloudServerResource, KeyPairResource
    from arubacloud_provider.resources.container import (
        ContainerRegistryResource,
        KaasResource,
    )
    from arubacloud_provider.resources.database import (
        DatabaseBackupResource,
        DatabaseGrantResource,
        DatabaseResource,
        DbaasResource,
        DbaasUserResource,
    )
    from arubacloud_provider.resources.network import (
        ElasticIpResource,
        SecurityGroupResource,
        SecurityRuleResource,
        SubnetResource,
        VpcPeeringResource,
        VpcPeeringRouteResource,
        VpcResource,
        VpnRouteResource,
        VpnTunnelResource,
    )
    from arubacloud_provider.resources.project import ProjectResource
    from arubacloud_provider.resources.schedule import ScheduleJobResource
    from arubacloud_provider.resources.security import KmsKeyResource, KmsResource
    from arubacloud_provider.resources.storage import (
        BackupResource,
        BlockStorageResource,
        RestoreResource,
        SnapshotResource,
    )

    builtin: list[ResourceFactory] = [
        ProjectResource,
        VpcResource,
        SubnetResource,
        SecurityGroupResource,
        SecurityRuleResource,
        ElasticIpResource,
        VpcPeeringResource,
        VpcPeeringRouteResource,
        VpnTunnelResource,
        VpnRouteResource,
        KeyPairResource,
        CloudServerResource,
        BlockStorageResource,
        SnapshotResource,
        BackupResource,
        RestoreResource,
        KaasResource,
        ContainerRegistryResource,
        DbaasResource,
        DatabaseResource,
        DbaasUserResource,
        DatabaseGrantResource,
        DatabaseBackupResource,
        KmsResource,
        KmsKeyResource,
        ScheduleJobResource,
    ]
    for factory in builtin:
        if factory.type_name not in _RESOURCE_FACTORIES:
            register_factory(factory)
    _BUILTIN_FACTORIES_REGISTERED = True
