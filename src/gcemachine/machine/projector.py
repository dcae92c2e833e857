from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

from ..errors import ProjectionError
from ..logger import logger
from ..schemas.machine import NodeAddress, NodeAddressType

if TYPE_CHECKING:
    from .scope import MachineScope


class InstanceState(BaseModel):
    addresses: list[NodeAddress] = Field(default_factory=list)
    instance_id: str
    instance_state: str


def project_instance(instance: Any) -> InstanceState:
    """
    Extracts the status-relevant fields from a compute_v1.Instance.
    Only the first network interface is considered: its internal IP,
    then one external IP per access config, in provider order.
    """
    if not instance.network_interfaces:
        raise ProjectionError(
            f"could not find network interfaces for instance {instance.name!r}"
        )
    nic = instance.network_interfaces[0]

    addresses = [NodeAddress(type=NodeAddressType.INTERNAL_IP, address=nic.network_i_p)]
    for config in nic.access_configs:
        addresses.append(
            NodeAddress(type=NodeAddressType.EXTERNAL_IP, address=config.nat_i_p)
        )

    return InstanceState(
        addresses=addresses,
        instance_id=instance.name,
        instance_state=str(instance.status),
    )


def reconcile_with_cloud_state(scope: MachineScope) -> None:
    """Refreshes the scope's machine status from the live instance."""
    logger.info(f"Reconciling machine object {scope.name!r} with cloud state")
    instance = scope.compute.instances_get(scope.project_id, scope.zone, scope.name)

    # Everything is computed before the first assignment so a failure
    # never leaves the status half updated.
    state = project_instance(instance)

    status = scope.machine.status
    status.addresses = state.addresses
    status.provider_status.instance_state = state.instance_state
    status.provider_status.instance_id = state.instance_id
    status.provider_id = scope.provider_id
