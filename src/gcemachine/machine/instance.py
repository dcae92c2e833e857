from __future__ import annotations

import base64
from typing import TYPE_CHECKING, Any

from google.cloud import compute_v1

from ..core import USER_DATA_METADATA_KEY, USER_DATA_SECRET_KEY
from ..errors import UserDataError
from ..schemas.machine import Machine

if TYPE_CHECKING:
    from .scope import SecretStore

# Ephemeral external IP, assigned by GCE on insert
DEFAULT_ACCESS_CONFIG_TYPE = "ONE_TO_ONE_NAT"
DEFAULT_ACCESS_CONFIG_NAME = "External NAT"


def get_custom_user_data(machine: Machine, secrets: SecretStore) -> str:
    """
    Returns the base64 encoded user data referenced by the provider spec,
    or an empty string if no secret is referenced.
    """
    ref = machine.provider_spec.user_data_secret
    if ref is None:
        return ""

    try:
        data = secrets.get_secret(machine.namespace, ref.name)
    except Exception as e:
        raise UserDataError(
            f"error getting user data secret {ref.name!r} "
            f"in namespace {machine.namespace!r}: {e}"
        ) from e

    if USER_DATA_SECRET_KEY not in data:
        raise UserDataError(
            f"secret {machine.namespace}/{ref.name} does not have "
            f"{USER_DATA_SECRET_KEY!r} field set. Thus, no user data applied "
            "when creating an instance"
        )
    return base64.b64encode(data[USER_DATA_SECRET_KEY]).decode("ascii")


def build_instance(machine: Machine, project_id: str, user_data: str) -> compute_v1.Instance:
    """Translates the machine's provider spec into an insertable instance."""
    spec = machine.provider_spec
    zone = spec.zone

    # 1. Disks
    disks = []
    for disk in spec.disks:
        params = compute_v1.AttachedDiskInitializeParams(
            disk_type=f"zones/{zone}/diskTypes/{disk.type}",
            labels=disk.labels,
        )
        # Unset size and image let GCE size the disk from the image
        if disk.size_gb:
            params.disk_size_gb = disk.size_gb
        if disk.image:
            params.source_image = disk.image
        disks.append(
            compute_v1.AttachedDisk(
                auto_delete=disk.auto_delete,
                boot=disk.boot,
                initialize_params=params,
            )
        )

    # 2. Networking
    network_interfaces = []
    for nic in spec.network_interfaces:
        nic_args: dict[str, Any] = {
            "access_configs": [
                compute_v1.AccessConfig(
                    name=DEFAULT_ACCESS_CONFIG_NAME, type_=DEFAULT_ACCESS_CONFIG_TYPE
                )
            ]
        }
        if nic.network:
            nic_args["network"] = f"projects/{project_id}/global/networks/{nic.network}"
        if nic.subnetwork:
            nic_args["subnetwork"] = (
                f"regions/{spec.region}/subnetworks/{nic.subnetwork}"
            )
        network_interfaces.append(compute_v1.NetworkInterface(**nic_args))

    # 3. Service accounts (verbatim)
    service_accounts = [
        compute_v1.ServiceAccount(email=sa.email, scopes=sa.scopes)
        for sa in spec.service_accounts
    ]

    # 4. Metadata: user-data is always present, even when empty
    items = [compute_v1.Items(key=USER_DATA_METADATA_KEY, value=user_data)]
    for item in spec.metadata:
        if item.value is None:
            items.append(compute_v1.Items(key=item.key))
        else:
            items.append(compute_v1.Items(key=item.key, value=item.value))

    return compute_v1.Instance(
        name=machine.name,
        machine_type=f"zones/{zone}/machineTypes/{spec.machine_type}",
        can_ip_forward=spec.can_ip_forward,
        deletion_protection=spec.deletion_protection,
        labels=spec.labels,
        tags=compute_v1.Tags(items=spec.tags),
        disks=disks,
        network_interfaces=network_interfaces,
        service_accounts=service_accounts,
        metadata=compute_v1.Metadata(items=items),
    )
