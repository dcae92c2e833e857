from ..core import USER_DATA_METADATA_KEY
from ..errors import invalid_machine_configuration
from ..schemas.machine import Machine


def validate_machine(machine: Machine) -> None:
    """
    Structural checks on the machine and its provider spec.
    Admission-time validation may already have run these; repeating them is harmless.
    Raises a MachineError (InvalidConfiguration) listing every violation.
    """
    spec = machine.provider_spec
    problems = []

    if not machine.name:
        problems.append("machine name is required")
    if not spec.zone:
        problems.append("providerSpec.zone is required")
    if not spec.machine_type:
        problems.append("providerSpec.machineType is required")

    boot_disks = [d for d in spec.disks if d.boot]
    if len(boot_disks) > 1:
        problems.append(f"at most one boot disk is allowed, got {len(boot_disks)}")
    for i, disk in enumerate(spec.disks):
        if disk.size_gb < 0:
            problems.append(f"disks[{i}].sizeGb must not be negative")

    for i, nic in enumerate(spec.network_interfaces):
        if nic.subnetwork and not spec.region:
            problems.append(
                f"networkInterfaces[{i}].subnetwork requires providerSpec.region"
            )

    for i, sa in enumerate(spec.service_accounts):
        if not sa.email:
            problems.append(f"serviceAccounts[{i}].email is required")

    seen: set[str] = set()
    for i, item in enumerate(spec.metadata):
        if not item.key:
            problems.append(f"metadata[{i}].key is required")
        elif item.key == USER_DATA_METADATA_KEY:
            problems.append(
                f"metadata[{i}].key {USER_DATA_METADATA_KEY!r} is reserved, "
                "use userDataSecret instead"
            )
        elif item.key in seen:
            problems.append(f"metadata[{i}].key {item.key!r} is duplicated")
        seen.add(item.key)

    if problems:
        raise invalid_machine_configuration(
            f"invalid machine {machine.ref}: {'; '.join(problems)}"
        )
