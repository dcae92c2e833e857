import pytest
from conftest import make_machine

from gcemachine.errors import MachineError, MachineStatusError
from gcemachine.machine.validation import validate_machine
from gcemachine.schemas.machine import (
    GCPDisk,
    GCPMetadata,
    GCPNetworkInterface,
    GCPServiceAccount,
)


def test_valid_machine_passes(machine):
    validate_machine(machine)
    # Repeated validation is harmless
    validate_machine(machine)


@pytest.mark.parametrize(
    "overrides,expected",
    [
        ({"zone": ""}, "zone is required"),
        ({"machine_type": ""}, "machineType is required"),
        (
            {"disks": [GCPDisk(boot=True), GCPDisk(boot=True)]},
            "at most one boot disk",
        ),
        ({"disks": [GCPDisk(size_gb=-1)]}, "disks[0].sizeGb must not be negative"),
        (
            {
                "region": "",
                "network_interfaces": [GCPNetworkInterface(subnetwork="workers")],
            },
            "subnetwork requires providerSpec.region",
        ),
        (
            {"service_accounts": [GCPServiceAccount(email="")]},
            "serviceAccounts[0].email is required",
        ),
        ({"metadata": [GCPMetadata(key="", value="x")]}, "metadata[0].key is required"),
        ({"metadata": [GCPMetadata(key="user-data", value="x")]}, "is reserved"),
        (
            {"metadata": [GCPMetadata(key="a"), GCPMetadata(key="a")]},
            "metadata[1].key 'a' is duplicated",
        ),
    ],
)
def test_invalid_specs(overrides, expected):
    machine = make_machine(**overrides)

    with pytest.raises(MachineError) as excinfo:
        validate_machine(machine)

    assert excinfo.value.reason is MachineStatusError.INVALID_CONFIGURATION
    assert expected in excinfo.value.message


def test_machine_name_required():
    machine = make_machine()
    machine.name = ""

    with pytest.raises(MachineError, match="machine name is required"):
        validate_machine(machine)


def test_all_violations_are_reported():
    machine = make_machine(zone="", machine_type="")

    with pytest.raises(MachineError) as excinfo:
        validate_machine(machine)

    assert "zone is required" in excinfo.value.message
    assert "machineType is required" in excinfo.value.message
    assert "openshift-machine-api/testInstance" in excinfo.value.message
