import pytest
from google.cloud import compute_v1

from gcemachine.machine.poller import OperationPoller
from gcemachine.machine.scope import MachineScope
from gcemachine.schemas.machine import (
    GCPDisk,
    GCPMachineProviderSpec,
    GCPNetworkInterface,
    Machine,
)
from gcemachine.schemas.operation import OperationSnapshot
from gcemachine.services.compute import ComputeService

ZONE = "us-east1-b"
PROJECT = "testProject"
INSTANCE = "testInstance"


def make_machine(**spec_overrides):
    spec = {
        "zone": ZONE,
        "region": "us-east1",
        "project_id": PROJECT,
        "machine_type": "n1-standard-1",
        "disks": [GCPDisk(boot=True, auto_delete=True, size_gb=64, type="pd-ssd")],
        "network_interfaces": [GCPNetworkInterface(network="default")],
    }
    spec.update(spec_overrides)
    return Machine(
        name=INSTANCE,
        namespace="openshift-machine-api",
        provider_spec=GCPMachineProviderSpec(**spec),
    )


def make_instance(
    internal_ip="10.0.0.15", external_ips=("35.243.147.143",), status="RUNNING"
):
    return compute_v1.Instance(
        name=INSTANCE,
        status=status,
        network_interfaces=[
            compute_v1.NetworkInterface(
                network_i_p=internal_ip,
                access_configs=[compute_v1.AccessConfig(nat_i_p=ip) for ip in external_ips],
            )
        ],
    )


def make_operation(status="DONE", name="operation-1", errors=()):
    return OperationSnapshot(
        name=name, operation_type="insert", status=status, zone=ZONE, errors=list(errors)
    )


@pytest.fixture
def machine():
    return make_machine()


@pytest.fixture
def compute(mocker):
    # Happy path: the zone exists, the instance is running, operations are done
    service = mocker.create_autospec(ComputeService, instance=True)
    service.zones_get.return_value = compute_v1.Zone(name=ZONE)
    service.instances_get.return_value = make_instance()
    service.instances_insert.return_value = make_operation(status="RUNNING")
    service.instances_delete.return_value = make_operation(status="RUNNING")
    service.zone_operations_get.return_value = make_operation()
    return service


@pytest.fixture
def machine_store(mocker):
    store = mocker.Mock()
    store.update_status.side_effect = lambda m: m.model_copy(
        update={"resource_version": "2"}
    )
    return store


@pytest.fixture
def secret_store(mocker):
    store = mocker.Mock()
    store.get_secret.return_value = {"userData": b"#cloud-config\n"}
    return store


@pytest.fixture
def recorder(mocker):
    return mocker.Mock()


@pytest.fixture
def sleep(mocker):
    return mocker.Mock()


@pytest.fixture
def poller(sleep):
    return OperationPoller(interval=5, timeout=180, sleep=sleep)


@pytest.fixture
def scope(machine, machine_store, secret_store, compute):
    return MachineScope(machine, machine_store, secret_store, compute=compute)
