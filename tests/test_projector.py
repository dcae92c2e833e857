import pytest
from conftest import make_instance
from google.cloud import compute_v1

from gcemachine.errors import ProjectionError, ProviderError
from gcemachine.machine.projector import project_instance, reconcile_with_cloud_state
from gcemachine.schemas.machine import NodeAddress, NodeAddressType


def test_project_instance_address_order():
    instance = make_instance(
        internal_ip="10.0.0.15", external_ips=("35.243.147.143", "35.243.147.144")
    )

    state = project_instance(instance)

    assert state.addresses == [
        NodeAddress(type=NodeAddressType.INTERNAL_IP, address="10.0.0.15"),
        NodeAddress(type=NodeAddressType.EXTERNAL_IP, address="35.243.147.143"),
        NodeAddress(type=NodeAddressType.EXTERNAL_IP, address="35.243.147.144"),
    ]
    assert state.instance_id == "testInstance"
    assert state.instance_state == "RUNNING"


def test_project_instance_without_access_configs():
    state = project_instance(make_instance(external_ips=()))

    assert [a.type for a in state.addresses] == [NodeAddressType.INTERNAL_IP]


def test_project_instance_requires_network_interface():
    instance = compute_v1.Instance(name="testInstance", status="RUNNING")

    with pytest.raises(ProjectionError):
        project_instance(instance)


def test_reconcile_with_cloud_state_writes_status(scope, compute):
    reconcile_with_cloud_state(scope)

    compute.instances_get.assert_called_once_with(
        "testProject", "us-east1-b", "testInstance"
    )
    status = scope.machine.status
    assert status.addresses[0].address == "10.0.0.15"
    assert status.addresses[0].type == NodeAddressType.INTERNAL_IP
    assert status.addresses[1].address == "35.243.147.143"
    assert status.addresses[1].type == NodeAddressType.EXTERNAL_IP
    assert status.provider_id == "gce://testProject/us-east1-b/testInstance"
    assert status.provider_status.instance_state == "RUNNING"
    assert status.provider_status.instance_id == "testInstance"


def test_failed_refresh_leaves_status_untouched(scope, compute):
    reconcile_with_cloud_state(scope)
    before = scope.machine.status.model_dump()

    # Instance lost its NICs: nothing may be overwritten
    compute.instances_get.return_value = compute_v1.Instance(
        name="testInstance", status="TERMINATED"
    )
    with pytest.raises(ProjectionError):
        reconcile_with_cloud_state(scope)
    assert scope.machine.status.model_dump() == before

    compute.instances_get.side_effect = ProviderError("backend error")
    with pytest.raises(ProviderError):
        reconcile_with_cloud_state(scope)
    assert scope.machine.status.model_dump() == before
