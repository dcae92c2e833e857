from enum import Enum

from pydantic import BaseModel, Field


class SecretReference(BaseModel):
    name: str


class GCPDisk(BaseModel):
    auto_delete: bool = False
    boot: bool = False
    size_gb: int = 0
    type: str = Field(default="", description="e.g., pd-standard, pd-ssd")
    image: str = Field(default="", description="Source image URI or family path")
    labels: dict[str, str] = Field(default_factory=dict)


class GCPNetworkInterface(BaseModel):
    network: str = ""
    subnetwork: str = ""


class GCPServiceAccount(BaseModel):
    email: str
    scopes: list[str] = Field(default_factory=list)


class GCPMetadata(BaseModel):
    key: str
    value: str | None = None


class GCPMachineProviderSpec(BaseModel):
    zone: str = ""
    region: str = ""
    project_id: str = Field(
        default="", description="Falls back to the credentials' project when empty"
    )
    machine_type: str = Field(default="", description="e.g., n1-standard-1")
    labels: dict[str, str] = Field(default_factory=dict)
    tags: list[str] = Field(default_factory=list)
    can_ip_forward: bool = False
    deletion_protection: bool = False
    disks: list[GCPDisk] = Field(default_factory=list)
    network_interfaces: list[GCPNetworkInterface] = Field(default_factory=list)
    service_accounts: list[GCPServiceAccount] = Field(default_factory=list)
    metadata: list[GCPMetadata] = Field(default_factory=list)
    user_data_secret: SecretReference | None = None
    credentials_secret: SecretReference | None = None


class GCPMachineProviderStatus(BaseModel):
    instance_id: str | None = None
    instance_state: str | None = Field(
        default=None, description="e.g., RUNNING, TERMINATED"
    )


class NodeAddressType(str, Enum):
    INTERNAL_IP = "InternalIP"
    EXTERNAL_IP = "ExternalIP"


class NodeAddress(BaseModel):
    type: NodeAddressType
    address: str


class MachineStatus(BaseModel):
    addresses: list[NodeAddress] = Field(default_factory=list)
    provider_id: str | None = Field(
        default=None, description="gce://<project>/<zone>/<instance-name>"
    )
    provider_status: GCPMachineProviderStatus = Field(
        default_factory=GCPMachineProviderStatus
    )
    error_reason: str | None = None
    error_message: str | None = None


class Machine(BaseModel):
    name: str
    namespace: str = "default"
    resource_version: str = ""
    provider_spec: GCPMachineProviderSpec = Field(
        default_factory=GCPMachineProviderSpec
    )
    status: MachineStatus = Field(default_factory=MachineStatus)

    @property
    def ref(self) -> str:
        return f"{self.namespace}/{self.name}"
