from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .schemas.operation import OperationSnapshot


class ErrorKind(str, Enum):
    """Classification of a Compute API failure, decided at the client boundary."""

    NOT_FOUND = "NotFound"
    CONFLICT = "Conflict"
    PROVIDER = "ProviderError"


class MachineStatusError(str, Enum):
    """Machine-readable reasons recorded on the machine status."""

    INVALID_CONFIGURATION = "InvalidConfiguration"
    CREATE_MACHINE = "CreateError"


class ActuatorError(Exception):
    """Base class for every error raised by the actuator."""


class MachineError(ActuatorError):
    """Structured domain error, surfaced as a status condition and an event."""

    def __init__(self, reason: MachineStatusError, message: str):
        super().__init__(message)
        self.reason = reason
        self.message = message


def invalid_machine_configuration(message: str) -> MachineError:
    return MachineError(MachineStatusError.INVALID_CONFIGURATION, message)


def create_machine_error(message: str) -> MachineError:
    return MachineError(MachineStatusError.CREATE_MACHINE, message)


class ProviderError(ActuatorError):
    """A Compute API call failed.

    ``kind`` is what callers branch on; ``code`` keeps the HTTP status for logs.
    """

    def __init__(
        self, message: str, kind: ErrorKind = ErrorKind.PROVIDER, code: int | None = None
    ):
        super().__init__(message)
        self.kind = kind
        self.code = code

    @property
    def not_found(self) -> bool:
        return self.kind is ErrorKind.NOT_FOUND


def is_not_found(err: BaseException) -> bool:
    return isinstance(err, ProviderError) and err.not_found


class OperationError(ActuatorError):
    def __init__(self, message: str, operation: OperationSnapshot | None = None):
        super().__init__(message)
        self.operation = operation


class OperationTimeout(OperationError):
    """The zone operation did not reach DONE before the deadline."""


class OperationFailed(OperationError):
    """The zone operation finished with one or more reported errors."""

    @classmethod
    def from_operation(cls, operation: OperationSnapshot) -> OperationFailed:
        messages = [str(e) for e in operation.errors]
        return cls(f"the following errors occurred: {'; '.join(messages)}", operation)

    @property
    def errors(self) -> list[str]:
        if self.operation is None:
            return []
        return [str(e) for e in self.operation.errors]


class ProjectionError(ActuatorError):
    """Instance data could not be projected onto the machine status."""


class UserDataError(ActuatorError):
    """Custom boot data could not be fetched from the secret store."""


class ScopeError(ActuatorError):
    """A machine scope could not be built or persisted."""
