from typing import Any

from pydantic import BaseModel, Field

from ..core import OPERATION_DONE


class OperationErrorDetail(BaseModel):
    code: str = ""
    location: str = ""
    message: str = ""

    def __str__(self) -> str:
        parts = [p for p in (self.code, self.location, self.message) if p]
        return ": ".join(parts) or "unknown error"


class OperationSnapshot(BaseModel):
    name: str
    operation_type: str = Field(default="", description="e.g., insert, delete")
    status: str = Field(default="", description="PENDING, RUNNING or DONE")
    zone: str = ""
    target_link: str = ""
    errors: list[OperationErrorDetail] = Field(default_factory=list)

    @property
    def done(self) -> bool:
        return self.status == OPERATION_DONE

    @classmethod
    def from_compute(cls, op: Any) -> "OperationSnapshot":
        """Builds a snapshot from a compute_v1.Operation (or ExtendedOperation)."""
        # Status is a string field on compute_v1, but tolerate enum values too
        status = op.status
        status = getattr(status, "name", status)

        errors = []
        op_error = getattr(op, "error", None)
        if op_error and op_error.errors:
            for e in op_error.errors:
                errors.append(
                    OperationErrorDetail(
                        code=e.code or "",
                        location=e.location or "",
                        message=e.message or "",
                    )
                )

        return cls(
            name=op.name,
            operation_type=op.operation_type or "",
            status=str(status or ""),
            zone=(op.zone or "").split("/")[-1],
            target_link=op.target_link or "",
            errors=errors,
        )
