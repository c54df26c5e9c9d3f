"""Handover domain models: one entry in a task's transfer ledger."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class HandoverStatus(StrEnum):
    """Review state of a handover, as set by the receiver."""

    PENDING = "PENDING"  # Waiting for receiver action
    ACCEPTED = "ACCEPTED"
    QUESTIONING = "QUESTIONING"  # Receiver replied with a question
    REJECTED = "REJECTED"


class HandoverRecord(BaseModel):
    """A single transfer attempt of a task from one user to another.

    Records have no id of their own. Across the sender's and receiver's copies of
    a task they are matched by (from_user, to_user, remark, timestamp).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    from_user: str = Field(..., description="Username of the sender")
    to_user: str = Field(..., description="Username of the receiver")
    remark: str = Field(default="", description="Message written by the sender")
    timestamp: int = Field(..., description="Creation time (epoch ms)")
    status: HandoverStatus = Field(default=HandoverStatus.PENDING, description="Receiver's resolution")
    response: str | None = Field(default=None, description="Receiver's reply message")
    response_timestamp: int | None = Field(default=None, description="When the receiver replied (epoch ms)")
    receiver_archived: bool = Field(default=False, description="Hidden from the receiver's inbox history")
    sender_archived: bool = Field(default=False, description="Hidden from the sender's active outbox")

    def same_identity(self, other: "HandoverRecord") -> bool:
        """Return True if both records describe the same transfer attempt."""
        return (
            self.from_user == other.from_user
            and self.to_user == other.to_user
            and self.remark == other.remark
            and self.timestamp == other.timestamp
        )
