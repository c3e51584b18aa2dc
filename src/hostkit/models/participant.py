"""Participant model."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import BaseModel, Field, StringConstraints, field_validator

from hostkit.models.enums import ParticipantRole, ParticipantStatus

DisplayName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=64)]


class Participant(BaseModel):
    """A connection present in a room.

    ``session_id`` is stable for the lifetime of one connection and is the
    identity used across reconnects. ``connected_at`` is only used to order
    host succession.
    """

    session_id: str = Field(min_length=1)
    display_name: DisplayName
    role: ParticipantRole = ParticipantRole.GUEST
    connected_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    status: ParticipantStatus = ParticipantStatus.CONNECTED

    @field_validator("connected_at")
    @classmethod
    def _ensure_aware(cls, v: datetime) -> datetime:
        # Naive and aware datetimes cannot be compared during succession
        if v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v

    @property
    def is_host(self) -> bool:
        return self.role == ParticipantRole.HOST

    def to_presence_info(self) -> dict[str, Any]:
        """Serialize to the ``user_info`` shape stored on a presence member."""
        return {
            "sessionId": self.session_id,
            "displayName": self.display_name,
            "role": self.role.value,
            "connectedAt": self.connected_at.isoformat(),
            "status": self.status.value,
        }

    @classmethod
    def from_presence_info(
        cls, info: dict[str, Any], *, session_id: str | None = None
    ) -> Participant:
        """Build a Participant from a presence member's ``user_info``.

        ``session_id`` (the transport's ``user_id``) wins over the id carried
        in *info* when both are present.

        Raises:
            pydantic.ValidationError: If the info does not describe a valid
                participant.
        """
        data: dict[str, Any] = {
            "session_id": session_id or info.get("sessionId", ""),
            "display_name": info.get("displayName", ""),
        }
        if info.get("role"):
            data["role"] = info["role"]
        if info.get("connectedAt"):
            data["connected_at"] = info["connectedAt"]
        if info.get("status"):
            data["status"] = info["status"]
        return cls.model_validate(data)
