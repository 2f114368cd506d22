"""Type definitions for Home Assistant integration."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Error code the controller uses for ServiceValidationError
SERVICE_VALIDATION_ERROR = "service_validation_error"


class SessionState(str, Enum):
    """States of a single service invocation session."""

    CONNECTING = "connecting"
    AUTHENTICATING = "authenticating"
    AWAITING_RESULT = "awaiting_result"
    AWAITING_RETRY_RESULT = "awaiting_retry_result"
    SETTLED = "settled"


class InboundType(str, Enum):
    """WebSocket message types understood by the service invocation session."""

    AUTH_REQUIRED = "auth_required"
    AUTH_OK = "auth_ok"
    AUTH_INVALID = "auth_invalid"
    RESULT = "result"


@dataclass
class EntitySummary:
    """Reduced view of an entity state used in listings."""

    entity_id: str
    state: str
    last_changed: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EntitySummary:
        """Create EntitySummary from a /states entry."""
        return cls(
            entity_id=data["entity_id"],
            state=data.get("state", ""),
            last_changed=data.get("last_changed"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the listing record format."""
        return {
            "entity_id": self.entity_id,
            "state": self.state,
            "last_changed": self.last_changed,
        }


@dataclass
class AuthMessage:
    """Authentication message sent once the socket is open."""

    access_token: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": "auth", "access_token": self.access_token}


@dataclass
class CallServiceMessage:
    """A call_service command.

    The first attempt asks for the service response inline. Services that
    do not return data reject that with a validation error, so the retry
    is sent without ``return_response``.
    """

    id: int
    domain: str
    service: str
    entity_id: str | list[str]
    service_data: Any = field(default_factory=dict)
    return_response: bool = True

    def to_dict(self) -> dict[str, Any]:
        message: dict[str, Any] = {
            "id": self.id,
            "type": "call_service",
            "domain": self.domain,
            "service": self.service,
            "target": {"entity_id": self.entity_id},
            "service_data": self.service_data,
        }
        if self.return_response:
            message["return_response"] = True
        return message


@dataclass
class ResultMessage:
    """A result message received for a command."""

    id: int | None
    success: bool
    response: Any = None
    error_code: str | None = None
    error_message: str | None = None
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def has_response(self) -> bool:
        """Check if the controller returned response data."""
        return self.response is not None

    @property
    def is_validation_error(self) -> bool:
        """Check if the failure belongs to the validation error class."""
        return not self.success and self.error_code == SERVICE_VALIDATION_ERROR

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ResultMessage:
        """Create ResultMessage from a WebSocket message."""
        result = data.get("result")
        response = result.get("response") if isinstance(result, dict) else None
        error = data.get("error") or {}

        return cls(
            id=data.get("id"),
            success=bool(data.get("success")),
            response=response,
            error_code=error.get("code"),
            error_message=error.get("message"),
            raw=data,
        )


def to_json(value: Any) -> str:
    """Serialize a value the way results are handed back to the LLM."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
