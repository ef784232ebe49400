"""
Execution primitives shared by components and triggers.

A component run ends by emitting one or more payloads on a named output
channel. The workflow engine reads those emissions back to decide which
successor edge to follow, so they are recorded as immutable Emission
values on the ExecutionState handed to the component.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class OutputChannel:
    """A named successor edge a component can emit on."""

    name: str
    label: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "label": self.label or self.name.title()}


DEFAULT_OUTPUT_CHANNEL = OutputChannel("default", "Default")
FAILED_OUTPUT_CHANNEL = OutputChannel("failed", "Failed")


@dataclass(frozen=True, kw_only=True, slots=True)
class Emission:
    """One emit call: channel, payload type and the payloads themselves."""

    channel: str
    payload_type: str
    payloads: tuple[Any, ...] = ()
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=_utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "channel": self.channel,
            "type": self.payload_type,
            "payloads": list(self.payloads),
            "created_at": self.created_at.isoformat(),
        }


class ExecutionState:
    """
    Collects the emissions of a single component execution.

    Example:
        state = ExecutionState()
        state.emit("default", "aws.ecs.task", [{"tasks": [], "failures": []}])
        assert state.channel == "default"
    """

    def __init__(self) -> None:
        self._emissions: list[Emission] = []

    def emit(self, channel: str, payload_type: str, payloads: list[Any]) -> Emission:
        if not channel:
            raise ValueError("output channel is required")
        if not payload_type:
            raise ValueError("payload type is required")

        emission = Emission(
            channel=channel,
            payload_type=payload_type,
            payloads=tuple(payloads),
        )
        self._emissions.append(emission)
        logger.info(f"[execution] Emitted {payload_type} on channel '{channel}'")
        return emission

    @property
    def emissions(self) -> list[Emission]:
        return list(self._emissions)

    @property
    def emitted(self) -> bool:
        return bool(self._emissions)

    @property
    def last(self) -> Emission | None:
        return self._emissions[-1] if self._emissions else None

    @property
    def channel(self) -> str | None:
        return self.last.channel if self.last else None

    @property
    def payload_type(self) -> str | None:
        return self.last.payload_type if self.last else None

    @property
    def payloads(self) -> list[Any]:
        return list(self.last.payloads) if self.last else []

    def __repr__(self) -> str:
        return f"<ExecutionState emissions={len(self._emissions)}>"


class EventSink:
    """Collects the events a trigger emits while handling a webhook."""

    def __init__(self) -> None:
        self._events: list[Emission] = []

    def emit(self, payload_type: str, payload: Any) -> Emission:
        event = Emission(
            channel=DEFAULT_OUTPUT_CHANNEL.name,
            payload_type=payload_type,
            payloads=(payload,),
        )
        self._events.append(event)
        logger.info(f"[trigger] Emitted event {payload_type}")
        return event

    @property
    def events(self) -> list[Emission]:
        return list(self._events)

    def __len__(self) -> int:
        return len(self._events)


@dataclass(frozen=True, slots=True)
class WebhookResult:
    """HTTP status (and optional error) returned to the webhook caller."""

    status_code: int
    error: str | None = None

    @classmethod
    def ok(cls) -> WebhookResult:
        return cls(status_code=200)

    @classmethod
    def fail(cls, status_code: int, error: str) -> WebhookResult:
        return cls(status_code=status_code, error=error)

    @property
    def is_error(self) -> bool:
        return self.error is not None
