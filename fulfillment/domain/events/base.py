"""
Base Domain Event.

Events are plain dataclasses recorded by aggregates and services. The unit of
work stamps them with its execution id and hands them to the event bus after
the producing transaction has committed.
"""
from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any, ClassVar, Dict, Optional
import uuid


@dataclass
class DomainEvent:
    """
    Base class for all domain events.

    Subclasses declare ``aggregate_type`` and add their payload fields; every
    field that is not part of the envelope ends up under ``data`` in
    ``to_dict()``.
    """

    aggregate_type: ClassVar[str] = "Fulfillment"
    envelope: ClassVar[tuple] = ("event_id", "aggregate_id", "execution_id", "occurred_at")

    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    aggregate_id: str = ""
    execution_id: Optional[str] = None
    occurred_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def event_type(self) -> str:
        return type(self).__name__

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize the event for logs and external consumers.

        Returns:
            Envelope fields plus the event payload under ``data``
        """
        payload = {}
        for f in fields(self):
            if f.name in self.envelope:
                continue
            value = getattr(self, f.name)
            payload[f.name] = value.isoformat() if isinstance(value, datetime) else value

        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "aggregate_type": self.aggregate_type,
            "aggregate_id": self.aggregate_id,
            "execution_id": self.execution_id,
            "occurred_at": self.occurred_at.isoformat(),
            "data": payload,
        }
