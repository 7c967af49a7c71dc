import json
import math
import uuid
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Dict, Mapping, Optional, Union

# Body key carrying the handler identifier on the wire
HANDLER_KEY = "className"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass
class Job:
    """
    A job to be pushed onto the delay queue.

    Args:
        topic: Queue name
        delay: Seconds (or timedelta) before the job becomes available
        body: JSON-serializable job data
        id: Job ID, generated when omitted
        ttr: Seconds the server waits for finish before re-delivering
    """

    topic: str
    delay: Union[int, timedelta] = 0
    body: Mapping[str, Any] = field(default_factory=dict)
    id: Optional[str] = None
    ttr: int = 60

    def __post_init__(self):
        if not isinstance(self.topic, str) or not self.topic:
            raise ValueError("topic must be a non-empty string")
        if isinstance(self.delay, timedelta):
            self.delay = math.ceil(self.delay.total_seconds())
        if not _is_number(self.delay) or self.delay < 0:
            raise ValueError(f"delay must be a number >= 0, got {self.delay!r}")
        if not _is_number(self.ttr) or self.ttr <= 0:
            raise ValueError(f"ttr must be a number > 0, got {self.ttr!r}")
        if not isinstance(self.body, Mapping):
            raise ValueError("body must be a mapping")
        if self.id is None:
            self.id = uuid.uuid4().hex

    def to_payload(self, handler: str) -> Dict[str, Any]:
        """
        Build the /push request body.

        The handler identifier is merged into a copy of the body, which is
        sent JSON-encoded as a string.
        """
        body = dict(self.body)
        body[HANDLER_KEY] = handler
        return {
            "topic": self.topic,
            "id": self.id,
            "delay": self.delay,
            "ttr": self.ttr,
            "body": json.dumps(body),
        }


@dataclass
class PoppedJob:
    """Job returned by the server from /pop."""

    id: str
    handler: str
    body: Dict[str, Any] = field(default_factory=dict)
