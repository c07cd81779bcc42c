"""
Inbound message contract of the external pose source.

    {"type": "initialization", "ready": true}
    {"type": "keypoints", "data": [{"name": "left_knee", "x": 0.4, "y": 0.7, "score": 0.9}, ...]}
    {"type": "counter", "current_count": 3}
    {"type": "feedback", "message": "Keep your back straight"}

Anything that does not validate against one of these models is malformed
and is discarded by the session controller.
"""

import logging
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, TypeAdapter, ValidationError

logger = logging.getLogger(__name__)


class _InboundMessage(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class InitializationMessage(_InboundMessage):
    type: Literal["initialization"]
    ready: bool


class KeypointsMessage(_InboundMessage):
    type: Literal["keypoints"]
    # Entries are validated one by one by the frame adapter; a bad entry only
    # drops that landmark, not the whole frame.
    data: List[Any]


class CounterMessage(_InboundMessage):
    type: Literal["counter"]
    current_count: NonNegativeInt


class FeedbackMessage(_InboundMessage):
    type: Literal["feedback"]
    message: str


InboundMessage = Annotated[
    Union[InitializationMessage, KeypointsMessage, CounterMessage, FeedbackMessage],
    Field(discriminator="type"),
]

_message_adapter = TypeAdapter(InboundMessage)


def parse_message(raw: Any) -> Optional[BaseModel]:
    """
    Validate a raw inbound message (JSON text or an already decoded dict).

    Returns:
        The typed message, or None if the message is malformed.
    """
    try:
        if isinstance(raw, (str, bytes, bytearray)):
            return _message_adapter.validate_json(raw)
        return _message_adapter.validate_python(raw)
    except ValidationError as e:
        logger.debug("Discarding malformed message: %s", e.errors(include_url=False)[:1])
        return None
