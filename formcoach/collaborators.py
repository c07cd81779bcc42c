"""Interfaces for the side-effecting collaborators of the coaching engine.

The engine never talks to a speech synthesizer or a screen directly. It is
handed a SpeechEngine and an Overlay, which keeps it testable with fakes and
lets the WebSocket host forward both to the client device.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import deque
from typing import Any, Deque, Dict, List, Optional


class SpeechEngine(ABC):
    """Text-to-speech capability."""

    @abstractmethod
    def speak(self, message: str, rate: float = 1.0, pitch: float = 1.0) -> None:
        """Start speaking `message`. Must not block until the utterance ends."""

    @abstractmethod
    def stop(self) -> None:
        """Cancel any in-flight utterance."""


class Overlay(ABC):
    """On-screen feedback text consumed by the presentation layer."""

    @abstractmethod
    def render(self, message: Optional[str], feedback_class: Optional[str]) -> None:
        """Show `message` styled for `feedback_class`; (None, None) clears it."""


class OverlayState(Overlay):
    """Overlay that only remembers the latest (message, class) tuple."""

    def __init__(self):
        self.message: Optional[str] = None
        self.feedback_class: Optional[str] = None

    def render(self, message: Optional[str], feedback_class: Optional[str]) -> None:
        self.message = message
        self.feedback_class = feedback_class

    def as_tuple(self):
        return self.message, self.feedback_class


class EventOutbox:
    """
    Ordered buffer of outbound client events.

    The WebSocket host drains it after every inbound message, so speech and
    overlay updates reach the client in the order the engine produced them.
    """

    def __init__(self):
        self._events: Deque[Dict[str, Any]] = deque()

    def push(self, event: Dict[str, Any]) -> None:
        self._events.append(event)

    def drain(self) -> List[Dict[str, Any]]:
        events = list(self._events)
        self._events.clear()
        return events


class OutboxSpeech(SpeechEngine):
    """Forwards speech requests to the client, which owns the synthesizer."""

    def __init__(self, outbox: EventOutbox):
        self.outbox = outbox

    def speak(self, message: str, rate: float = 1.0, pitch: float = 1.0) -> None:
        self.outbox.push({"type": "speech", "message": message, "rate": rate, "pitch": pitch})

    def stop(self) -> None:
        self.outbox.push({"type": "speech_stop"})


class OutboxOverlay(Overlay):
    """Forwards overlay updates to the client."""

    def __init__(self, outbox: EventOutbox):
        self.outbox = outbox

    def render(self, message: Optional[str], feedback_class: Optional[str]) -> None:
        self.outbox.push({"type": "overlay", "message": message, "feedback_class": feedback_class})
