import pytest

from formcoach.collaborators import OverlayState, SpeechEngine


class FakeSpeech(SpeechEngine):
    """Records every call in order."""

    def __init__(self):
        self.calls = []

    def speak(self, message, rate=1.0, pitch=1.0):
        self.calls.append(("speak", message))

    def stop(self):
        self.calls.append(("stop",))

    @property
    def spoken(self):
        return [c[1] for c in self.calls if c[0] == "speak"]

    @property
    def stop_count(self):
        return sum(1 for c in self.calls if c[0] == "stop")


@pytest.fixture
def speech():
    return FakeSpeech()


@pytest.fixture
def overlay():
    return OverlayState()
