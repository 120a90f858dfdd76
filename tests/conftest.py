import threading

import pytest

from attachments import Attachment, _encode
from images import make_png
from orchestrator import TurnOrchestrator


class FakeLLM:
    """Stands in for llm.LLM; records every request it is given."""

    def __init__(self, reply="What do you think the first step is?", error=None):
        self.reply = reply
        self.error = error
        self.requests = []
        self.gate = None

    def hold(self):
        """Block complete() until release() is called."""
        self.gate = threading.Event()

    def release(self):
        self.gate.set()

    def complete(self, request):
        self.requests.append(request)
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()


@pytest.fixture
def attachment(png_bytes) -> Attachment:
    return _encode(png_bytes, "image/png")


@pytest.fixture
def other_attachment() -> Attachment:
    return _encode(make_png(color=(0, 0, 255)), "image/png")


@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def tutor(fake_llm) -> TurnOrchestrator:
    return TurnOrchestrator(fake_llm)
