"""Pytest configuration and shared fixtures."""
import sys
from pathlib import Path

import httpx
import pytest

# Ensure the repository root is importable so 'answer_phone' resolves during tests
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from magic_gate.config import Settings

RECORDING_URL = "https://api.twilio.com/2010-04-01/Accounts/AC123/Recordings/RE456"
SPEECH_HOST = "speech.googleapis.com"
AUDIO = b"\x00\x01" * 400


def speech_result(transcript: str, confidence: float = 0.93) -> dict:
    return {"results": [{"alternatives": [{"transcript": transcript, "confidence": confidence}]}]}


class FakeUpstream:
    """
    Routes outbound requests to canned recording and speech responses.

    Every request is recorded in ``calls`` so tests can assert which
    endpoints were hit.
    """

    def __init__(self, speech_response=None, recording_response=None):
        self.speech_response = speech_response or httpx.Response(200, json=speech_result("hello gopher"))
        self.recording_response = recording_response or httpx.Response(200, content=AUDIO)
        self.calls = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        if request.url.host == SPEECH_HOST:
            if isinstance(self.speech_response, Exception):
                raise self.speech_response
            return self.speech_response
        if isinstance(self.recording_response, Exception):
            raise self.recording_response
        return self.recording_response

    def hosts(self):
        return [request.url.host for request in self.calls]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def settings():
    return Settings(speech_api_key="test-speech-key")


@pytest.fixture
def upstream():
    return FakeUpstream()
