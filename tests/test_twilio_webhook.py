import logging
from contextlib import ExitStack

import httpx
import pytest
from fastapi.testclient import TestClient

from answer_phone import create_app
from conftest import RECORDING_URL, FakeUpstream, speech_result
from magic_gate.errors import NoTranscriptError
from magic_gate.twilio_webhook import get_transcriber
from magic_gate.voice_scripts import COME_IN_SCRIPT, GO_AWAY_SCRIPT, WELCOME_SCRIPT


@pytest.fixture
def make_client(settings):
    with ExitStack() as stack:
        def _make(upstream: FakeUpstream) -> TestClient:
            return stack.enter_context(TestClient(create_app(settings, transport=upstream.transport)))

        yield _make


def test_missing_recording_returns_welcome_without_outbound_calls(make_client, upstream):
    client = make_client(upstream)
    response = client.post("/", data={"CallSid": "CA123"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/xml")
    assert response.text == WELCOME_SCRIPT
    assert upstream.calls == []


def test_empty_recording_returns_welcome(make_client, upstream):
    client = make_client(upstream)
    response = client.post("/", data={"RecordingUrl": ""})
    assert response.status_code == 200
    assert response.text == WELCOME_SCRIPT
    assert upstream.calls == []


def test_get_without_recording_returns_welcome(make_client, upstream):
    response = make_client(upstream).get("/")
    assert response.status_code == 200
    assert response.text == WELCOME_SCRIPT


def test_magic_phrase_returns_come_in(make_client):
    upstream = FakeUpstream(speech_response=httpx.Response(200, json=speech_result("hello gopher")))
    response = make_client(upstream).post("/", data={"RecordingUrl": RECORDING_URL})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/xml")
    assert response.text == COME_IN_SCRIPT
    assert upstream.hosts() == ["api.twilio.com", "speech.googleapis.com"]


@pytest.mark.parametrize("transcript", ["goodbye", "", "HELLO GOPHER", "hello gopher please"])
def test_other_transcripts_return_go_away(make_client, transcript):
    upstream = FakeUpstream(speech_response=httpx.Response(200, json=speech_result(transcript)))
    response = make_client(upstream).post("/", data={"RecordingUrl": RECORDING_URL})
    assert response.status_code == 200
    assert response.text == GO_AWAY_SCRIPT


def test_recording_url_from_query_string(make_client, upstream):
    response = make_client(upstream).get("/", params={"RecordingUrl": RECORDING_URL})
    assert response.status_code == 200
    assert response.text == COME_IN_SCRIPT
    assert str(upstream.calls[0].url) == RECORDING_URL


def test_file_part_falls_back_to_query_string(make_client, upstream):
    response = make_client(upstream).post(
        "/",
        params={"RecordingUrl": RECORDING_URL},
        files={"RecordingUrl": ("rec.wav", b"RIFF", "audio/wav")},
    )
    assert response.status_code == 200
    assert response.text == COME_IN_SCRIPT
    assert str(upstream.calls[0].url) == RECORDING_URL


def test_file_part_without_query_returns_welcome(make_client, upstream):
    response = make_client(upstream).post("/", files={"RecordingUrl": ("rec.wav", b"RIFF", "audio/wav")})
    assert response.status_code == 200
    assert response.text == WELCOME_SCRIPT
    assert upstream.calls == []


def test_failed_fetch_returns_500_without_calling_speech(make_client, caplog):
    upstream = FakeUpstream(recording_response=httpx.Response(404))
    with caplog.at_level(logging.ERROR):
        response = make_client(upstream).post("/", data={"RecordingUrl": RECORDING_URL})
    assert response.status_code == 500
    assert response.text == "could not transcribe"
    assert upstream.hosts() == ["api.twilio.com"]
    assert "fetch with status 404" in caplog.text


def test_upstream_error_is_logged_not_returned(make_client, caplog):
    upstream = FakeUpstream(speech_response=httpx.Response(403, json={
        "error": {"code": 403, "status": "PERMISSION_DENIED", "message": "API key not valid"}
    }))
    with caplog.at_level(logging.ERROR):
        response = make_client(upstream).post("/", data={"RecordingUrl": RECORDING_URL})
    assert response.status_code == 500
    assert response.headers["content-type"].startswith("text/plain")
    assert response.text == "could not transcribe"
    assert "API key not valid" not in response.text
    assert "speech API error: 403 PERMISSION_DENIED API key not valid" in caplog.text


def test_zero_results_returns_500(make_client):
    upstream = FakeUpstream(speech_response=httpx.Response(200, json={"results": []}))
    response = make_client(upstream).post("/", data={"RecordingUrl": RECORDING_URL})
    assert response.status_code == 500
    assert response.text == "could not transcribe"


def test_transcriber_can_be_overridden(settings):
    class StubTranscriber:
        def __init__(self):
            self.urls = []

        async def transcribe(self, recording_url):
            self.urls.append(recording_url)
            raise NoTranscriptError()

    stub = StubTranscriber()
    app = create_app(settings, transport=FakeUpstream().transport)
    app.dependency_overrides[get_transcriber] = lambda: stub
    with TestClient(app) as client:
        response = client.post("/", data={"RecordingUrl": RECORDING_URL})
    assert response.status_code == 500
    assert stub.urls == [RECORDING_URL]


def test_health(make_client, upstream):
    response = make_client(upstream).get("/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True}
