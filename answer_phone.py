"""
answer_phone.py

FastAPI application answering Twilio recording callbacks for the magic gate.

The caller is asked for the passphrase; Twilio records it and calls back with
``RecordingUrl``. The recording is transcribed and the gate opens (DTMF 9)
only for "hello gopher".
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
import uvicorn
from fastapi import FastAPI

from magic_gate.audio_fetcher import AudioFetcher
from magic_gate.config import Settings, configure_logging, load_settings
from magic_gate.speech_to_text import SpeechClient, Transcriber
from magic_gate.twilio_webhook import router as twilio_router

logger = logging.getLogger(__name__)


def build_transcriber(settings: Settings, client: httpx.AsyncClient) -> Transcriber:
    """
    Wire the fetch-then-transcribe pipeline.

    Args:
        settings (Settings): Loaded configuration.
        client (httpx.AsyncClient): HTTP client shared by both outbound calls.

    Returns:
        Transcriber: Ready-to-use pipeline.
    """
    fetcher = AudioFetcher(client, timeout=settings.fetch_timeout)
    speech = SpeechClient(settings.speech_endpoint, client, timeout=settings.speech_timeout)
    return Transcriber(fetcher, speech)


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Settings are read from the environment at startup when not given, so
    importing this module never requires the API key to be set.

    Args:
        settings (Settings, optional): Configuration to use instead of the environment.
        transport (httpx.AsyncBaseTransport, optional): Transport for outbound calls;
            tests pass an ``httpx.MockTransport``.

    Returns:
        FastAPI: The application.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        active = settings or load_settings()
        configure_logging(active.log_level)
        async with httpx.AsyncClient(transport=transport) as client:
            app.state.settings = active
            app.state.transcriber = build_transcriber(active, client)
            logger.info("Magic gate ready, speech endpoint %s", active.speech_api_url)
            yield

    app = FastAPI(lifespan=lifespan)
    app.include_router(twilio_router)
    return app


app = create_app()

# --- Run the Application ---
if __name__ == "__main__":
    # Local development only. In production run under a managed ASGI server.
    uvicorn.run(app, host="0.0.0.0", port=load_settings().port)
