"""
Speech-to-Text
==============

Client for the Google Cloud Speech REST API (``speech:syncrecognize``) and the
fetch-then-transcribe pipeline used by the webhook.

The recording is sent inline as base64 LINEAR16 audio sampled at 8 kHz, which
is what the telephony provider records. Only the first alternative of the
first result is used.

Usage::

    async with httpx.AsyncClient() as client:
        speech = SpeechClient(settings.speech_endpoint, client)
        text = await speech.transcribe(audio_bytes)
"""

import base64
import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List

import httpx

from magic_gate.audio_fetcher import AudioFetcher
from magic_gate.errors import (
    DecodeError,
    EncodeError,
    NoTranscriptError,
    RequestError,
    UpstreamError,
)

logger = logging.getLogger(__name__)

ENCODING = "LINEAR16"
SAMPLE_RATE = 8000

_KEY_PARAM = re.compile(r"(key=)[^&]+")


@dataclass(frozen=True)
class SpeechRequest:
    """Payload for a synchronous recognize call."""
    audio_content_base64: str
    encoding: str = ENCODING
    sample_rate: int = SAMPLE_RATE

    @classmethod
    def from_audio(cls, audio: bytes) -> "SpeechRequest":
        return cls(audio_content_base64=base64.b64encode(audio).decode("ascii"))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "config": {
                "encoding": self.encoding,
                "sampleRate": self.sample_rate,
            },
            "audio": {
                "content": self.audio_content_base64,
            },
        }


@dataclass(frozen=True)
class Alternative:
    transcript: str = ""
    confidence: float = 0.0


@dataclass(frozen=True)
class Result:
    alternatives: List[Alternative] = field(default_factory=list)


@dataclass(frozen=True)
class SpeechResponse:
    """
    Decoded recognize response.

    Google reports failures as ``{"error": {"code", "status", "message"}}``;
    absent or null fields decode to zero values, so ``error_code == 0`` means success.
    """
    error_code: int = 0
    error_status: str = ""
    error_message: str = ""
    results: List[Result] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "SpeechResponse":
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        error = data.get("error") or {}
        results = [
            Result(alternatives=[
                Alternative(
                    transcript=(alt or {}).get("transcript") or "",
                    confidence=float((alt or {}).get("confidence") or 0.0),
                )
                for alt in (result or {}).get("alternatives") or []
            ])
            for result in data.get("results") or []
        ]
        return cls(
            error_code=int(error.get("code") or 0),
            error_status=error.get("status") or "",
            error_message=error.get("message") or "",
            results=results,
        )

    def top_alternative(self) -> Alternative:
        """
        Returns:
            Alternative: First alternative of the first result.

        Raises:
            NoTranscriptError: If there are no results or no alternatives.
        """
        if not self.results or not self.results[0].alternatives:
            raise NoTranscriptError()
        return self.results[0].alternatives[0]


class SpeechClient:
    """
    Sends audio to the speech API.

    Attributes:
        endpoint (str): Recognize URL including the ``key`` query parameter.
        client (httpx.AsyncClient): Shared HTTP client.
        timeout (float): Seconds allowed for the request.
    """

    def __init__(self, endpoint: str, client: httpx.AsyncClient, timeout: float = 15.0):
        self.endpoint = endpoint
        self.client = client
        self.timeout = timeout

    async def recognize(self, audio: bytes) -> SpeechResponse:
        """
        Submit ``audio`` and decode the response without inspecting it.

        Raises:
            EncodeError: If the payload cannot be serialized.
            RequestError: If the HTTP call fails.
            DecodeError: If the response body is not a valid recognize response.
        """
        try:
            body = json.dumps(SpeechRequest.from_audio(audio).to_dict())
        except (TypeError, ValueError) as exc:
            raise EncodeError(f"could not encode speech request: {exc}") from exc

        logger.debug("Posting %d bytes of audio to %s", len(audio), _KEY_PARAM.sub(r"\1***", self.endpoint))
        try:
            response = await self.client.post(
                self.endpoint,
                content=body,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise RequestError(f"could not transcribe: {exc}") from exc

        # Error payloads come back with 4xx/5xx statuses, so decode regardless of status.
        try:
            return SpeechResponse.from_dict(response.json())
        except (ValueError, TypeError, AttributeError) as exc:
            raise DecodeError(f"could not decode speech response: {exc}") from exc

    async def transcribe(self, audio: bytes) -> str:
        """
        Transcribe ``audio`` and return the top transcript.

        Args:
            audio (bytes): Raw LINEAR16 audio at 8 kHz.

        Returns:
            str: Transcript of the first alternative of the first result.

        Raises:
            TranscriptionError: ``EncodeError``, ``RequestError``, ``DecodeError``,
                ``UpstreamError`` or ``NoTranscriptError``.
        """
        data = await self.recognize(audio)
        if data.error_code != 0:
            raise UpstreamError(data.error_code, data.error_status, data.error_message)
        best = data.top_alternative()
        logger.debug("Top alternative confidence: %.3f", best.confidence)
        return best.transcript


class Transcriber:
    """Fetches a recording and transcribes it, one step after the other."""

    def __init__(self, fetcher: AudioFetcher, speech: SpeechClient):
        self.fetcher = fetcher
        self.speech = speech

    async def transcribe(self, recording_url: str) -> str:
        audio = await self.fetcher.fetch(recording_url)
        return await self.speech.transcribe(audio)
