"""
run_transcribe_cli.py

Standalone CLI runner for the transcription pipeline.
Fetches a recording URL and transcribes it without Twilio, then shows which
voice script the webhook would answer with. Useful for checking the speech
API key and recording format.

Exit codes: 0 on success, 1 on a transcription error, 2 on bad configuration.
"""

import asyncio
import logging
import sys
from typing import Optional

import httpx

from answer_phone import build_transcriber
from magic_gate.config import configure_logging, load_settings
from magic_gate.errors import ConfigError, TranscriptionError
from magic_gate.voice_scripts import script_for_transcript

logger = logging.getLogger(__name__)


async def run(recording_url: str, transport: Optional[httpx.AsyncBaseTransport] = None) -> int:
    """
    Transcribe one recording and print the outcome.

    Args:
        recording_url (str): URL of the recording to fetch.
        transport (httpx.AsyncBaseTransport, optional): Transport for outbound calls.

    Returns:
        int: Process exit code.
    """
    try:
        settings = load_settings()
    except ConfigError as e:
        print(f"[Config error] {e}")
        return 2
    configure_logging(settings.log_level)

    async with httpx.AsyncClient(transport=transport) as client:
        transcriber = build_transcriber(settings, client)
        try:
            text = await transcriber.transcribe(recording_url)
        except TranscriptionError as e:
            logger.error(f"could not transcribe: {e}")
            print(f"[Error] {e}")
            return 1

    print(f"Transcript: {text!r}")
    print(script_for_transcript(text))
    return 0


def main():
    if len(sys.argv) != 2:
        print("usage: run_transcribe_cli.py <recording-url>")
        sys.exit(2)
    sys.exit(asyncio.run(run(sys.argv[1])))


if __name__ == "__main__":
    main()
