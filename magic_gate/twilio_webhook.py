import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import PlainTextResponse

from magic_gate.errors import TranscriptionError
from magic_gate.speech_to_text import Transcriber
from magic_gate.voice_scripts import WELCOME_SCRIPT, script_for_transcript

logger = logging.getLogger(__name__)

router = APIRouter()

TWIML_MEDIA_TYPE = "text/xml"


def get_transcriber(request: Request) -> Transcriber:
    """Return the pipeline built during application startup."""
    return request.app.state.transcriber


async def recording_url_from(request: Request) -> str:
    """
    Read ``RecordingUrl`` from the form body, falling back to the query string.

    Args:
        request (Request): Incoming Twilio webhook request.

    Returns:
        str: The recording URL, or an empty string if none was sent.
    """
    form = await request.form()
    value = form.get("RecordingUrl")
    # file parts carry no URL
    if isinstance(value, str) and value:
        return value
    return request.query_params.get("RecordingUrl", "")


@router.api_route("/", methods=["GET", "POST"])
async def handle_recording(request: Request, transcriber: Transcriber = Depends(get_transcriber)):
    """
    Answer the Twilio recording callback.

    Without a recording the caller gets the welcome script. Otherwise the
    recording is transcribed and the gate opens only for the magic phrase.

    Args:
        request (Request): FastAPI request object containing Twilio form data.
        transcriber (Transcriber): Fetch-then-transcribe pipeline.

    Returns:
        Response: TwiML XML response, or a plain-text 500 if transcription failed.
    """
    recording_url = await recording_url_from(request)
    if not recording_url:
        return Response(content=WELCOME_SCRIPT, media_type=TWIML_MEDIA_TYPE)

    try:
        text = await transcriber.transcribe(recording_url)
    except TranscriptionError as e:
        logger.error(f"could not transcribe: {e}")
        return PlainTextResponse("could not transcribe", status_code=500)

    logger.info(f"transcription: {text}")
    return Response(content=script_for_transcript(text), media_type=TWIML_MEDIA_TYPE)


@router.get("/health")
def health():
    return {"ok": True}
