"""TwiML documents returned to the telephony provider."""

from twilio.twiml.voice_response import VoiceResponse

MAGIC_PHRASE = "hello gopher"


def _welcome() -> str:
    response = VoiceResponse()
    response.say("Hello Gopher, I took this demo down. Sorry!")
    return str(response)


def _come_in() -> str:
    response = VoiceResponse()
    response.say("Welcome home!")
    # DTMF 9 opens the gate
    response.play(digits="9")
    return str(response)


def _go_away() -> str:
    response = VoiceResponse()
    response.say("Go away, you evil person")
    return str(response)


WELCOME_SCRIPT = _welcome()
COME_IN_SCRIPT = _come_in()
GO_AWAY_SCRIPT = _go_away()


def script_for_transcript(transcript: str) -> str:
    """
    Choose the response for a transcript.

    The comparison is exact and case-sensitive.

    Args:
        transcript (str): Text returned by the speech API.

    Returns:
        str: ``COME_IN_SCRIPT`` for the magic phrase, ``GO_AWAY_SCRIPT`` otherwise.
    """
    if transcript == MAGIC_PHRASE:
        return COME_IN_SCRIPT
    return GO_AWAY_SCRIPT
