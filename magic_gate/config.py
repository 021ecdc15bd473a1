"""
Configuration
=============

Environment-driven settings for the webhook service. A ``.env`` file in the
working directory is loaded first, then values are read with ``os.getenv``.

Variables:
    SPEECH_API_KEY          Google Speech API key (required).
    SPEECH_API_URL          Base URL of the recognize endpoint.
    SPEECH_TIMEOUT_SECONDS  Timeout for the speech request (default 15).
    FETCH_TIMEOUT_SECONDS   Timeout for the recording download (default 15).
    LOG_LEVEL               Root log level (default INFO).
    PORT                    Port used when running the app as a script.
"""

import logging
import os
import sys
from dataclasses import dataclass
from urllib.parse import urlencode

from dotenv import load_dotenv

from magic_gate.errors import ConfigError

DEFAULT_SPEECH_API_URL = "https://speech.googleapis.com/v1beta1/speech:syncrecognize"
DEFAULT_TIMEOUT_SECONDS = 15.0
LOG_FORMAT = '%(asctime)s [%(levelname)s] %(message)s'
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass(frozen=True)
class Settings:
    """
    Immutable runtime configuration.

    Attributes:
        speech_api_key (str): API key appended to the speech endpoint.
        speech_api_url (str): Base endpoint without query string.
        speech_timeout (float): Seconds allowed for the speech request.
        fetch_timeout (float): Seconds allowed for the recording download.
        log_level (str): Name of the root log level.
        port (int): Port for the development server.
    """
    speech_api_key: str
    speech_api_url: str = DEFAULT_SPEECH_API_URL
    speech_timeout: float = DEFAULT_TIMEOUT_SECONDS
    fetch_timeout: float = DEFAULT_TIMEOUT_SECONDS
    log_level: str = "INFO"
    port: int = 8000

    @property
    def speech_endpoint(self) -> str:
        """Full recognize URL with the API key as the ``key`` query parameter."""
        separator = '&' if '?' in self.speech_api_url else '?'
        return f"{self.speech_api_url}{separator}{urlencode({'key': self.speech_api_key})}"


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value


def load_settings() -> Settings:
    """
    Build ``Settings`` from the environment.

    Returns:
        Settings: The loaded configuration.

    Raises:
        ConfigError: If ``SPEECH_API_KEY`` is missing or any other value is malformed.
    """
    load_dotenv()
    api_key = os.getenv('SPEECH_API_KEY')
    if not api_key:
        raise ConfigError('Missing the speech API key. Please set SPEECH_API_KEY in the .env file.')

    port_raw = os.getenv('PORT', '8000')
    try:
        port = int(port_raw)
    except ValueError as exc:
        raise ConfigError(f"PORT must be an integer, got {port_raw!r}") from exc

    log_level = os.getenv('LOG_LEVEL') or 'INFO'
    if log_level.upper() not in LOG_LEVELS:
        raise ConfigError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}")

    return Settings(
        speech_api_key=api_key,
        speech_api_url=os.getenv('SPEECH_API_URL') or DEFAULT_SPEECH_API_URL,
        speech_timeout=_float_env('SPEECH_TIMEOUT_SECONDS', DEFAULT_TIMEOUT_SECONDS),
        fetch_timeout=_float_env('FETCH_TIMEOUT_SECONDS', DEFAULT_TIMEOUT_SECONDS),
        log_level=log_level.upper(),
        port=port,
    )


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging to stdout."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )
