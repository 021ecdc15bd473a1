"""Downloads call recordings from the telephony provider."""

import logging

import httpx

from magic_gate.errors import FetchError, ReadError

logger = logging.getLogger(__name__)


class AudioFetcher:
    """
    Fetches a recording into memory.

    Attributes:
        client (httpx.AsyncClient): Shared HTTP client; its transport can be swapped in tests.
        timeout (float): Seconds allowed for the download.
    """

    def __init__(self, client: httpx.AsyncClient, timeout: float = 15.0):
        self.client = client
        self.timeout = timeout

    async def fetch(self, url: str) -> bytes:
        """
        Download the recording at ``url``.

        Args:
            url (str): Recording URL received from the webhook.

        Returns:
            bytes: The raw audio.

        Raises:
            FetchError: On transport failure or a status other than 200.
            ReadError: If the body cannot be consumed.
        """
        logger.debug("Fetching recording %s", url)
        try:
            async with self.client.stream("GET", url, timeout=self.timeout, follow_redirects=True) as response:
                if response.status_code != httpx.codes.OK:
                    raise FetchError(f"fetch with status {response.status_code} {response.reason_phrase}")
                try:
                    body = await response.aread()
                except (httpx.HTTPError, httpx.StreamError) as exc:
                    raise ReadError(f"could not read response: {exc}") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise FetchError(f"could not fetch {url}: {exc}") from exc
        logger.debug("Fetched %d bytes from %s", len(body), url)
        return body
