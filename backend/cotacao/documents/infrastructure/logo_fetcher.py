import asyncio
import io
import logging
from abc import ABC, abstractmethod
from typing import Optional
from urllib.parse import urljoin, urlparse

import httpx
from reportlab.lib.utils import ImageReader

from cotacao.documents.config import DocumentSettings
from cotacao.documents.domain.exceptions import AssetFetchError
from cotacao.documents.domain.renderer import LogoImage

logger = logging.getLogger(__name__)

REDIRECT_STATUSES = (301, 302)

class AbstractLogoFetcher(ABC):
    """Interface de récupération du logo: URL -> octets de l'image."""

    @abstractmethod
    async def fetch(self, url: str) -> LogoImage:
        """Télécharge le logo.

        Raises:
            AssetFetchError: Si le logo est injoignable ou n'est pas une image.
        """
        raise NotImplementedError

class HttpxLogoFetcher(AbstractLogoFetcher):
    """Récupère le logo via httpx en suivant au plus une redirection 301/302.

    Le délai LOGO_FETCH_TIMEOUT borne le téléchargement complet (redirections
    et corps compris); le corps est lu par morceaux et refusé au-delà de
    LOGO_MAX_BYTES.
    """

    def __init__(
        self,
        settings: DocumentSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = settings.LOGO_FETCH_TIMEOUT
        self.max_redirects = settings.LOGO_MAX_REDIRECTS
        self.max_bytes = settings.LOGO_MAX_BYTES
        self.transport = transport

    async def fetch(self, url: str) -> LogoImage:
        if urlparse(url).scheme not in ("http", "https"):
            raise AssetFetchError(url, "schéma d'URL non supporté")

        logger.debug(f"[LogoFetch] Téléchargement du logo: {url}")
        try:
            logo = await asyncio.wait_for(self._download(url), timeout=self.timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException):
            raise AssetFetchError(url, f"délai de {self.timeout}s dépassé")
        except httpx.HTTPError as e:
            raise AssetFetchError(url, f"erreur réseau ({e.__class__.__name__}: {e})")

        if not logo.content:
            raise AssetFetchError(url, "réponse vide")
        self._check_image(url, logo.content)

        logger.info(f"[LogoFetch] Logo récupéré ({len(logo.content)} bytes) depuis {logo.url}.")
        return logo

    async def _download(self, url: str) -> LogoImage:
        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=False,
            transport=self.transport,
        ) as client:
            current = url
            hops = 0
            while True:
                async with client.stream("GET", current) as response:
                    if response.status_code in REDIRECT_STATUSES:
                        location = response.headers.get("location")
                        if not location:
                            raise AssetFetchError(url, f"redirection {response.status_code} sans en-tête Location")
                        if hops >= self.max_redirects:
                            raise AssetFetchError(url, "trop de redirections")
                        current = urljoin(current, location)
                        hops += 1
                        logger.debug(f"[LogoFetch] Redirection {response.status_code} vers {current}")
                        continue
                    if response.status_code != 200:
                        raise AssetFetchError(url, f"statut HTTP {response.status_code}")
                    content = await self._read_body(url, response)
                    return LogoImage(
                        url=str(response.url),
                        content=content,
                        content_type=response.headers.get("content-type"),
                    )

    async def _read_body(self, url: str, response: httpx.Response) -> bytes:
        declared = response.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > self.max_bytes:
            raise AssetFetchError(url, f"logo trop volumineux ({declared} octets, maximum {self.max_bytes})")
        body = bytearray()
        async for chunk in response.aiter_bytes():
            body.extend(chunk)
            if len(body) > self.max_bytes:
                raise AssetFetchError(url, f"logo trop volumineux (plus de {self.max_bytes} octets)")
        return bytes(body)

    @staticmethod
    def _check_image(url: str, content: bytes) -> None:
        try:
            ImageReader(io.BytesIO(content)).getSize()
        except Exception as e:
            raise AssetFetchError(url, f"image illisible ({e})")
