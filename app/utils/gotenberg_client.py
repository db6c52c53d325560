"""
Gotenberg client for presentation-to-PDF conversion.

Provides:
- Multipart upload of a presentation to the LibreOffice route
- Liveness check used once at startup
"""

from pathlib import Path
from typing import Optional, Union

import httpx
from loguru import logger

from app.models.schemas import ConversionFailure
from app.utils.helpers import media_type_for

CONVERT_ROUTE = "/forms/libreoffice/convert"
HEALTH_ROUTE = "/health"
REMEDIATION_HINT = "Make sure the Gotenberg container is running: docker compose up -d"


class GotenbergClient:
    """Client for the external Gotenberg conversion service."""

    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        convert_timeout: float = 120.0,
        health_timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize Gotenberg client.

        Args:
            base_url: Service root, without trailing slash
            convert_timeout: Seconds allowed for one conversion
            health_timeout: Seconds allowed for the liveness check
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.convert_timeout = convert_timeout
        self.health_timeout = health_timeout
        self._transport = transport

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout, transport=self._transport)

    async def health_check(self) -> bool:
        """
        Check the service liveness endpoint.

        Returns:
            True if the service answered 200, False otherwise
        """
        try:
            async with self._client(self.health_timeout) as client:
                response = await client.get(f"{self.base_url}{HEALTH_ROUTE}")
        except httpx.HTTPError as e:
            logger.error(f"Cannot reach Gotenberg at {self.base_url}: {e}")
            logger.error(REMEDIATION_HINT)
            return False

        if response.status_code != 200:
            logger.error(
                f"Gotenberg at {self.base_url} is not ready: "
                f"HTTP {response.status_code} {response.reason_phrase}"
            )
            logger.error(REMEDIATION_HINT)
            return False

        logger.success(f"Gotenberg available: {self.base_url}")
        return True

    async def convert(self, source: Path) -> Union[bytes, ConversionFailure]:
        """
        Convert a presentation to PDF.

        The source is streamed as the multipart field ``files``. No size
        limit is applied to either the upload or the response.

        Args:
            source: Presentation file to upload

        Returns:
            PDF bytes on HTTP 200, otherwise a ConversionFailure
        """
        url = f"{self.base_url}{CONVERT_ROUTE}"

        try:
            with source.open("rb") as fh:
                files = {"files": (source.name, fh, media_type_for(source))}
                async with self._client(self.convert_timeout) as client:
                    response = await client.post(url, files=files)
        except httpx.TimeoutException:
            return ConversionFailure(
                message=f"timed out after {self.convert_timeout:g}s"
            )
        except httpx.HTTPError as e:
            return ConversionFailure(message=str(e) or e.__class__.__name__)
        except OSError as e:
            return ConversionFailure(message=f"cannot read {source.name}: {e}")

        if response.status_code != 200:
            return ConversionFailure(
                status_code=response.status_code,
                message=response.reason_phrase or "conversion failed",
            )

        return response.content
