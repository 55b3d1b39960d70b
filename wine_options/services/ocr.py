"""Label OCR via an external vision service.

Flow for a stored label photo:
1. Ask the storage backend for a short-lived signed URL
2. Download the image bytes
3. Send them to the vision text-detection REST API
4. Normalize the returned text (Unicode NFKC, whitespace collapse)

The engine never does OCR itself; this module only moves bytes and text.
"""

import base64
import re
import unicodedata
from typing import Any, Dict, Optional
import logging

import httpx

from ..config import get_settings

logger = logging.getLogger(__name__)


class OCRServiceError(Exception):
    """Storage download or vision text detection failed."""


def normalize_ocr_text(text: str) -> str:
    """
    Normalize OCR text output.
    - Unicode NFKC normalization
    - Collapse whitespace
    - Strip leading/trailing whitespace
    """
    if not text:
        return ""
    normalized = unicodedata.normalize("NFKC", text)
    normalized = re.sub(r"\s+", " ", normalized)
    return normalized.strip()


class LabelOCRService:
    """Reads the text off a stored label image."""

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = get_settings()
        self._client = http_client

    @property
    def is_ready(self) -> bool:
        """Vision credentials are configured."""
        return bool(self.settings.vision_api_key)

    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        if self._client is not None:
            response = await self._client.request(method, url, **kwargs)
        else:
            async with httpx.AsyncClient(timeout=self.settings.ocr_timeout_seconds) as client:
                response = await client.request(method, url, **kwargs)
        response.raise_for_status()
        return response

    def _storage_headers(self) -> Dict[str, str]:
        key = self.settings.catalog_key
        if not key:
            return {}
        return {"apikey": key, "Authorization": f"Bearer {key}"}

    async def create_signed_url(self, storage_path: str) -> str:
        """Signed download URL for a label in the labels bucket."""
        base = f"{self.settings.catalog_url.rstrip('/')}/storage/v1"
        path = storage_path.lstrip("/")
        try:
            response = await self._send(
                "POST",
                f"{base}/object/sign/{self.settings.labels_bucket}/{path}",
                json={"expiresIn": self.settings.signed_url_ttl_seconds},
                headers=self._storage_headers(),
            )
            signed = response.json().get("signedURL")
        except (httpx.HTTPError, ValueError, AttributeError) as e:
            raise OCRServiceError(f"Could not sign label URL for '{storage_path}': {e}") from e
        if not signed:
            raise OCRServiceError(f"Could not sign label URL for '{storage_path}'")
        return signed if signed.startswith("http") else f"{base}{signed}"

    async def download(self, url: str) -> bytes:
        try:
            response = await self._send("GET", url)
        except httpx.HTTPError as e:
            raise OCRServiceError(f"Label image download failed: {e}") from e
        if not response.content:
            raise OCRServiceError("Label image download returned no data")
        return response.content

    async def detect_text(self, image_bytes: bytes) -> str:
        """
        Run vision text detection on image bytes.

        Args:
            image_bytes: Encoded image (JPEG/PNG/WEBP)

        Returns:
            Normalized full text (may be "" when the label has no text)

        Raises:
            OCRServiceError: vision API not configured, unreachable or errored
        """
        if not self.is_ready:
            raise OCRServiceError("Vision OCR is not configured")

        payload = {
            "requests": [{
                "image": {"content": base64.b64encode(image_bytes).decode("ascii")},
                "features": [{"type": "TEXT_DETECTION"}],
            }]
        }
        try:
            response = await self._send(
                "POST",
                self.settings.vision_endpoint,
                params={"key": self.settings.vision_api_key},
                json=payload,
            )
            data: Dict[str, Any] = response.json()
        except httpx.HTTPError as e:
            raise OCRServiceError(f"Vision request failed: {e}") from e
        except ValueError as e:
            raise OCRServiceError("Vision returned invalid JSON") from e
        if not isinstance(data, dict):
            raise OCRServiceError("Vision returned an unexpected response")

        responses = data.get("responses") or [{}]
        first = responses[0] or {}
        if first.get("error"):
            message = first["error"].get("message", "unknown error")
            raise OCRServiceError(f"Vision text detection failed: {message}")

        text = (first.get("fullTextAnnotation") or {}).get("text", "")
        return normalize_ocr_text(text)

    async def read_label(self, storage_path: str) -> str:
        """Signed URL -> download -> text detection."""
        url = await self.create_signed_url(storage_path)
        image_bytes = await self.download(url)
        text = await self.detect_text(image_bytes)
        logger.info(f"OCR read {len(text)} chars from '{storage_path}'")
        return text
