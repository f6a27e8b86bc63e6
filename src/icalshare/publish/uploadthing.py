"""Managed upload backend using the UploadThing REST API."""

import base64
import binascii
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import requests

from icalshare.config.constants import (
    BACKEND_UPLOADTHING,
    ICS_MIME_TYPE,
    UPLOADTHING_API_URL,
    UPLOADTHING_API_VERSION,
    UPLOADTHING_FILE_URL_TEMPLATE,
    UPLOAD_TIMEOUT_SECONDS,
)
from icalshare.exceptions.errors import UploadError
from icalshare.publish.base import PublishResult
from icalshare.utils.masking import mask_key

logger = logging.getLogger(__name__)


def decode_token(token: str) -> Dict[str, Any]:
    """Unpack an UploadThing token.

    Current tokens are base64 encoded JSON holding ``apiKey`` and ``appId``;
    older deployments only have the raw ``sk_...`` secret.

    Args:
        token: Token or secret key from configuration.

    Returns:
        Dictionary with at least an ``apiKey`` entry.
    """
    token = token.strip()
    if token.startswith("sk_"):
        return {"apiKey": token}
    try:
        padded = token + "=" * (-len(token) % 4)
        payload = json.loads(base64.b64decode(padded).decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return {"apiKey": token}
    if not isinstance(payload, dict) or not payload.get("apiKey"):
        return {"apiKey": token}
    return payload


def _error_detail(response: requests.Response) -> str:
    """Best description of a failed response the API gives us."""
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}: {response.text.strip()[:500]}"
    if isinstance(body, dict):
        message = body.get("error") or body.get("message")
        if message:
            return f"HTTP {response.status_code}: {message}"
    return f"HTTP {response.status_code}: {body}"


class UploadThingPublisher:
    """Publishes files to UploadThing under a stable customId."""

    def __init__(
        self,
        token: str,
        app_id: Optional[str] = None,
        session: Optional[requests.Session] = None,
        api_url: str = UPLOADTHING_API_URL,
        timeout: float = UPLOAD_TIMEOUT_SECONDS,
    ):
        """Initialize the publisher.

        Args:
            token: UploadThing token or secret key.
            app_id: App identifier used in public URLs (taken from the token
                when omitted).
            session: HTTP session (tests pass a fake).
            api_url: Base URL of the REST API.
            timeout: Per-request timeout in seconds.
        """
        credentials = decode_token(token)
        self.api_key = credentials["apiKey"]
        self.app_id = app_id or credentials.get("appId")
        if not self.app_id:
            raise UploadError("UploadThing app id is unknown", "set UPLOADTHING_APP_ID")
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        logger.debug("UploadThing publisher for app %s (key %s)", self.app_id, mask_key(self.api_key))

    def public_url(self, identifier: str) -> str:
        """The stable URL a customId is served at."""
        return UPLOADTHING_FILE_URL_TEMPLATE.format(app_id=self.app_id, custom_id=identifier)

    def publish(self, path: Union[str, Path], identifier: str) -> PublishResult:
        """Replace the object tagged ``identifier`` with the file at ``path``.

        Args:
            path: Local .ics file.
            identifier: Stable customId.

        Returns:
            PublishResult with the public URL and file key.

        Raises:
            UploadError: If deleting the old copy or uploading fails.
        """
        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise UploadError(f"Could not read {path}", str(e)) from e

        self.delete(identifier)
        key = self.upload(data, path.name, identifier)
        url = self.public_url(identifier)
        logger.info("Published %s as %s", path.name, url)
        return PublishResult(url=url, key=key, backend=BACKEND_UPLOADTHING)

    def delete(self, identifier: str) -> bool:
        """Delete the object tagged ``identifier``.

        Returns:
            True if something was deleted, False if nothing existed.

        Raises:
            UploadError: For any failure other than "not found".
        """
        response = self._post("/v6/deleteFiles", {"customIds": [identifier]})
        if response.status_code == 404:
            logger.debug("No existing file for customId %s", identifier)
            return False
        if not response.ok:
            raise UploadError("Failed to delete previous upload", _error_detail(response))

        body = self._json(response)
        try:
            deleted = int(body.get("deletedCount") or 0) if isinstance(body, dict) else 0
        except (TypeError, ValueError) as e:
            raise UploadError("UploadThing returned an unexpected delete response", str(body)[:500]) from e
        if deleted:
            logger.info("Deleted %d previous upload(s) for %s", deleted, identifier)
        return deleted > 0

    def upload(self, data: bytes, file_name: str, identifier: str) -> str:
        """Upload ``data`` with public-read access and return the file key."""
        payload = {
            "files": [{
                "name": file_name,
                "size": len(data),
                "type": ICS_MIME_TYPE,
                "customId": identifier,
            }],
            "acl": "public-read",
            "contentDisposition": "inline",
            "metadata": None,
        }
        response = self._post("/v6/uploadFiles", payload)
        if not response.ok:
            raise UploadError("Upload request rejected", _error_detail(response))

        body = self._json(response)
        entries = body.get("data") if isinstance(body, dict) else None
        if not entries:
            raise UploadError("Upload failed", "response did not describe the new file")
        entry = entries[0]
        if entry.get("error"):
            raise UploadError("Upload failed", str(entry["error"]))

        self._send_file(entry, data, file_name)
        return entry.get("key") or identifier

    def _send_file(self, entry: Dict[str, Any], data: bytes, file_name: str) -> None:
        """POST the bytes to the presigned storage URL returned by the API."""
        url = entry.get("url")
        if not url:
            raise UploadError("Upload failed", "no presigned URL in response")
        try:
            response = self.session.post(
                url,
                data=entry.get("fields") or {},
                files={"file": (file_name, data, ICS_MIME_TYPE)},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise UploadError("Network error while uploading file", str(e)) from e
        if not response.ok:
            raise UploadError("Storage rejected the upload", _error_detail(response))

    def _post(self, endpoint: str, payload: Dict[str, Any]) -> requests.Response:
        headers = {
            "x-uploadthing-api-key": self.api_key,
            "x-uploadthing-version": UPLOADTHING_API_VERSION,
            "Content-Type": "application/json",
        }
        try:
            return self.session.post(
                f"{self.api_url}{endpoint}",
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise UploadError(f"Network error calling UploadThing {endpoint}", str(e)) from e

    @staticmethod
    def _json(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise UploadError("UploadThing returned invalid JSON", response.text[:500]) from e
