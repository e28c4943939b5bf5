"""HTTP client for the file storage service."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Optional

import requests


class FileServiceError(Exception):
    """Raised when the file service cannot complete a request."""


@dataclass
class UploadResponse:
    file_id: str = ""
    hash: str = ""
    size: int = 0


def _parse_upload(payload: Any) -> UploadResponse:
    if not isinstance(payload, dict):
        raise ValueError("response must be a JSON object")
    data = payload.get("data")
    if data is None:
        return UploadResponse()
    if not isinstance(data, dict):
        raise ValueError("'data' must be a JSON object")
    file_id = data.get("file_id") or ""
    file_hash = data.get("hash") or ""
    size = data.get("file_size") or 0
    if not isinstance(file_id, str) or not isinstance(file_hash, str):
        raise ValueError("file_id and hash must be strings")
    if isinstance(size, bool) or not isinstance(size, int):
        raise ValueError("file_size must be an integer")
    return UploadResponse(file_id=file_id, hash=file_hash, size=size)


class FileClient:
    """Uploads, downloads and deletes files; uploads are retried."""

    def __init__(
        self,
        base_url: str,
        upload_endpoint: str,
        timeout: float,
        retry_count: int,
        retry_delay: float,
        logger: logging.Logger,
    ) -> None:
        self._base_url = base_url
        self._upload_endpoint = upload_endpoint
        self._timeout = timeout if timeout and timeout > 0 else None
        self._retry_count = retry_count
        self._retry_delay = retry_delay
        self._logger = logger
        self._session = requests.Session()

    def upload_file(self, file_content: bytes, file_name: str) -> UploadResponse:
        """Send the file as multipart form data under the field ``file``."""
        url = self._base_url + self._upload_endpoint
        files = {"file": (file_name, bytes(file_content), "application/octet-stream")}
        attempts = self._retry_count + 1
        response: Optional[requests.Response] = None
        last_error: Optional[Exception] = None

        for attempt in range(attempts):
            if attempt:
                self._logger.warning(
                    "Retrying file upload", extra={"fields": {"attempt": attempt}}
                )
                time.sleep(self._retry_delay * attempt)
            try:
                response = self._session.post(url, files=files, timeout=self._timeout)
            except requests.RequestException as exc:
                response = None
                last_error = exc
                continue
            if response.status_code == 200:
                break
            response.close()
            last_error = FileServiceError(
                f"file service returned status {response.status_code}"
            )

        if response is None or response.status_code != 200:
            message = f"failed to upload file after {attempts} attempts"
            if last_error is not None:
                raise FileServiceError(f"{message}: {last_error}") from last_error
            raise FileServiceError(message)

        with response:
            try:
                result = _parse_upload(response.json())
            except (ValueError, TypeError) as exc:
                raise FileServiceError(f"failed to decode response: {exc}") from exc

        self._logger.info(
            "File uploaded successfully",
            extra={"fields": {"file_id": result.file_id, "hash": result.hash, "size": result.size}},
        )
        return result

    def get_file(self, file_id: str) -> bytes:
        """Download the raw contents of a stored file."""
        url = f"{self._base_url}/api/v1/files/{file_id}"
        try:
            response = self._session.get(url, timeout=self._timeout)
        except requests.RequestException as exc:
            raise FileServiceError(f"failed to get file: {exc}") from exc
        with response:
            if response.status_code != 200:
                raise FileServiceError(f"file service returned status {response.status_code}")
            return response.content

    def delete_file(self, file_id: str) -> None:
        """Delete a stored file; 200 and 204 both count as success."""
        url = f"{self._base_url}/api/v1/files/{file_id}"
        try:
            response = self._session.delete(url, timeout=self._timeout)
        except requests.RequestException as exc:
            raise FileServiceError(f"failed to delete file: {exc}") from exc
        with response:
            if response.status_code not in (200, 204):
                raise FileServiceError(f"file service returned status {response.status_code}")