"""Google Drive backed storage for uploaded images."""

from __future__ import annotations

import logging
from functools import lru_cache
from io import BytesIO
from typing import Any, Protocol

from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseUpload

from app.core.config import settings

logger = logging.getLogger(__name__)

DRIVE_SCOPES = ["https://www.googleapis.com/auth/drive"]


class FileStorageError(Exception):
    """Raised when a file could not be stored or removed."""


class FileStorage(Protocol):
    def upload(self, content: bytes, filename: str, mime_type: str) -> str:
        ...

    def delete(self, file_id: str) -> None:
        ...


class GoogleDriveStorage:
    """Stores files in a shared Drive folder using a service account."""

    def __init__(
        self,
        keyfile: str | None = None,
        folder_id: str | None = None,
        *,
        service: Any | None = None,
    ) -> None:
        self.keyfile = keyfile or settings.google_drive_keyfile
        self.folder_id = settings.google_drive_folder_id if folder_id is None else folder_id
        self._service = service

    def _get_service(self) -> Any:
        if self._service is None:
            try:
                credentials = service_account.Credentials.from_service_account_file(
                    self.keyfile,
                    scopes=DRIVE_SCOPES,
                )
            except (GoogleAuthError, OSError, ValueError) as exc:
                raise FileStorageError("Google Drive credentials could not be loaded") from exc
            self._service = build("drive", "v3", credentials=credentials, cache_discovery=False)
        return self._service

    def upload(self, content: bytes, filename: str, mime_type: str) -> str:
        """Upload ``content`` and return the Drive file id."""

        service = self._get_service()
        file_metadata: dict[str, Any] = {"name": filename}
        if self.folder_id:
            file_metadata["parents"] = [self.folder_id]

        media = MediaIoBaseUpload(BytesIO(content), mimetype=mime_type, resumable=True)
        try:
            result = service.files().create(
                body=file_metadata,
                media_body=media,
                fields="id",
            ).execute()
        except HttpError as exc:
            logger.error("Google Drive API error uploading %s", filename, exc_info=True)
            raise FileStorageError(f"Failed to upload file: {exc}") from exc

        file_id = result.get("id")
        if not file_id:
            raise FileStorageError("Google Drive did not return a file id")
        logger.info("Uploaded %s to Google Drive as %s", filename, file_id)
        return file_id

    def delete(self, file_id: str) -> None:
        service = self._get_service()
        try:
            service.files().delete(fileId=file_id).execute()
        except HttpError as exc:
            raise FileStorageError(f"Failed to delete file {file_id}: {exc}") from exc


@lru_cache(maxsize=1)
def _default_storage() -> GoogleDriveStorage:
    return GoogleDriveStorage()


def get_file_storage() -> FileStorage:
    """FastAPI dependency returning the process-wide storage client."""

    return _default_storage()


__all__ = [
    "DRIVE_SCOPES",
    "FileStorage",
    "FileStorageError",
    "GoogleDriveStorage",
    "get_file_storage",
]
