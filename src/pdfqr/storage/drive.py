"""Google Drive artifact sink."""

import asyncio
import io
import json
import logging
from typing import Any, Optional

from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseUpload

from pdfqr.core.config import Settings
from pdfqr.core.exceptions import BackendUnavailable
from pdfqr.storage.base import ArtifactSink, StoredArtifact

logger = logging.getLogger(__name__)

DRIVE_SCOPES = ["https://www.googleapis.com/auth/drive.file"]


def build_drive_view_url(drive_file_id: str) -> str:
    return f"https://drive.google.com/file/d/{drive_file_id}/view"


class DriveArtifactSink(ArtifactSink):
    """Uploads finished files to a Drive folder and shares them publicly.

    Nothing is kept locally: the returned URL points at Drive's viewer.
    """

    def __init__(self, config: Settings):
        self.config = config
        self._service: Optional[Any] = None

    def _get_service(self) -> Any:
        """Lazy-load and cache the Drive v3 client."""
        if self._service is None:
            if not self.config.GOOGLE_DRIVE_FOLDER_ID:
                raise ValueError("GOOGLE_DRIVE_FOLDER_ID not configured")

            if self.config.GOOGLE_SERVICE_ACCOUNT_JSON:
                credentials = service_account.Credentials.from_service_account_info(
                    json.loads(self.config.GOOGLE_SERVICE_ACCOUNT_JSON), scopes=DRIVE_SCOPES
                )
            elif self.config.GOOGLE_SERVICE_ACCOUNT_FILE:
                credentials = service_account.Credentials.from_service_account_file(
                    self.config.GOOGLE_SERVICE_ACCOUNT_FILE, scopes=DRIVE_SCOPES
                )
            else:
                raise ValueError("Google service account credentials not configured")

            self._service = build("drive", "v3", credentials=credentials, cache_discovery=False)

        return self._service

    def _upload_and_share(self, content: bytes, file_name: str, mime_type: str) -> str:
        """Blocking Drive calls: create the file, then grant anyone-reader."""
        service = self._get_service()

        media = MediaIoBaseUpload(io.BytesIO(content), mimetype=mime_type, resumable=False)
        created = (
            service.files()
            .create(
                body={"name": file_name, "parents": [self.config.GOOGLE_DRIVE_FOLDER_ID]},
                media_body=media,
                fields="id",
            )
            .execute()
        )
        drive_file_id = created["id"]

        service.permissions().create(
            fileId=drive_file_id,
            body={"role": "reader", "type": "anyone"},
        ).execute()

        return drive_file_id

    async def store(
        self, content: bytes, file_name: str, mime_type: str, base_url: str
    ) -> StoredArtifact:
        """Upload to Drive off the event loop, bounded by the configured timeout."""
        try:
            drive_file_id = await asyncio.wait_for(
                asyncio.to_thread(self._upload_and_share, content, file_name, mime_type),
                timeout=self.config.GOOGLE_DRIVE_TIMEOUT_SECONDS,
            )
        except asyncio.TimeoutError:
            logger.error(
                f"Google Drive upload timed out after {self.config.GOOGLE_DRIVE_TIMEOUT_SECONDS}s",
                extra={"file_name": file_name},
            )
            raise BackendUnavailable("drive", "Upload to Google Drive timed out", timeout=True)
        except ValueError as e:
            logger.error(f"Google Drive configuration error: {e}")
            raise BackendUnavailable("drive", "Storage configuration error")
        except (HttpError, GoogleAuthError, OSError) as e:
            logger.error(f"Google Drive upload failed: {e}", exc_info=True)
            raise BackendUnavailable("drive", f"Failed to upload to Google Drive: {e}")

        logger.info(
            f"Uploaded {file_name} to Google Drive",
            extra={"drive_file_id": drive_file_id, "size_bytes": len(content)},
        )
        return StoredArtifact(
            artifact_id=drive_file_id,
            url=build_drive_view_url(drive_file_id),
            byte_length=len(content),
        )

    def get_backend_name(self) -> str:
        return "drive"
