import json
import logging
import uuid
from urllib.parse import quote

from pydantic import BaseModel

from voice_agent.core.errors import UpstreamUnavailable
from voice_agent.services.google_api import GoogleApiClient

logger = logging.getLogger(__name__)

GOOGLE_DRIVE_API_BASE_URL = "https://www.googleapis.com/drive/v3"
GOOGLE_DRIVE_UPLOAD_URL = "https://www.googleapis.com/upload/drive/v3/files"
GOOGLE_DOC_MIME_TYPE = "application/vnd.google-apps.document"


class DriveFile(BaseModel):
    id: str
    web_view_link: str


def build_multipart_body(metadata: dict, text: str, boundary: str) -> bytes:
    """multipart/related body: JSON metadata part followed by a text/plain media part."""
    return (
        f"--{boundary}\r\n"
        "Content-Type: application/json; charset=UTF-8\r\n\r\n"
        f"{json.dumps(metadata)}\r\n"
        f"--{boundary}\r\n"
        "Content-Type: text/plain; charset=UTF-8\r\n\r\n"
        f"{text}\r\n"
        f"--{boundary}--\r\n"
    ).encode("utf-8")


class GoogleDriveClient(GoogleApiClient):
    service_name = "Google Drive"

    async def create_document(self, name: str, text: str) -> DriveFile:
        """Upload plain text as a new Google Doc. Returns its id and web link."""
        boundary = f"voice-agent-{uuid.uuid4().hex}"
        metadata = {"name": name, "mimeType": GOOGLE_DOC_MIME_TYPE}
        payload = await self._request_json(
            "POST",
            GOOGLE_DRIVE_UPLOAD_URL,
            params={"uploadType": "multipart", "fields": "id, webViewLink"},
            content=build_multipart_body(metadata, text, boundary),
            headers={"Content-Type": f"multipart/related; boundary={boundary}"},
        )
        file_id = payload.get("id")
        if not file_id:
            raise UpstreamUnavailable("Google Drive did not return the new document.")
        link = payload.get("webViewLink") or f"https://docs.google.com/document/d/{file_id}/edit"
        logger.info("Created Google Doc %s (%s)", name, file_id)
        return DriveFile(id=str(file_id), web_view_link=link)

    async def share_with(self, file_id: str, email: str, role: str = "writer") -> None:
        await self._request_json(
            "POST",
            f"{GOOGLE_DRIVE_API_BASE_URL}/files/{quote(file_id, safe='')}/permissions",
            params={"sendNotificationEmail": "false"},
            json_body={"role": role, "type": "user", "emailAddress": email},
        )
        logger.info("Shared %s with %s as %s", file_id, email, role)
