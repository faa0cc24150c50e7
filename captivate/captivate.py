"""
Captivate.fm API client for managing shows, episodes and media.
"""

import asyncio
import logging
import mimetypes
import os
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Union

import aiohttp

from .errors import (
    CaptivateAuthError,
    CaptivateFileError,
    CaptivateHTTPError,
    CaptivateResponseError,
    CaptivateTransportError,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.captivate.fm"
PUBLISH_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _form_value(value: Any) -> str:
    """Render a form value the way Captivate expects it."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.strftime(PUBLISH_DATE_FORMAT)
    return str(value)


@dataclass
class EpisodeDraft:
    """Everything needed to create an episode on a show.

    Optional fields left as None are not sent at all, so falsy values
    such as ``episode_season=0`` or ``explicit=False`` still reach the API.
    """

    show_id: str
    title: str
    media_id: str
    publish_date: Union[str, datetime]
    episode_number: Union[int, str]
    episode_type: str
    show_notes: str
    summary: str
    subtitle: Optional[str] = None
    author: Optional[str] = None
    explicit: Optional[bool] = None
    status: Optional[str] = None
    episode_season: Optional[int] = None
    donation_link: Optional[str] = None
    donation_text: Optional[str] = None
    episode_url: Optional[str] = None
    episode_art: Optional[str] = None
    itunes_block: Optional[bool] = None

    def to_form_fields(self) -> List[Tuple[str, str]]:
        """Get the (field, value) pairs for the episode form body."""
        fields = [
            ("shows_id", self.show_id),
            ("title", self.title),
            ("itunes_title", self.title),
            ("media_id", self.media_id),
            ("date", self.publish_date),
            ("episode_number", self.episode_number),
            ("episode_type", self.episode_type),
            ("shownotes", self.show_notes),
            ("summary", self.summary),
        ]
        optional = [
            ("status", self.status),
            ("itunes_subtitle", self.subtitle),
            ("author", self.author),
            ("episode_art", self.episode_art),
            ("explicit", self.explicit),
            ("episode_season", self.episode_season),
            ("donation_link", self.donation_link),
            ("donation_text", self.donation_text),
            ("link", self.episode_url),
            ("itunes_block", self.itunes_block),
        ]
        fields.extend((name, value) for name, value in optional if value is not None)
        return [(name, _form_value(value)) for name, value in fields]


class CaptivateClient:
    """Client for the Captivate.fm API."""

    def __init__(
        self,
        user_id: str,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: Optional[float] = None,
    ) -> None:
        """Initialize the Captivate client.

        Args:
            user_id: Captivate user ID
            api_key: Captivate API key for that user
            base_url: Base URL for the API
            timeout: Total timeout in seconds for each request
        """
        self.user_id = user_id
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._token = ""
        self._auth_lock = asyncio.Lock()
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def token(self) -> str:
        """Bearer token from the last successful authentication."""
        return self._token

    async def __aenter__(self) -> "CaptivateClient":
        """Async context manager entry."""
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

    async def _ensure_session(self) -> None:
        """Ensure aiohttp session is created."""
        if self._session is None or self._session.closed:
            if self.timeout is not None:
                timeout = aiohttp.ClientTimeout(total=self.timeout)
                self._session = aiohttp.ClientSession(timeout=timeout)
            else:
                self._session = aiohttp.ClientSession()

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()

    def _auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self._token}"}

    async def _request(
        self,
        method: str,
        path: str,
        data: Any = None,
        authenticated: bool = True,
    ) -> Any:
        """Send one request and return the decoded JSON body.

        Raises:
            CaptivateAuthError: On 401/403
            CaptivateHTTPError: On any other non-2xx status
            CaptivateTransportError: If no response was received
            CaptivateResponseError: If the body is not JSON
        """
        await self._ensure_session()

        url = f"{self.base_url}{path}"
        headers = self._auth_headers() if authenticated else {}
        logger.debug(f"{method} {url}")

        try:
            assert self._session is not None
            async with self._session.request(method, url, headers=headers, data=data) as response:
                if response.status in (401, 403):
                    body = await response.text()
                    raise CaptivateAuthError(
                        f"Authentication failed - HTTP {response.status}",
                        status=response.status,
                        body=body,
                    )

                if not 200 <= response.status < 300:
                    body = await response.text()
                    raise CaptivateHTTPError(
                        f"HTTP {response.status}: {response.reason}",
                        status=response.status,
                        body=body,
                    )

                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    raise CaptivateResponseError(f"Invalid JSON from {method} {path}", cause=e)

        except aiohttp.ClientError as e:
            raise CaptivateTransportError(f"Request failed: {method} {path}", cause=e)
        except asyncio.TimeoutError as e:
            raise CaptivateTransportError(f"Request timed out: {method} {path}", cause=e)

    @staticmethod
    def _field(data: Any, *keys: str) -> Any:
        """Dig a nested field out of a response body."""
        value = data
        for key in keys:
            if not isinstance(value, dict) or key not in value:
                raise CaptivateResponseError(f"Response is missing '{'.'.join(keys)}'")
            value = value[key]
        return value

    async def _upload_file(self, path: str, file_path: Union[str, os.PathLike]) -> Any:
        """POST a local file as the multipart 'file' field."""
        try:
            stream = open(file_path, "rb")
        except OSError as e:
            raise CaptivateFileError(f"Cannot open upload source {file_path}", cause=e)

        with stream:
            filename = os.path.basename(os.fspath(file_path))
            content_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
            form = aiohttp.FormData()
            form.add_field("file", stream, filename=filename, content_type=content_type)
            return await self._request("POST", path, data=form)

    async def authenticate_user(self) -> str:
        """Exchange the user ID and API key for a bearer token.

        Returns:
            The new token, which is also kept for subsequent calls

        Raises:
            CaptivateError: If authentication fails; the previous token is kept
        """
        async with self._auth_lock:
            data = await self._request(
                "POST",
                "/authenticate/token",
                data={"username": self.user_id, "token": self.api_key},
                authenticated=False,
            )
            token = self._field(data, "user", "token")
            self._token = token
            logger.info(f"Authenticated Captivate user {self.user_id}")
            return token

    async def get_user_shows(self) -> List[Dict[str, Any]]:
        """Get the shows the user has access to."""
        data = await self._request("GET", f"/users/{self.user_id}/shows")
        return self._field(data, "shows")

    async def list_episodes(self, show_id: str) -> Any:
        """Get the episode listing of a show.

        Returns:
            The full response body; episodes are under its "episodes" key
        """
        return await self._request("GET", f"/shows/{show_id}/episodes")

    async def upload_episode(self, file_path: Union[str, os.PathLike], show_id: str) -> str:
        """Upload an episode media file to a show.

        Args:
            file_path: Local path of the audio file
            show_id: Show that will own the media

        Returns:
            The media ID to pass to create_episode

        Raises:
            CaptivateFileError: If the file cannot be opened
            CaptivateError: If the upload fails
        """
        data = await self._upload_file(f"/shows/{show_id}/media", file_path)
        return self._field(data, "media", "id")

    async def create_episode(self, draft: EpisodeDraft) -> Any:
        """Create an episode from previously uploaded media.

        Returns:
            The full response body describing the created episode
        """
        form = aiohttp.FormData()
        for name, value in draft.to_form_fields():
            form.add_field(name, value, content_type="text/plain; charset=utf-8")
        return await self._request("POST", "/episodes", data=form)

    async def create_show_artwork(self, file_path: Union[str, os.PathLike], show_id: str) -> Any:
        """Upload new cover artwork for a show.

        Returns:
            Only the "artwork" field of the response (the artwork URL),
            not the whole body
        """
        data = await self._upload_file(f"/shows/{show_id}/artwork", file_path)
        return self._field(data, "artwork")
