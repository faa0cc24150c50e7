"""
Captivate.fm API client library.

This library provides a client for the Captivate.fm podcast hosting API
to authenticate, list shows and episodes, upload media and artwork, and
create episodes.
"""

from .captivate import CaptivateClient, EpisodeDraft, DEFAULT_BASE_URL
from .errors import (
    CaptivateError,
    CaptivateTransportError,
    CaptivateHTTPError,
    CaptivateAuthError,
    CaptivateFileError,
    CaptivateResponseError,
)

__all__ = [
    "CaptivateClient",
    "EpisodeDraft",
    "DEFAULT_BASE_URL",
    "CaptivateError",
    "CaptivateTransportError",
    "CaptivateHTTPError",
    "CaptivateAuthError",
    "CaptivateFileError",
    "CaptivateResponseError",
]
