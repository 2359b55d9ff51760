from enum import Enum
from typing import Optional

from pydantic import BaseModel


class ConfigRequest(BaseModel):
    token: str
    owner: str
    repo: str
    branch: str = ""


class UploadFromUrlRequest(BaseModel):
    url: str
    path: str = ""


class UploadError(str, Enum):
    NOT_CONFIGURED = "not_configured"
    NO_FILE = "no_file"
    FETCH_FAILED = "fetch_failed"
    NETWORK = "network"
    REJECTED = "rejected"


class UploadResult(BaseModel):
    """Raw URL of the uploaded file, or "" plus the reason it failed."""

    url: str = ""
    error: Optional[UploadError] = None
    status_code: Optional[int] = None


class DownloadTrigger(BaseModel):
    url: str
    filename: str
