import base64
import logging
from typing import Optional
from urllib.parse import quote

import httpx

from github_tools.models.config import RepositoryConfig
from github_tools.models.repo_requests import UploadError, UploadResult

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
GITHUB_RAW_URL = "https://raw.githubusercontent.com"
REQUEST_TIMEOUT = 30  # seconds, per request

DEFAULT_URL_UPLOAD_PATH = "project.pmp"
DEFAULT_PICKED_UPLOAD_PATH = "file.pmp"

# Same set encodeURIComponent leaves alone; "/" is escaped too.
_PATH_SAFE_CHARS = "!~*'()"


def api_url(config: RepositoryConfig, path: str) -> str:
    """Contents API endpoint for a file path in the configured repository."""
    return f"{GITHUB_API_URL}/repos/{config.owner}/{config.repo}/contents/{quote(path, safe=_PATH_SAFE_CHARS)}"


def raw_url(config: RepositoryConfig, path: str) -> str:
    """Public raw-content URL for a file path on the configured branch."""
    return f"{GITHUB_RAW_URL}/{config.owner}/{config.repo}/{config.branch}/{path}"


def encode_content(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _headers(config: RepositoryConfig) -> dict:
    return {"Authorization": f"Bearer {config.token}", "Accept": "application/vnd.github+json"}


async def get_existing_sha(client: httpx.AsyncClient, config: RepositoryConfig, path: str) -> Optional[str]:
    """Return the current blob sha of the file, or None when it can't be read.

    Any non-2xx answer counts as "file does not exist"; a 404 and a 500 are
    not told apart.
    """
    try:
        response = await client.get(api_url(config, path), headers=_headers(config))
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.warning(f"⚠️ Could not read {path} metadata: {e}")
        return None

    if not response.is_success:
        logger.debug(f"No existing file at {path} (status {response.status_code})")
        return None

    try:
        body = response.json()
    except ValueError:
        return None
    sha = body.get("sha") if isinstance(body, dict) else None
    return sha or None


async def upload_content_result(
    client: httpx.AsyncClient,
    config: RepositoryConfig,
    path: str,
    content: str,
    message: str,
) -> UploadResult:
    """GET the current sha, then PUT the base64 `content` as a commit on the branch."""
    if not config.is_configured:
        return UploadResult(error=UploadError.NOT_CONFIGURED)

    url = api_url(config, path)
    try:
        sha = await get_existing_sha(client, config, path)

        payload = {"message": message, "content": content, "branch": config.branch}
        if sha:
            payload["sha"] = sha

        logger.info(f"📤 Uploading {path} to {config.owner}/{config.repo}@{config.branch}")
        headers = {**_headers(config), "Content-Type": "application/json"}
        response = await client.put(url, headers=headers, json=payload)
    except Exception as e:
        logger.warning(f"❌ Upload of {path} failed: {e}")
        return UploadResult(error=UploadError.NETWORK)

    if not response.is_success:
        logger.warning(f"❌ GitHub rejected upload of {path}: {response.status_code}")
        return UploadResult(error=UploadError.REJECTED, status_code=response.status_code)

    logger.info(f"✅ Uploaded {path}")
    return UploadResult(url=raw_url(config, path), status_code=response.status_code)


async def upload_content(
    client: httpx.AsyncClient,
    config: RepositoryConfig,
    path: str,
    content: str,
    message: str,
) -> str:
    """Same as `upload_content_result`, collapsed to the raw URL or ""."""
    result = await upload_content_result(client, config, path, content, message)
    return result.url


async def fetch_bytes(client: httpx.AsyncClient, url: str) -> Optional[bytes]:
    """Download a URL's body, or None on any transport error or non-2xx status."""
    try:
        response = await client.get(url, follow_redirects=True)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.warning(f"⚠️ Fetching {url} failed: {e}")
        return None

    if not response.is_success:
        logger.warning(f"⚠️ Fetching {url} returned {response.status_code}")
        return None
    return response.content


async def upload_from_url(
    client: httpx.AsyncClient, config: RepositoryConfig, url: str, path: str = ""
) -> UploadResult:
    if not config.is_configured:
        return UploadResult(error=UploadError.NOT_CONFIGURED)

    path = path.strip() or DEFAULT_URL_UPLOAD_PATH
    data = await fetch_bytes(client, url.strip())
    if data is None:
        return UploadResult(error=UploadError.FETCH_FAILED)

    return await upload_content_result(client, config, path, encode_content(data), f"Upload from URL to {path}")


async def upload_file_bytes(
    client: httpx.AsyncClient,
    config: RepositoryConfig,
    filename: Optional[str],
    data: Optional[bytes],
    path: str = "",
) -> UploadResult:
    """Upload a file the user picked. `data` is None when nothing was selected."""
    if not config.is_configured:
        return UploadResult(error=UploadError.NOT_CONFIGURED)

    path = path.strip() or DEFAULT_PICKED_UPLOAD_PATH
    if data is None:
        return UploadResult(error=UploadError.NO_FILE)

    return await upload_content_result(
        client, config, path, encode_content(data), f"Upload {filename or path} to {path}"
    )
