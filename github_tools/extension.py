import copy
import logging
from typing import Any, Mapping, Optional

import httpx

from github_tools.models.config import RepositoryConfig
from github_tools.models.repo_requests import DownloadTrigger, UploadError, UploadResult
from github_tools.services import github

logger = logging.getLogger(__name__)

COMMAND = "command"
REPORTER = "reporter"
STRING = "string"


def _block(opcode: str, block_type: str, text: str, **defaults: str) -> dict:
    return {
        "opcode": opcode,
        "blockType": block_type,
        "text": text,
        "arguments": {name: {"type": STRING, "defaultValue": value} for name, value in defaults.items()},
    }


EXTENSION_INFO = {
    "id": "githubToolsRoot",
    "name": "GitHub Tools (Root)",
    "color1": "#4C8EDA",
    "color2": "#3A6AA8",
    "color3": "#2B4E7A",
    "blocks": [
        _block(
            "setGitHubConfig", COMMAND,
            "set GitHub token [TOKEN] owner [OWNER] repo [REPO] branch [BRANCH]",
            TOKEN="ghp_...", OWNER="vbscode123", REPO="penguinmod-projects", BRANCH="main",
        ),
        _block(
            "uploadProjectFromUrl", REPORTER,
            "upload file from URL [URL] as [PATH]",
            URL="https://example.com/project.pmp", PATH="project.pmp",
        ),
        _block("makeRawUrl", REPORTER, "raw GitHub URL for [PATH]", PATH="project.pmp"),
        _block(
            "downloadFileFromUrl", COMMAND,
            "download URL [URL] as [FILENAME]",
            URL="https://raw.githubusercontent.com/...", FILENAME="project.pmp",
        ),
        _block("pickAndUploadFile", REPORTER, "pick file and upload as [PATH]", PATH="file.pmp"),
    ],
}


def _arg(args: Mapping[str, Any], name: str) -> str:
    """Host arguments arrive loosely typed; every block reads them as trimmed strings."""
    value = args.get(name)
    return "" if value is None else str(value).strip()


class GitHubToolsExtension:
    """The block handlers, one per opcode in EXTENSION_INFO.

    Holds the only mutable state: the current RepositoryConfig. Handlers read
    it once on entry, so reconfiguring mid-upload affects later calls only.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = RepositoryConfig()
        self._transport = transport

    def get_info(self) -> dict:
        return copy.deepcopy(EXTENSION_INFO)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=github.REQUEST_TIMEOUT)

    # ---------------- Blocks ----------------

    def set_github_config(self, args: Mapping[str, Any]) -> None:
        self.config = RepositoryConfig(
            token=_arg(args, "TOKEN"),
            owner=_arg(args, "OWNER"),
            repo=_arg(args, "REPO"),
            branch=_arg(args, "BRANCH"),
        )
        logger.info(f"🔧 Configured {self.config.owner}/{self.config.repo}@{self.config.branch}")

    async def upload_project_from_url_result(self, args: Mapping[str, Any]) -> UploadResult:
        config = self.config
        if not config.is_configured:
            return UploadResult(error=UploadError.NOT_CONFIGURED)
        async with self.client() as client:
            return await github.upload_from_url(client, config, _arg(args, "URL"), _arg(args, "PATH"))

    async def upload_project_from_url(self, args: Mapping[str, Any]) -> str:
        return (await self.upload_project_from_url_result(args)).url

    def make_raw_url(self, args: Mapping[str, Any]) -> str:
        return github.raw_url(self.config, _arg(args, "PATH"))

    def download_file_from_url(self, args: Mapping[str, Any]) -> DownloadTrigger:
        return DownloadTrigger(url=_arg(args, "URL"), filename=_arg(args, "FILENAME"))

    async def pick_and_upload_file_result(
        self, args: Mapping[str, Any], filename: Optional[str], data: Optional[bytes]
    ) -> UploadResult:
        config = self.config
        if not config.is_configured:
            return UploadResult(error=UploadError.NOT_CONFIGURED)
        async with self.client() as client:
            return await github.upload_file_bytes(client, config, filename, data, _arg(args, "PATH"))

    async def pick_and_upload_file(
        self, args: Mapping[str, Any], filename: Optional[str], data: Optional[bytes]
    ) -> str:
        return (await self.pick_and_upload_file_result(args, filename, data)).url
