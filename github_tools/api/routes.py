from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx
from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, Response, UploadFile

from github_tools.extension import GitHubToolsExtension
from github_tools.models.repo_requests import ConfigRequest, UploadFromUrlRequest, UploadResult

router = APIRouter()

# Blocks the generic dispatcher can't run: they need a file or a download response.
DEDICATED_ROUTES = {
    "downloadFileFromUrl": "/download",
    "pickAndUploadFile": "/pick-and-upload",
}


def content_disposition(filename: str) -> str:
    """Attachment header, RFC 5987 encoded when the name isn't plain ASCII (as FileResponse does)."""
    quoted = quote(filename)
    if quoted != filename:
        return f"attachment; filename*=utf-8''{quoted}"
    return f'attachment; filename="{filename}"'


def get_extension(request: Request) -> GitHubToolsExtension:
    return request.app.state.extension


@router.get("/extension")
def extension_info(extension: GitHubToolsExtension = Depends(get_extension)):
    """Block metadata the host registers."""
    return extension.get_info()


@router.post("/config")
def set_config(request: ConfigRequest, extension: GitHubToolsExtension = Depends(get_extension)):
    extension.set_github_config(
        {"TOKEN": request.token, "OWNER": request.owner, "REPO": request.repo, "BRANCH": request.branch}
    )
    config = extension.config
    return {"message": "GitHub config updated", "owner": config.owner, "repo": config.repo, "branch": config.branch}


@router.post("/upload-from-url", response_model=UploadResult)
async def upload_from_url(request: UploadFromUrlRequest, extension: GitHubToolsExtension = Depends(get_extension)):
    """Fetch a URL and commit its bytes. Failures come back as url="" plus the error kind."""
    return await extension.upload_project_from_url_result({"URL": request.url, "PATH": request.path})


@router.get("/raw-url")
def raw_url(path: str, extension: GitHubToolsExtension = Depends(get_extension)):
    return {"url": extension.make_raw_url({"PATH": path})}


@router.get("/download")
async def download(url: str, filename: str, extension: GitHubToolsExtension = Depends(get_extension)):
    """Relay a URL's body as an attachment so the browser saves it under `filename`."""
    trigger = extension.download_file_from_url({"URL": url, "FILENAME": filename})
    async with extension.client() as client:
        try:
            upstream = await client.get(trigger.url, follow_redirects=True)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise HTTPException(status_code=502, detail=f"Could not fetch {trigger.url}: {e}")

    media_type = upstream.headers.get("content-type", "application/octet-stream")
    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        media_type=media_type,
        headers={"Content-Disposition": content_disposition(trigger.filename)},
    )


@router.post("/pick-and-upload", response_model=UploadResult)
async def pick_and_upload(
    path: str = Form(""),
    file: Optional[UploadFile] = File(None),
    extension: GitHubToolsExtension = Depends(get_extension),
):
    if file is None or not file.filename:
        return await extension.pick_and_upload_file_result({"PATH": path}, None, None)
    data = await file.read()
    return await extension.pick_and_upload_file_result({"PATH": path}, file.filename, data)


@router.post("/blocks/{opcode}")
async def run_block(
    opcode: str, args: Dict[str, Any], extension: GitHubToolsExtension = Depends(get_extension)
):
    """Run a block the way the host calls it: opcode plus its argument object."""
    if opcode in DEDICATED_ROUTES:
        raise HTTPException(status_code=400, detail=f"{opcode} is served by {DEDICATED_ROUTES[opcode]}")

    if opcode == "setGitHubConfig":
        extension.set_github_config(args)
        return {"value": None}
    if opcode == "uploadProjectFromUrl":
        return {"value": await extension.upload_project_from_url(args)}
    if opcode == "makeRawUrl":
        return {"value": extension.make_raw_url(args)}

    raise HTTPException(status_code=404, detail=f"Unknown block: {opcode}")
