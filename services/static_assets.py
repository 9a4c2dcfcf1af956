"""Static-asset fallback for everything outside the API surface."""

from fastapi import Request, Response
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException


class StaticAssetFallback:
    """Serve built frontend files; index.html for directories, 404 otherwise."""

    def __init__(self, directory: str) -> None:
        self.directory = directory
        self._files = StaticFiles(directory=directory, html=True, check_dir=False)

    async def __call__(self, request: Request) -> Response:
        path = self._files.get_path(request.scope)
        try:
            return await self._files.get_response(path, request.scope)
        except HTTPException as e:
            return PlainTextResponse(e.detail, status_code=e.status_code, headers=e.headers)
