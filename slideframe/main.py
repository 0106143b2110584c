from __future__ import annotations

from fastapi import FastAPI, File, HTTPException, Query, UploadFile
from fastapi.staticfiles import StaticFiles

from . import config
from .errors import (
    CatalogReadError,
    DecodeError,
    EmptyCatalogError,
    FrameError,
    OutOfRangeError,
    RenderFailedError,
    RendererBusyError,
    RenderUnavailableError,
    StoreError,
    UnknownPictureError,
)
from .frame import PictureFrame

_STATUS_CODES: dict[type[FrameError], int] = {
    DecodeError: 400,
    UnknownPictureError: 404,
    OutOfRangeError: 404,
    EmptyCatalogError: 409,
    CatalogReadError: 500,
    StoreError: 500,
    RenderFailedError: 502,
    RenderUnavailableError: 503,
    RendererBusyError: 503,
}


def _http_error(exc: FrameError) -> HTTPException:
    status_code = next((code for cls, code in _STATUS_CODES.items() if isinstance(exc, cls)), 500)
    return HTTPException(status_code=status_code, detail=str(exc))


def create_app(frame: PictureFrame | None = None) -> FastAPI:
    frame = frame or PictureFrame.from_config()
    app = FastAPI(title="Picture Frame")
    app.state.frame = frame

    @app.on_event("startup")
    async def startup_event() -> None:
        frame.start()

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        await frame.stop()

    # Blocking work (disk, renderer) goes in plain def handlers, which run in the threadpool.
    @app.get("/list-pictures")
    def list_pictures() -> list[str]:
        try:
            return frame.list_pictures()
        except FrameError as exc:
            raise _http_error(exc) from exc

    @app.post("/upload-picture")
    def upload_picture(picture: UploadFile = File(...)):
        payload = picture.file.read(config.MAX_UPLOAD_BYTES + 1)
        if len(payload) > config.MAX_UPLOAD_BYTES:
            raise HTTPException(status_code=413, detail="Picture exceeds the upload size limit")
        if not payload:
            raise HTTPException(status_code=400, detail="Uploaded picture is empty")

        try:
            identifier = frame.ingest(payload, picture.filename)
        except FrameError as exc:
            raise _http_error(exc) from exc
        return {"status": "ok", "name": identifier}

    @app.delete("/delete-picture")
    def delete_picture(name: str = Query(..., min_length=1)):
        try:
            frame.remove(name)
        except FrameError as exc:
            raise _http_error(exc) from exc
        return {"status": "ok"}

    @app.get("/display-picture")
    def display_picture(name: str = Query(..., min_length=1)):
        try:
            path = frame.display_now(name)
        except FrameError as exc:
            raise _http_error(exc) from exc
        return {"status": "ok", "name": name, "path": str(path)}

    @app.get("/current")
    def current_picture():
        try:
            current = frame.current()
        except FrameError as exc:
            raise _http_error(exc) from exc
        last_rotation = frame.state.last_rotation
        return {
            "index": current.index,
            "name": current.identifier,
            "valid": current.ok,
            "last_rotation": last_rotation.isoformat() if last_rotation else None,
            "rendering": frame.gateway.busy,
        }

    app.mount("/pictures", StaticFiles(directory=frame.catalog.directory, check_dir=False), name="pictures")
    app.mount("/static", StaticFiles(directory=config.STATIC_DIR, check_dir=False), name="static")
    return app


app = create_app()
