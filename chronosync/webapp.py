from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from .errors import DecodeError, EmptyPasswordError, NotLoggedInError, StoreError
from .storage import LocalStore
from .sync import USER_MESSAGE, export_code, import_code

logger = logging.getLogger(__name__)


class LoginRequest(BaseModel):
    name: str


class ExportRequest(BaseModel):
    password: str


class ImportRequest(BaseModel):
    code: str
    password: str


def create_app(store: LocalStore) -> FastAPI:
    app = FastAPI(title="chronosync web", docs_url=None, redoc_url=None)

    # Handlers are plain ``def`` so FastAPI runs the slow KDF in its threadpool.

    @app.get("/health", response_class=PlainTextResponse)
    def health() -> str:
        return "ok"

    @app.get("/api/user")
    def current_user() -> dict:
        try:
            return {"user": store.current_user()}
        except StoreError as ex:
            raise HTTPException(status_code=500, detail=str(ex)) from ex

    @app.post("/api/login")
    def login(req: LoginRequest) -> dict:
        try:
            return {"user": store.login(req.name)}
        except ValueError as ex:
            raise HTTPException(status_code=400, detail=str(ex)) from ex

    @app.post("/api/logout")
    def logout() -> dict:
        store.logout()
        return {"user": None}

    @app.post("/api/sync/export")
    def sync_export(req: ExportRequest) -> dict:
        try:
            return {"code": export_code(store, req.password)}
        except EmptyPasswordError as ex:
            raise HTTPException(status_code=400, detail="Please enter a password to encrypt your data.") from ex
        except NotLoggedInError as ex:
            raise HTTPException(status_code=409, detail=str(ex)) from ex
        except StoreError as ex:
            raise HTTPException(status_code=500, detail=str(ex)) from ex

    @app.post("/api/sync/import")
    def sync_import(req: ImportRequest) -> dict:
        if not req.code.strip() or not req.password:
            raise HTTPException(status_code=400, detail="Please paste your sync code and enter the password.")
        try:
            snapshot = import_code(store, req.code, req.password)
        except DecodeError as ex:
            logger.warning("Import rejected: %s", type(ex).__name__)
            raise HTTPException(status_code=400, detail=USER_MESSAGE) from ex
        except StoreError as ex:
            raise HTTPException(status_code=500, detail=str(ex)) from ex
        return {"user": snapshot.owner, "tasks": len(snapshot.tasks), "tags": len(snapshot.tags)}

    return app


def serve(store: LocalStore, host: str, port: int) -> None:
    # Lazy import to avoid uvicorn being required at import time
    import uvicorn
    logger.info("Serving %s on http://%s:%d", store.root, host, port)
    uvicorn.run(create_app(store), host=host, port=port, log_level="info")
