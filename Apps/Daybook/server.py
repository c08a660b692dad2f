import logging

from fastapi import FastAPI, Header, HTTPException, status

from . import auth
from .logger import L, LoggerClosedError

logger = logging.getLogger("daybook.server")


def create_app(log: L, auth_token: str) -> FastAPI:
    """
    Maintenance endpoints for a running logger. Nothing here writes log lines;
    the routes only inspect open files and trigger the two sweeps on demand.
    """
    app = FastAPI(title="Daybook admin")
    app.state.log = log

    def _check(authorization: str | None) -> None:
        auth.validate_bearer(authorization, auth_token)
        if log.closed:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Logger is closed",
            )

    @app.get("/health")
    async def health():
        return {"ok": not log.closed, "directory": str(log.directory)}

    @app.get("/open-files")
    async def open_files(authorization: str | None = Header(None)):
        _check(authorization)
        paths = sorted(str(p) for p in log.open_paths())
        return {"ok": True, "paths": paths}

    @app.post("/admin/sweep")
    def admin_sweep(authorization: str | None = Header(None)):
        _check(authorization)
        if not log.retention_enabled:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Retention is disabled (delete_old_files not set)",
            )
        try:
            deleted = log.sweep_now()
        except LoggerClosedError:
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Logger is closed")
        if deleted:
            logger.info("Manual retention sweep removed %s file(s)", deleted)
        return {"ok": True, "deleted": deleted}

    @app.post("/admin/close-past")
    def admin_close_past(authorization: str | None = Header(None)):
        _check(authorization)
        try:
            closed = log.close_past_streams()
        except LoggerClosedError:
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Logger is closed")
        return {"ok": True, "closed": closed}

    return app
