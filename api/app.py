"""
api/app.py — FastAPI app instance + session middleware + static files
"""

import asyncio
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from config import EXAM_BANK_FILE, SESSION_CLEANUP_INTERVAL, STATIC_DIR, SUBMISSIONS_FILE
from api.routes import router
import api.session as session
from exam_taking.services.exam_catalog import ExamCatalog
from exam_taking.services.submission_store import SubmissionStore

SESSION_COOKIE = "exam_session"

logger = logging.getLogger(__name__)


async def _cleanup_loop():
    """Drop expired sessions periodically."""
    while True:
        await asyncio.sleep(SESSION_CLEANUP_INTERVAL)
        removed = session.cleanup_expired()
        if removed:
            logger.info(f"Cleaned up {removed} expired session(s)")


@asynccontextmanager
async def _lifespan(app: FastAPI):
    task = asyncio.create_task(_cleanup_loop())
    try:
        yield
    finally:
        task.cancel()
        session.clear_all()


def create_app(
    catalog: ExamCatalog | None = None,
    submissions: SubmissionStore | None = None,
) -> FastAPI:
    app = FastAPI(title="Exam Taking", docs_url=None, redoc_url=None, lifespan=_lifespan)
    app.state.catalog = catalog or ExamCatalog.load(EXAM_BANK_FILE)
    app.state.submissions = submissions or SubmissionStore(SUBMISSIONS_FILE)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Session middleware: read the session id from the cookie, issue one if missing
    @app.middleware("http")
    async def session_middleware(request: Request, call_next):
        sid = request.cookies.get(SESSION_COOKIE)
        if not sid or session.get_session(sid) is None:
            sid = session.create_session()

        request.state.session_id = sid
        response: Response = await call_next(request)
        response.set_cookie(
            key=SESSION_COOKIE,
            value=sid,
            httponly=True,
            samesite="lax",
            max_age=session.SESSION_TTL,
        )
        return response

    app.include_router(router)

    if os.path.isdir(STATIC_DIR):
        app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    @app.get("/")
    async def serve_index():
        index_path = os.path.join(STATIC_DIR, "index.html")
        if os.path.exists(index_path):
            return FileResponse(index_path)
        return {"error": "index.html not found"}

    return app
