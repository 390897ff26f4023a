import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles

import codec
from book import utc_now_iso
from config import Settings, settings
from errors import BookTrackerError, InternalError, NotFoundError
from library import Library

logger = logging.getLogger(__name__)

router = APIRouter()


# --- Dependencies ---
def get_library(request: Request) -> Library:
    """The catalog owned by the running application."""
    return request.app.state.library


# --- Response helpers ---
def _render(body: bytes, fmt: str, status_code: int = 200) -> Response:
    return Response(content=body, status_code=status_code, media_type=codec.media_type(fmt))


def _error_response(error: BookTrackerError, fmt: str = codec.JSON) -> Response:
    return _render(codec.encode_error(error.message, fmt), fmt, error.status_code)


# --- Health check ---
@router.get("/health")
def health():
    """Liveness probe."""
    return {"status": "up", "time": utc_now_iso()}


# --- Books ---
@router.post("/add-book", status_code=201)
async def add_book(request: Request, library: Library = Depends(get_library)):
    """Add a book from a JSON or XML body. The response uses the request's format.

    The Content-Type header decides the format; anything other than
    application/json or application/xml is rejected with 415 before the
    body is read.
    """
    fmt = codec.JSON
    try:
        fmt = codec.negotiate_content_type(request.headers.get("content-type"))
        draft = codec.decode_book_draft(await request.body(), fmt)
        # File write and lock wait stay off the event loop
        book = await run_in_threadpool(library.create_book, draft)
        body = codec.encode_book_response("success", "Book added successfully", book, fmt)
        return _render(body, fmt, 201)
    except BookTrackerError as e:
        if e.status_code >= 500:
            logger.error(f"Error in add-book endpoint: {e.message}")
        return _error_response(e, fmt)
    except Exception:
        logger.exception("Error in add-book endpoint")
        return _error_response(InternalError(), fmt)


@router.get("/books")
def list_books(request: Request, library: Library = Depends(get_library)):
    """Return the whole catalog, as XML when the Accept header asks for it."""
    fmt = codec.negotiate_accept(request.headers.get("accept"))
    try:
        return _render(codec.encode_catalog(library.all(), fmt), fmt)
    except BookTrackerError as e:
        return _error_response(e, fmt)
    except Exception:
        logger.exception("Error in get books endpoint")
        return _error_response(InternalError(), fmt)


@router.delete("/books/{book_id}")
def delete_book(book_id: str, library: Library = Depends(get_library)):
    """Remove a book by its id."""
    try:
        if library.remove_by_id(book_id) == 0:
            raise NotFoundError()
        return JSONResponse({"status": "success", "message": "Book deleted successfully"})
    except BookTrackerError as e:
        if e.status_code >= 500:
            logger.error(f"Error in delete book endpoint: {e.message}")
        return _error_response(e)
    except Exception:
        logger.exception("Error in delete book endpoint")
        return _error_response(InternalError())


# --- Application ---
def create_app(library: Optional[Library] = None, app_settings: Settings = settings) -> FastAPI:
    """Build the FastAPI application around a catalog.

    When no library is given, one is loaded from ``app_settings.books_file``
    at startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # No-op when the root logger is already configured (e.g. via main.py)
        logging.basicConfig(level=app_settings.log_level)
        if app.state.library is None:
            app.state.library = Library(app_settings.books_file)
        yield

    app = FastAPI(title=app_settings.app_name, debug=app_settings.debug, lifespan=lifespan)
    app.state.library = library

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)

    # --- Static files ---
    # Mounted last so the API routes take precedence over /
    if app_settings.static_dir and os.path.isdir(app_settings.static_dir):
        app.mount("/", StaticFiles(directory=app_settings.static_dir, html=True), name="static")

    return app


app = create_app()
