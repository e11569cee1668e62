import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from config import Settings, settings as default_settings
from library import BookNotFoundError, Library, LibraryError
from logging_config import setup_logging

logger = logging.getLogger(__name__)

ENDPOINTS = (
    "GET /books",
    "GET /books/:id",
    'POST /books (with JSON body: {"title": "New Title", "author": "New Author"})',
    'PUT /books/:id (with JSON body: {"title": "Updated Title"})',
    "DELETE /books/:id",
)


# --- Models ---
class BookModel(BaseModel):
    id: str
    title: str
    author: str


class BookCreateModel(BaseModel):
    title: str | None = Field(default=None, description="Required, must be non-empty")
    author: str | None = Field(default=None, description="Required, must be non-empty")


class UpdateBookModel(BaseModel):
    title: str | None = Field(default=None, description="Empty or omitted keeps the current title")
    author: str | None = Field(default=None, description="Empty or omitted keeps the current author")


class MessageModel(BaseModel):
    message: str


class HealthModel(BaseModel):
    status: str
    timestamp: str
    total_books: int


# --- Dependencies ---
def get_library(request: Request) -> Library:
    """Hand the application's book store to a route."""
    return request.app.state.library


# --- Routes ---
router = APIRouter()

NOT_FOUND = {404: {"model": MessageModel}}


@router.get("/health", response_model=HealthModel)
def health(library: Library = Depends(get_library)):
    """Lightweight liveness probe."""
    return HealthModel(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        total_books=library.count(),
    )


@router.get("/books", response_model=List[BookModel])
def list_books(library: Library = Depends(get_library)):
    """Return every book in insertion order."""
    logger.info("GET /books request received.")
    return [BookModel(**b.to_dict()) for b in library.list_books()]


@router.get("/books/{book_id}", response_model=BookModel, responses=NOT_FOUND)
def get_book(book_id: str, library: Library = Depends(get_library)):
    logger.info("GET /books/%s request received.", book_id)
    book = library.find_book(book_id)
    return BookModel(**book.to_dict())


@router.post(
    "/books",
    response_model=BookModel,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": MessageModel}},
)
def add_book(payload: Optional[BookCreateModel] = None, library: Library = Depends(get_library)):
    """Create a book; the server assigns its id."""
    payload = payload or BookCreateModel()
    logger.info("POST /books request received. %s", payload.model_dump(exclude_unset=True))
    book = library.add_book(payload.title, payload.author)
    return BookModel(**book.to_dict())


@router.put("/books/{book_id}", response_model=BookModel, responses=NOT_FOUND)
def update_book(book_id: str, update: Optional[UpdateBookModel] = None, library: Library = Depends(get_library)):
    """Replace title and/or author. Empty strings are treated as omitted."""
    update = update or UpdateBookModel()
    logger.info("PUT /books/%s request received. %s", book_id, update.model_dump(exclude_unset=True))
    book = library.update_book(book_id, title=update.title, author=update.author)
    return BookModel(**book.to_dict())


@router.delete(
    "/books/{book_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=NOT_FOUND,
)
def delete_book(book_id: str, library: Library = Depends(get_library)):
    logger.info("DELETE /books/%s request received.", book_id)
    library.remove_book(book_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Error handlers ---
def _message(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


async def library_error_handler(request: Request, exc: LibraryError) -> JSONResponse:
    if isinstance(exc, BookNotFoundError):
        return _message(status.HTTP_404_NOT_FOUND, exc.message)
    # InvalidBookError and any other client-side library error
    logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return _message(status.HTTP_400_BAD_REQUEST, exc.message)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.errors())
    return _message(status.HTTP_400_BAD_REQUEST, "Invalid request body.")


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error while serving %s %s", request.method, request.url.path)
    return _message(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error.")


# --- Application factory ---
def create_app(library: Optional[Library] = None, settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI application around a book store.

    When ``library`` is omitted a fresh store is created, seeded with the
    three starter books unless ``settings.seed_books`` is off.
    """
    settings = settings or default_settings
    setup_logging(settings.log_level)

    if library is None:
        library = Library.with_seed_data() if settings.seed_books else Library()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Server is running on %s", settings.base_url)
        logger.info("Available endpoints:")
        for endpoint in ENDPOINTS:
            logger.info("  %s", endpoint)
        yield

    app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)
    app.state.library = library
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(LibraryError, library_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(router)
    return app


app = create_app()
