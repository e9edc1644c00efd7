"""
FastAPI application for the Books CRUD API.
"""

import time
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from books_api.config import APIConfig, config
from books_api.errors import BookAPIError, InternalServiceError, PayloadValidationError
from books_api.models import Book, BookListResponse, BookPatch, BookPayload, ErrorResponse
from books_api.service import BookService
from books_api.store import BookStore, seed_demo_books

logger = structlog.get_logger(__name__)

ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse, "description": "Invalid payload"},
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse, "description": "Book not found"},
}


def get_book_service(request: Request) -> BookService:
    """Build the handler layer over the application's store."""
    return BookService(
        request.app.state.store,
        default_limit=request.app.state.settings.default_page_size
    )


router = APIRouter(tags=["books"])
health_router = APIRouter(tags=["Health"])


@health_router.get("/health", response_class=PlainTextResponse)
def health_check():
    """Liveness probe."""
    return "ok"


@router.get("/", response_model=BookListResponse, summary="Get all books")
def get_all_books(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    service: BookService = Depends(get_book_service)
):
    """
    Get list of books with optional pagination.

    - **page**: Page number (starts from 1, defaults to 1)
    - **limit**: Books per page (defaults to 50)

    Invalid values are clamped instead of rejected.
    """
    result = service.list_books(page=page, limit=limit)
    return JSONResponse(content=result.to_json())


@router.get(
    "/{book_id}",
    response_model=Book,
    responses={404: ERROR_RESPONSES[404]},
    summary="Get a book by ID"
)
def get_book_by_id(book_id: str, service: BookService = Depends(get_book_service)):
    book = service.get_book(book_id)
    return JSONResponse(content=book.to_json())


@router.post(
    "/",
    response_model=Book,
    status_code=status.HTTP_201_CREATED,
    responses={400: ERROR_RESPONSES[400]},
    summary="Create a new book"
)
def create_book(payload: BookPayload, service: BookService = Depends(get_book_service)):
    book = service.create_book(payload)
    return JSONResponse(content=book.to_json(), status_code=status.HTTP_201_CREATED)


@router.patch(
    "/{book_id}",
    response_model=Book,
    responses=ERROR_RESPONSES,
    summary="Partially update a book"
)
def update_book(
    book_id: str,
    payload: BookPatch,
    service: BookService = Depends(get_book_service)
):
    """
    Overwrite only the fields present in the payload.

    Empty strings and a zero year are treated as not provided.
    """
    book = service.update_book(book_id, payload)
    return JSONResponse(content=book.to_json())


@router.put(
    "/{book_id}",
    response_model=Book,
    responses=ERROR_RESPONSES,
    summary="Replace a book"
)
def replace_book(
    book_id: str,
    payload: BookPayload,
    service: BookService = Depends(get_book_service)
):
    book = service.replace_book(book_id, payload)
    return JSONResponse(content=book.to_json())


@router.delete(
    "/{book_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={404: ERROR_RESPONSES[404]},
    summary="Delete a book by ID"
)
def delete_book(book_id: str, service: BookService = Depends(get_book_service)):
    service.delete_book(book_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Exception handlers
async def book_api_exception_handler(request: Request, exc: BookAPIError):
    """Map typed handler errors to their status code."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.message).to_json()
    )


async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """Treat any body that cannot be parsed into the expected shape as malformed."""
    logger.debug("Rejected request body", path=request.url.path, errors=str(exc.errors()))
    error = PayloadValidationError()
    return JSONResponse(
        status_code=error.status_code,
        content=ErrorResponse(error=error.message).to_json()
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions raised by routing (unknown paths, wrong methods)."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=str(exc.detail)).to_json(),
        headers=getattr(exc, "headers", None)
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions."""
    logger.error("Unhandled exception", error=str(exc), path=request.url.path, exc_info=exc)
    error = InternalServiceError()
    debug = request.app.state.settings.debug
    return JSONResponse(
        status_code=error.status_code,
        content=ErrorResponse(
            error=error.message,
            detail=str(exc) if debug else None
        ).to_json()
    )


async def log_requests(request: Request, call_next):
    """Log one event per handled request."""
    started = time.perf_counter()
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        logger.info(
            "Request handled",
            method=request.method,
            path=request.url.path,
            status_code=status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 2)
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings: APIConfig = app.state.settings
    logger.info("Starting Books CRUD API", prefix=settings.api_prefix)

    if settings.seed_demo_data:
        seed_demo_books(app.state.store)

    yield

    logger.info("Shutting down Books CRUD API", books=len(app.state.store))


def create_app(store: Optional[BookStore] = None, settings: Optional[APIConfig] = None) -> FastAPI:
    """
    Create a FastAPI application bound to a store.

    Args:
        store: Book store to serve; a new empty one is created when omitted
        settings: API settings; the global config is used when omitted

    Returns:
        Configured FastAPI application
    """
    settings = settings or config

    app = FastAPI(
        title=settings.api_title,
        description=settings.api_description,
        version=settings.api_version,
        docs_url=settings.docs_url,
        contact={
            "name": "API Support",
            "url": "https://sewucloud.com",
            "email": "support@sewucloud.com",
        },
        license_info={
            "name": "MIT",
            "url": "https://opensource.org/licenses/MIT",
        },
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.store = store if store is not None else BookStore()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )
    app.middleware("http")(log_requests)

    app.add_exception_handler(BookAPIError, book_api_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(health_router)
    app.include_router(router, prefix=f"{settings.api_prefix}/books")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "books_api.main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level=config.log_level.lower()
    )
