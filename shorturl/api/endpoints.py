"""
FastAPI Endpoints for URL Shortener Service

This module defines the HTTP surface with minimal logic.
Endpoints only handle:
- Extracting the URL or code from the raw request path
- Mapping service errors to HTTP responses
- Serving the static documentation directory
- Delegating to the service layer

Routes:
- GET /new/<url>  shorten <url> (200 created-or-existing, 404 unreachable,
                  500 missing scheme or storage failure)
- GET /<code>     302 to the original URL, 404 if unknown

The URL and the code are taken from the path exactly as the client sent it.
Percent-escapes are not decoded: `%` and the hex digits are part of the code
alphabet, and submitted URLs are stored without normalisation.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import RedirectResponse, Response
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from shorturl.api.schemas import ShortenResponse
from shorturl.core.exceptions import (
    CounterCorruptedError,
    StoreUnavailableError,
    ValidationFailedError,
)
from shorturl.core.setting import Settings
from shorturl.core.validators import has_supported_scheme, sanitize_short_code
from shorturl.services.url_service import URLShorteningService

logger = logging.getLogger(__name__)

router = APIRouter()

NEW_PREFIX = "/new/"


def get_url_service(request: Request) -> URLShorteningService:
    """Dependency returning the service owned by the running application."""
    return request.app.state.url_service


def get_settings(request: Request) -> Settings:
    """Dependency returning the settings the application was built with."""
    return request.app.state.settings


def get_docs(request: Request) -> StaticFiles:
    """Dependency returning the documentation file server."""
    return request.app.state.docs


def raw_request_path(request: Request) -> str:
    """The request path as sent by the client, percent-escapes intact."""
    raw_path = request.scope.get("raw_path")
    if raw_path is None:
        return request.url.path
    return raw_path.decode("latin-1")


def build_short_url(request: Request, settings: Settings, short_code: str) -> str:
    """
    Join the public host and the short code.

    Uses PUBLIC_HOST when configured, otherwise the Host header the client
    used to reach us.
    """
    host = settings.PUBLIC_HOST or request.headers.get("host") or request.url.netloc
    return f"{host}/{short_code}"


async def serve_docs(docs: StaticFiles, path: str, request: Request) -> Optional[Response]:
    """Return the documentation file for path, or None when there is none."""
    try:
        response = await docs.get_response(path, request.scope)
    except StarletteHTTPException as e:
        if e.status_code != status.HTTP_404_NOT_FOUND:
            raise
        return None
    except ValueError:
        # embedded NUL byte in the path
        return None

    # a docs 404.html page must not hide short codes
    if response.status_code == status.HTTP_404_NOT_FOUND:
        return None
    return response


@router.get(
    "/new/{url:path}",
    response_model=ShortenResponse,
    summary="Create a short URL",
    description="Takes a long URL from the path and returns its short URL"
)
async def create_short_url(
    request: Request,
    url_service: URLShorteningService = Depends(get_url_service),
    settings: Settings = Depends(get_settings)
) -> ShortenResponse:
    """
    Shorten the URL given in the path.

    The query string of the request belongs to the submitted URL and is
    appended back to it.

    Raises:
        HTTPException 404: If the URL could not be fetched
        HTTPException 500: If the URL lacks a scheme or storage failed
    """
    url = raw_request_path(request)[len(NEW_PREFIX):]
    query = request.scope.get("query_string", b"").decode("latin-1")
    if query:
        url = f"{url}?{query}"

    if not has_supported_scheme(url):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="The URL you entered is invalid. Please make sure it begins with http:// or https://"
        )

    try:
        short_url_obj = await url_service.create_short_url(url)
    except ValidationFailedError as e:
        logger.info(f"Rejected {url}: {e.reason}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="An error occurred. Is the URL you entered valid?"
        )
    except (StoreUnavailableError, CounterCorruptedError) as e:
        logger.error(f"Failed to shorten {url}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred connecting to database. Please try again later."
        )

    return ShortenResponse(
        original_url=short_url_obj.original_url,
        short_url=build_short_url(request, settings, short_url_obj.short_code)
    )


@router.get("/", include_in_schema=False)
async def root(request: Request, docs: StaticFiles = Depends(get_docs)):
    """
    Serve the documentation index, or a short service description when no
    documentation is installed.
    """
    index = await serve_docs(docs, "", request)
    if index is not None:
        return index

    return {
        "message": "URL Shortener Service",
        "usage": "GET /new/<url> to shorten, GET /<code> to follow"
    }


@router.get(
    "/{short_code:path}",
    status_code=status.HTTP_302_FOUND,
    summary="Redirect to original URL",
    description="Takes a short code and redirects to the original long URL"
)
async def redirect_to_url(
    short_code: str,
    request: Request,
    url_service: URLShorteningService = Depends(get_url_service),
    docs: StaticFiles = Depends(get_docs)
):
    """
    Redirect to the original URL for a given short code.

    Files in the documentation directory take precedence over codes.

    Returns:
        RedirectResponse (HTTP 302) to original URL

    Raises:
        HTTPException 404: If short code not found
        HTTPException 500: If the record store is unavailable
    """
    docs_file = await serve_docs(docs, short_code, request)
    if docs_file is not None:
        return docs_file

    code = raw_request_path(request)[1:]
    not_found = HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"No short_url found with id {code}"
    )

    if not sanitize_short_code(code):
        raise not_found

    try:
        short_url = await url_service.get_original_url(code)
    except StoreUnavailableError as e:
        logger.error(f"Failed to resolve '{code}': {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred. Are you sure you entered a valid short_url?"
        )

    if short_url is None:
        raise not_found

    return RedirectResponse(
        url=short_url.original_url,
        status_code=status.HTTP_302_FOUND
    )
