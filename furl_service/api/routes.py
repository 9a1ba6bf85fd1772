"""FastAPI routes for the resolver service."""

from __future__ import annotations

import asyncio
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, Response

from furl_resolver.service import ResolutionService

from ..config import Settings

router = APIRouter()

ROBOTS_TXT = "User-agent: *\nDisallow: /http://"


def get_service(request: Request) -> ResolutionService:
    return request.app.state.service


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
def index(settings: Settings = Depends(get_app_settings)) -> HTMLResponse:
    try:
        content = settings.index_html_path.read_text(encoding="utf-8")
    except OSError as exc:
        content = str(exc)
    return HTMLResponse(content)


@router.get("/favicon.ico", include_in_schema=False)
def favicon() -> Response:
    return Response(content=b"", media_type="image/x-icon")


@router.get("/robots.txt", response_class=PlainTextResponse, include_in_schema=False)
def robots() -> PlainTextResponse:
    return PlainTextResponse(ROBOTS_TXT)


@router.get("/stats")
def stats(service: ResolutionService = Depends(get_service)) -> Dict[str, Any]:
    return service.stats()


@router.get("/clean", response_class=PlainTextResponse)
async def clean(service: ResolutionService = Depends(get_service)) -> PlainTextResponse:
    cleaned = await asyncio.to_thread(service.clean)
    return PlainTextResponse(str(cleaned))


@router.api_route("/{target:path}", methods=["GET", "HEAD"], response_class=PlainTextResponse)
async def resolve(
    target: str, request: Request, service: ResolutionService = Depends(get_service)
) -> PlainTextResponse:
    # Use the raw request target so percent-encoding and the query string survive
    raw_path = request.scope.get("raw_path") or request.url.path.encode()
    url = raw_path.split(b"?", 1)[0].decode("latin-1")[1:]
    query = request.scope.get("query_string", b"").decode("latin-1")
    if query:
        url = f"{url}?{query}"

    outcome = await service.resolve(url)
    return PlainTextResponse(outcome.text, status_code=outcome.code)


__all__ = ["router", "get_service", "get_app_settings", "ROBOTS_TXT"]
