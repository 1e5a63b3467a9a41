"""
Catch-all route: any method and path no other route matched.

Registered last by create_app(). The error goes through the central handler
like every other operational error.
"""

from fastapi import APIRouter, Request

from app.exceptions import NotFoundError

router = APIRouter(include_in_schema=False)

ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]


@router.api_route("/{full_path:path}", methods=ALL_METHODS)
async def route_not_found(request: Request, full_path: str) -> None:
    url = request.url.path
    if request.url.query:
        url = f"{url}?{request.url.query}"
    raise NotFoundError(resource="route", message=f"Can't find {url} on this server!")
