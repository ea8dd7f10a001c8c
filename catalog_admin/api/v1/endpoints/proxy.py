import json
import logging
from typing import Any, Dict, Optional

import httpx
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse, Response

from catalog_admin.dependencies import get_http_client

router = APIRouter(
    prefix="/proxy",
    tags=["Proxy"],
)
logger = logging.getLogger(__name__)

EMPTY_SUCCESS = {"success": True, "message": "Operation completed successfully"}


async def _read_body(request: Request) -> Optional[bytes]:
    """Тело запроса для POST/PUT. JSON пересобирается, остальное идет байтами как есть."""
    if request.method in ("GET", "HEAD", "DELETE"):
        return None

    content_type = request.headers.get("content-type", "")
    raw = await request.body()
    if "application/json" in content_type:
        # json.loads бросит ValueError на битом теле
        return json.dumps(json.loads(raw)).encode("utf-8")
    return raw or None


def _relay(response: httpx.Response) -> Response:
    """Переводит ответ бэкенда в ответ клиенту."""
    content_type = response.headers.get("content-type", "")

    if "application/json" in content_type:
        try:
            return JSONResponse(response.json(), status_code=response.status_code)
        except ValueError:
            if response.status_code in (200, 204):
                return JSONResponse(EMPTY_SUCCESS, status_code=status.HTTP_200_OK)
            return JSONResponse(
                {"success": False, "message": "Error processing API response"},
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

    content = response.content
    if response.status_code in (200, 204) and not content.strip():
        # Пустой успешный ответ: 204 с телом отдавать нельзя, поэтому 200
        return JSONResponse(EMPTY_SUCCESS, status_code=status.HTTP_200_OK)

    return Response(
        content=content,
        status_code=response.status_code,
        media_type=content_type or "text/plain",
    )


@router.api_route("/{path:path}", methods=["GET", "POST", "PUT", "DELETE"])
async def proxy_request(
    path: str,
    request: Request,
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """
    Проксирует запрос на внешний API (API_URL/<path>?<query>) вместе
    с заголовком Authorization клиента.
    """
    method = request.method
    headers: Dict[str, Any] = {"Content-Type": request.headers.get("content-type") or "application/json"}

    auth_header = request.headers.get("authorization")
    if auth_header:
        headers["Authorization"] = auth_header
    else:
        logger.warning(f"No auth header in proxied {method} /{path} - authentication may fail")

    try:
        body = await _read_body(request)
    except ValueError as e:
        logger.error(f"Error parsing request body: {e}")
        return JSONResponse(
            {"success": False, "message": "Invalid request body"},
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    logger.info(f"Proxying {method} request to: /{path}")
    try:
        response = await client.request(
            method,
            f"/{path}",
            params=list(request.query_params.multi_items()),
            headers=headers,
            content=body,
        )
    except httpx.HTTPError as e:
        logger.error(f"API proxy error ({method}): {e}")
        return JSONResponse(
            {"success": False, "message": f"Error: {e}"},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    logger.info(f"API response status: {response.status_code}")
    return _relay(response)
