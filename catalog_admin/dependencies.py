from typing import AsyncIterator, Optional

import httpx
from fastapi import Security
from fastapi.security import APIKeyHeader

from catalog_admin.core.config import settings

auth_header = APIKeyHeader(name="Authorization", auto_error=False)


async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    """Зависимость для получения HTTP-клиента к бэкенду."""
    client = httpx.AsyncClient(base_url=settings.API_URL, timeout=settings.REQUEST_TIMEOUT)
    try:
        yield client
    finally:
        await client.aclose()


async def get_auth_token(authorization: Optional[str] = Security(auth_header)) -> Optional[str]:
    """
    Достает токен из заголовка "Authorization: Bearer <token>".
    Другие схемы (Basic и т.п.) и голый токен считаются отсутствием токена.
    """
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None
