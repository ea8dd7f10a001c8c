import logging
from typing import Any, Dict, List, Optional

import httpx

from catalog_admin.core.config import settings
from catalog_admin.core.category_tree import slugify
from catalog_admin.schemas.category import CategoryCreate, CategoryRecord, CategoryUpdate

logger = logging.getLogger(__name__)

MISSING_TOKEN_MESSAGE = "Authentication token is missing. Please log in again."


class CategoryApiError(Exception):
    """Ошибка обращения к сервису категорий на бэкенде."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class MissingTokenError(CategoryApiError):
    """Токен авторизации не передан - до сети дело не доходит."""

    def __init__(self):
        super().__init__(MISSING_TOKEN_MESSAGE, status_code=401)


def _auth_headers(token: Optional[str]) -> Dict[str, str]:
    if not token:
        raise MissingTokenError()
    return {
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json",
    }


async def _send(client: httpx.AsyncClient, method: str, url: str, token: Optional[str], **kwargs: Any) -> Dict[str, Any]:
    """
    Выполняет запрос к бэкенду и возвращает JSON-конверт
    {success, message, data}. Любая неудача превращается в CategoryApiError.
    """
    headers = _auth_headers(token)

    try:
        response = await client.request(method, url, headers=headers, **kwargs)
    except httpx.RequestError as e:
        logger.error(f"API connection error ({method} {url}): {e}")
        raise CategoryApiError(f"Could not reach the category service: {e}") from e

    if not response.is_success:
        # Бэкенд обычно кладет причину в message, но не всегда отдает JSON
        try:
            message = response.json().get("message")
        except (ValueError, AttributeError):
            message = None
        logger.error(f"Category API returned {response.status_code} for {method} {url}")
        raise CategoryApiError(message or f"Error: {response.status_code}", status_code=response.status_code)

    try:
        envelope = response.json()
    except ValueError as e:
        raise CategoryApiError("Malformed JSON in category service response") from e

    if not isinstance(envelope, dict):
        raise CategoryApiError("Unexpected API response shape for categories")
    return envelope


# ----------------------------------------------------------------------
# --- Дерево категорий ---
# ----------------------------------------------------------------------

async def get_category_tree(
    client: httpx.AsyncClient,
    token: Optional[str],
    path: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Получить дерево категорий (список корневых CategoryNode с вложенными children).

    Принимает оба варианта ответа: data.result = [...] и data = [...].
    Пустой успешный ответ - не ошибка.
    """
    url = path or settings.CATEGORY_TREE_PATH
    envelope = await _send(client, "GET", url, token)

    if not envelope.get("success"):
        raise CategoryApiError(envelope.get("message") or "Failed to fetch categories")

    data = envelope.get("data")
    if isinstance(data, dict) and isinstance(data.get("result"), list):
        nodes = data["result"]
    elif isinstance(data, list):
        nodes = data
    else:
        raise CategoryApiError("Unexpected API response shape for category tree")

    logger.info(f"Fetched category tree: {len(nodes)} root categories")
    return nodes


# ----------------------------------------------------------------------
# --- Администрирование (категории и подкатегории) ---
# ----------------------------------------------------------------------

def _build_payload(category: CategoryCreate, actor_field: str, record_id: Optional[str] = None) -> Dict[str, Any]:
    if category.parent_id:
        payload: Dict[str, Any] = {
            "subCategoryId": int(record_id) if record_id else 0,
            "subCategoryName": category.name,
            "categoryId": int(category.parent_id),
        }
    else:
        payload = {"categoryName": category.name}
        if record_id:
            payload["categoryId"] = int(record_id)

    payload["status"] = category.status
    payload[actor_field] = settings.ACTING_USER_ID

    # Описание отправляем только если оно не пустое
    if category.description and category.description.strip():
        payload["description"] = category.description
    return payload


def _to_record(category: CategoryCreate, record_id: str) -> CategoryRecord:
    return CategoryRecord(
        id=record_id,
        name=category.name,
        slug=slugify(category.name),
        parent_id=category.parent_id or None,
        description=category.description or "",
        status=category.status,
        is_subcategory=bool(category.parent_id),
    )


async def create_category(client: httpx.AsyncClient, token: Optional[str], category: CategoryCreate) -> CategoryRecord:
    """Создать категорию (или подкатегорию, если указан parent_id)."""
    is_subcategory = bool(category.parent_id)
    entity = "subcategory" if is_subcategory else "category"
    payload = _build_payload(category, "createdBy")

    envelope = await _send(client, "POST", f"/api/v1/{entity}", token, json=payload)
    if not envelope.get("success"):
        raise CategoryApiError(envelope.get("message") or f"Failed to create {entity}")

    data = envelope.get("data") or {}
    # Подкатегория возвращает id, категория - categoryId
    raw_id = data.get("id") if is_subcategory else data.get("categoryId")
    if raw_id is None:
        raise CategoryApiError(f"Unexpected API response shape for created {entity}")

    logger.info(f"Created {entity} '{category.name}' (ID: {raw_id})")
    return _to_record(category, str(raw_id))


async def update_category(
    client: httpx.AsyncClient,
    token: Optional[str],
    category_id: str,
    category: CategoryUpdate,
) -> CategoryRecord:
    """Изменить категорию или подкатегорию."""
    entity = "subcategory" if category.parent_id else "category"
    payload = _build_payload(category, "modifiedBy", record_id=category_id)

    envelope = await _send(client, "PUT", f"/api/v1/{entity}/{category_id}", token, json=payload)
    if not envelope.get("success"):
        raise CategoryApiError(envelope.get("message") or f"Failed to update {entity}")

    logger.info(f"Updated {entity} {category_id}")
    return _to_record(category, str(category_id))


async def delete_category(
    client: httpx.AsyncClient,
    token: Optional[str],
    category_id: str,
    is_subcategory: bool = False,
) -> bool:
    """Удалить категорию или подкатегорию по ID."""
    entity = "subcategory" if is_subcategory else "category"

    envelope = await _send(client, "DELETE", f"/api/v1/{entity}/{category_id}", token)
    if not envelope.get("success"):
        raise CategoryApiError(envelope.get("message") or f"Failed to delete {entity}")

    logger.info(f"Deleted {entity} {category_id}")
    return True
