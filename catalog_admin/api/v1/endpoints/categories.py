import logging
from typing import List, Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException, status

from catalog_admin.core.category_tree import apply_selection, build_levels, selection_from_path
from catalog_admin.crud import category as crud_category
from catalog_admin.crud.category import CategoryApiError, MissingTokenError
from catalog_admin.dependencies import get_auth_token, get_http_client
from catalog_admin.schemas.category import (
    CategoryCreate,
    CategoryRecord,
    CategoryTreeState,
    CategoryUpdate,
    LevelDescriptor,
    LevelsRequest,
    SelectionRequest,
    SelectionResponse,
)
from catalog_admin.services.category_picker import CategoryPicker

router = APIRouter(
    prefix="/categories",
    tags=["Categories"],
)
logger = logging.getLogger(__name__)


def _raise_http(e: CategoryApiError) -> None:
    """Ошибка бэкенда -> HTTP-ответ для админ-операций."""
    if isinstance(e, MissingTokenError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=e.message)
    raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)


# --- Каскадный выбор категории (форма товара) ---

@router.get("/tree", response_model=CategoryTreeState)
async def read_category_tree(
    category_id: Optional[str] = None,
    sub_category_id: Optional[str] = None,
    client: httpx.AsyncClient = Depends(get_http_client),
    token: Optional[str] = Depends(get_auth_token),
):
    """
    Загружает дерево категорий и возвращает плоский список вместе с уровнями.
    Ошибка загрузки приходит в поле error, список при этом пустой.
    """
    picker = CategoryPicker()
    await picker.load(client, token)
    if category_id or sub_category_id:
        picker.restore(category_id, sub_category_id)
    return picker.snapshot()


@router.post("/levels", response_model=List[LevelDescriptor])
async def read_levels(request: LevelsRequest):
    """Уровни выпадающих списков для пути и уже загруженного списка категорий."""
    return build_levels(request.path, request.categories, loading=request.loading)


@router.post("/selection", response_model=SelectionResponse)
async def update_selection(request: SelectionRequest):
    """Применяет выбор на уровне level_index и возвращает новый путь и уровни."""
    new_path = apply_selection(request.path, request.level_index, request.value)
    return SelectionResponse(
        selection=selection_from_path(new_path),
        levels=build_levels(new_path, request.categories),
    )


# --- Администрирование категорий ---

@router.post("/", response_model=CategoryRecord, status_code=status.HTTP_201_CREATED)
async def create_category_endpoint(
    category: CategoryCreate,
    client: httpx.AsyncClient = Depends(get_http_client),
    token: Optional[str] = Depends(get_auth_token),
):
    """Создание категории или подкатегории (если указан parentId)."""
    try:
        return await crud_category.create_category(client, token, category)
    except CategoryApiError as e:
        _raise_http(e)


@router.put("/{category_id}", response_model=CategoryRecord)
async def update_category_endpoint(
    category_id: int,
    category: CategoryUpdate,
    client: httpx.AsyncClient = Depends(get_http_client),
    token: Optional[str] = Depends(get_auth_token),
):
    try:
        return await crud_category.update_category(client, token, str(category_id), category)
    except CategoryApiError as e:
        _raise_http(e)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category_endpoint(
    category_id: int,
    is_subcategory: bool = False,
    client: httpx.AsyncClient = Depends(get_http_client),
    token: Optional[str] = Depends(get_auth_token),
):
    try:
        await crud_category.delete_category(client, token, str(category_id), is_subcategory=is_subcategory)
    except CategoryApiError as e:
        _raise_http(e)
    return
