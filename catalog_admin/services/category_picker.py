import logging
from typing import List, Optional, Sequence

import httpx

from catalog_admin.core.category_tree import (
    apply_selection,
    build_levels,
    flatten_categories,
    path_to_category,
    selection_from_path,
)
from catalog_admin.crud.category import CategoryApiError, get_category_tree
from catalog_admin.schemas.category import (
    CategoryTreeState,
    FlatCategory,
    LevelDescriptor,
    SelectionPath,
)

logger = logging.getLogger(__name__)


class CategoryPicker:
    """
    Состояние каскадного выбора категории для одной формы.

    Список категорий заменяется целиком при каждой загрузке, путь - при
    каждом выборе. Уровни не хранятся: они пересчитываются из этих двух
    полей при каждом обращении.
    """

    def __init__(self, categories: Optional[Sequence[FlatCategory]] = None, path: Optional[Sequence[str]] = None):
        self.categories: List[FlatCategory] = list(categories or [])
        self.path: List[str] = list(path or [])
        self.loading = False
        self.loaded = categories is not None
        self.error: Optional[str] = None

    async def load(self, client: httpx.AsyncClient, token: Optional[str], tree_path: Optional[str] = None) -> None:
        """
        Загружает дерево с бэкенда. Ошибки не пробрасываются: сообщение
        сохраняется в self.error, а список очищается.
        """
        self.loading = True
        self.error = None
        try:
            nodes = await get_category_tree(client, token, tree_path)
            self.categories = flatten_categories(nodes)
        except CategoryApiError as e:
            logger.error(f"Error fetching categories: {e.message}")
            self.error = e.message
            self.categories = []
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            # success=true, но узлы дерева не того вида
            logger.error(f"Malformed category node in API response: {e!r}")
            self.error = "Unexpected API response shape for category tree"
            self.categories = []
        finally:
            self.loading = False
            self.loaded = True

    @property
    def levels(self) -> List[LevelDescriptor]:
        return build_levels(self.path, self.categories, loading=self.loading or not self.loaded)

    @property
    def selection(self) -> SelectionPath:
        return selection_from_path(self.path)

    def select(self, level_index: int, value: str) -> SelectionPath:
        """Обрабатывает выбор в выпадающем списке level_index."""
        self.path = apply_selection(self.path, level_index, value)
        return self.selection

    def set_category_path(self, path: Sequence[str]) -> SelectionPath:
        self.path = list(path)
        return self.selection

    def restore(self, category_id: Optional[str], sub_category_id: Optional[str] = None) -> SelectionPath:
        """
        Восстанавливает путь по сохраненным в товаре полям. Если известен
        id подкатегории - путь строится от него, иначе только корень.
        """
        path = path_to_category(self.categories, sub_category_id) if sub_category_id else []
        if category_id and (not path or path[0] != category_id):
            path = path_to_category(self.categories, category_id)
        self.path = path
        return self.selection

    def snapshot(self) -> CategoryTreeState:
        return CategoryTreeState(
            categories=self.categories,
            levels=self.levels,
            selection=self.selection,
            loaded=self.loaded,
            error=self.error,
        )
