"""
Каскадный выбор категорий: дерево с бэкенда -> плоский список ->
уровни выпадающих списков -> согласованный путь выбора.

Все функции чистые: ничего не запрашивают по сети и не меняют аргументы.
"""
import re
from typing import Any, Dict, List, Optional, Sequence

from catalog_admin.schemas.category import FlatCategory, LevelDescriptor, SelectionPath


def _normalize_parent_id(raw_parent_id: Any) -> Optional[str]:
    """parentId == 0 (или отсутствует) означает корневую категорию."""
    if raw_parent_id in (None, 0, "0", ""):
        return None
    return str(raw_parent_id)


def flatten_categories(
    nodes: Sequence[Dict[str, Any]],
    level: int = 0,
    parent_id: Optional[str] = None,
) -> List[FlatCategory]:
    """
    Рекурсивно "расплющивает" дерево категорий в плоский список (pre-order).

    Родитель всегда идет перед своими потомками, порядок соседей сохраняется.
    parent_id аргумента нужен только для рекурсии: в результат попадает
    parentId, объявленный самим узлом.
    """
    flat: List[FlatCategory] = []
    for node in nodes:
        children = node.get("children")
        has_children = isinstance(children, list) and len(children) > 0

        flat.append(FlatCategory(
            id=str(node["categoryId"]),
            name=node["categoryName"],
            parent_id=_normalize_parent_id(node.get("parentId")),
            level=level,
            has_children=has_children,
        ))

        if has_children:
            flat.extend(flatten_categories(children, level + 1, str(node["categoryId"])))

    return flat


def _children_of(categories: Sequence[FlatCategory], category_id: Optional[str]) -> List[FlatCategory]:
    return [cat for cat in categories if cat.parent_id == category_id]


def build_levels(
    path: Sequence[str],
    categories: Sequence[FlatCategory],
    loading: bool = False,
) -> List[LevelDescriptor]:
    """
    Строит список уровней (выпадающих списков) для текущего пути выбора.

    Уровень 0 - корневые категории. Каждый следующий уровень - дети
    выбранной категории предыдущего уровня. Обход пути останавливается на
    первой категории без детей в списке; если у нее has_children=True,
    добавляется один пустой уровень, чтобы форма могла предложить
    следующий шаг.
    """
    if not categories:
        if loading:
            return []
        # Загрузка завершилась ничем: показываем пустой (заблокированный) список
        return [LevelDescriptor(level=0, options=[], selected_id="", disabled=True)]

    roots = _children_of(categories, None)
    root_ids = {cat.id for cat in roots}
    selected_root = path[0] if path and path[0] in root_ids else ""

    levels = [LevelDescriptor(
        level=0,
        options=roots,
        selected_id=selected_root,
        disabled=not roots,
    )]

    by_id = {cat.id: cat for cat in categories}
    current = selected_root
    i = 0
    while current:
        children = _children_of(categories, current)
        if not children:
            # Дети еще не загружены, а бэкенд говорит, что они есть
            node = by_id.get(current)
            if node is not None and node.has_children:
                levels.append(LevelDescriptor(
                    level=len(levels),
                    options=[],
                    selected_id="",
                    disabled=True,
                ))
            break

        next_id = path[i + 1] if i + 1 < len(path) else ""
        if next_id and next_id not in {cat.id for cat in children}:
            # Путь не согласован с деревом - дальше не идем
            next_id = ""

        levels.append(LevelDescriptor(
            level=len(levels),
            options=children,
            selected_id=next_id,
            disabled=False,
        ))
        current = next_id
        i += 1

    return levels


def apply_selection(path: Sequence[str], level_index: int, value: str) -> List[str]:
    """
    Возвращает новый путь после выбора value на уровне level_index.

    Смена корня сбрасывает весь подпуть. Выбор на уровне N обрезает всё,
    что ниже; пустое значение убирает и сам уровень N.
    """
    if level_index < 0:
        return list(path)

    if level_index == 0:
        return [value] if value else []

    if not path:
        return []

    root, sub_path = path[0], list(path[1:])
    # Уровни 1..N соответствуют индексам 0..N-1 в subCategoryPath
    path_index = level_index - 1
    if path_index > len(sub_path):
        # Выбор на уровне, до которого путь еще не дошел
        return list(path)

    if value:
        sub_path[path_index:] = [value]
    else:
        del sub_path[path_index:]

    return [root, *sub_path]


def legacy_sub_category_id(path: Sequence[str]) -> str:
    """
    Одиночный id самой глубокой выбранной подкатегории для бэкендов,
    которые не принимают путь. Корень сам себе подкатегорией не считается.
    """
    deepest = next((item for item in reversed(path) if item), "")
    if len(path) <= 1 or deepest == path[0]:
        return ""
    return deepest


def selection_from_path(path: Sequence[str]) -> SelectionPath:
    """Раскладывает путь по полям формы товара."""
    if not path:
        return SelectionPath()
    return SelectionPath(
        category_id=path[0],
        sub_category_path=list(path[1:]),
        sub_category_id=legacy_sub_category_id(path),
    )


def path_to_category(categories: Sequence[FlatCategory], category_id: Optional[str]) -> List[str]:
    """
    Восстанавливает путь от корня до category_id по ссылкам parent_id
    (например, при редактировании товара, у которого сохранен только id).
    """
    if not category_id:
        return []

    by_id = {cat.id: cat for cat in categories}
    path: List[str] = []
    seen = set()
    current: Optional[str] = category_id

    while current is not None:
        if current in seen:
            break
        seen.add(current)

        node = by_id.get(current)
        if node is None:
            # Неизвестный id посреди цепочки - путь не восстановить
            return []

        path.insert(0, node.id)
        current = node.parent_id

    return path


def category_label(categories: Sequence[FlatCategory], path: Sequence[str], sep: str = " / ") -> str:
    """Читаемое имя пути: "Электроника / Ноутбуки / Игровые"."""
    names = {cat.id: cat.name for cat in categories}
    return sep.join(names.get(item, f"[{item}]") for item in path if item)


def slugify(name: str) -> str:
    return re.sub(r"\s+", "-", name.strip().lower())
