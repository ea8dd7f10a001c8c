from pydantic import BaseModel, Field, field_validator
from typing import List, Optional

# --- Производные данные дерева категорий ---

class FlatCategory(BaseModel):
    """Категория из "расплющенного" дерева (одна строка на узел)."""
    # id и parentId - строки, так как значения выпадающих списков строковые
    id: str
    name: str
    parent_id: Optional[str] = Field(None, alias="parentId")
    level: int = Field(..., ge=0)
    has_children: bool = Field(False, alias="hasChildren")

    class Config:
        populate_by_name = True
        frozen = True


class LevelDescriptor(BaseModel):
    """Один уровень каскадного выбора (один выпадающий список)."""
    level: int = Field(..., ge=0)
    options: List[FlatCategory] = []
    selected_id: str = Field("", alias="selectedId")
    disabled: bool = False

    class Config:
        populate_by_name = True


class SelectionPath(BaseModel):
    """
    Выбранный путь категорий в формате формы товара:
    корень отдельно, подкатегории списком и "устаревшее" одиночное поле.
    """
    category_id: str = Field("", alias="categoryId")
    sub_category_path: List[str] = Field(default_factory=list, alias="subCategoryPath")
    sub_category_id: str = Field("", alias="subCategoryId")

    class Config:
        populate_by_name = True
        frozen = True

    @property
    def path(self) -> List[str]:
        """Полный путь от корня до листа."""
        if not self.category_id:
            return []
        return [self.category_id, *self.sub_category_path]


# --- Запросы/ответы API выбора категории ---

class LevelsRequest(BaseModel):
    path: List[str] = []
    categories: List[FlatCategory] = []
    loading: bool = False


class SelectionRequest(BaseModel):
    path: List[str] = []
    level_index: int = Field(..., ge=0, alias="levelIndex")
    value: str = ""
    categories: List[FlatCategory] = []

    class Config:
        populate_by_name = True


class SelectionResponse(BaseModel):
    selection: SelectionPath
    levels: List[LevelDescriptor]


class CategoryTreeState(BaseModel):
    """Снимок состояния выбора категории (то, что рисует форма)."""
    categories: List[FlatCategory] = []
    levels: List[LevelDescriptor] = []
    selection: SelectionPath = SelectionPath()
    loaded: bool = False
    error: Optional[str] = None


# --- Администрирование категорий ---

class CategoryBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    # Если указан родитель - это подкатегория
    parent_id: Optional[str] = Field(None, alias="parentId")
    description: Optional[str] = None
    status: bool = True

    class Config:
        populate_by_name = True

    @field_validator("parent_id", mode="before")
    @classmethod
    def check_parent_id(cls, value):
        # 0 и пустая строка - корневая категория, как и в дереве с бэкенда
        if value is None:
            return None
        value = str(value).strip()
        if not value:
            return None
        if not (value.isascii() and value.isdigit()):
            raise ValueError("parentId must be a numeric category id")
        return str(int(value)) if int(value) else None

class CategoryCreate(CategoryBase):
    pass

class CategoryUpdate(CategoryBase):
    pass


class CategoryRecord(BaseModel):
    """Категория или подкатегория после создания/изменения на бэкенде."""
    id: str
    name: str
    slug: str
    parent_id: Optional[str] = Field(None, alias="parentId")
    description: str = ""
    status: bool = True
    is_subcategory: bool = Field(False, alias="isSubcategory")

    class Config:
        populate_by_name = True
