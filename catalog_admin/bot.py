import asyncio
import logging
from typing import Any, Dict, List

import httpx
from aiogram import Bot, Dispatcher, types, F, Router
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.fsm.state import State, StatesGroup
from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton

from catalog_admin.core.category_tree import category_label
from catalog_admin.core.config import settings
from catalog_admin.schemas.category import FlatCategory, LevelDescriptor
from catalog_admin.services.category_picker import CategoryPicker

# --- FSM States ---
class PickCategoryStates(StatesGroup):
    """Состояния каскадного выбора категории."""
    choosing = State()

router = Router()

CALLBACK_PREFIX = "cat"
CALLBACK_BACK = f"{CALLBACK_PREFIX}:back"
CALLBACK_DONE = f"{CALLBACK_PREFIX}:done"


def is_admin(user_id: int) -> bool:
    """Проверка, является ли пользователь администратором."""
    return settings.ADMIN_ID != 0 and user_id == settings.ADMIN_ID


def build_level_keyboard(levels: List[LevelDescriptor]) -> InlineKeyboardMarkup:
    """
    Клавиатура для самого глубокого уровня: по кнопке на вариант,
    выбранный вариант помечен галочкой. Внизу - "Назад" и "Готово".
    """
    rows: List[List[InlineKeyboardButton]] = []
    if levels:
        active = levels[-1]
        for option in active.options:
            text = f"✔️ {option.name}" if option.id == active.selected_id else option.name
            rows.append([InlineKeyboardButton(
                text=text,
                callback_data=f"{CALLBACK_PREFIX}:{active.level}:{option.id}",
            )])

    nav = []
    if levels and levels[0].selected_id:
        nav.append(InlineKeyboardButton(text="⬅️ Назад", callback_data=CALLBACK_BACK))
    nav.append(InlineKeyboardButton(text="✅ Готово", callback_data=CALLBACK_DONE))
    rows.append(nav)
    return InlineKeyboardMarkup(inline_keyboard=rows)


def format_selection_text(picker: CategoryPicker) -> str:
    """Текст сообщения над клавиатурой: текущий путь и подсказка."""
    levels = picker.levels
    label = category_label(picker.categories, picker.path) or "не выбрана"
    lines = [f"Категория: {label}"]

    if levels and levels[-1].disabled:
        lines.append("Подкатегорий нет." if picker.path else "Нет доступных категорий.")
    elif levels and not levels[-1].selected_id:
        lines.append(f"Выберите категорию уровня {levels[-1].level + 1}:")
    return "\n".join(lines)


def parse_callback(data: str) -> Dict[str, Any]:
    """"cat:<level>:<id>" -> {"action": "select", "level": int, "value": str}."""
    if data == CALLBACK_BACK:
        return {"action": "back"}
    if data == CALLBACK_DONE:
        return {"action": "done"}
    _, level, value = data.split(":", 2)
    return {"action": "select", "level": int(level), "value": value}


def step_back(picker: CategoryPicker) -> None:
    """Снимает выбор с самого глубокого выбранного уровня."""
    selected = [level for level in picker.levels if level.selected_id]
    if selected:
        picker.select(selected[-1].level, "")


def _picker_from_state(data: Dict[str, Any]) -> CategoryPicker:
    categories = [FlatCategory(**item) for item in data.get("categories", [])]
    return CategoryPicker(categories=categories, path=data.get("path", []))


# ----------------------------------------------------------------------
# --- Выбор категории (/category) ---
# ----------------------------------------------------------------------
@router.message(Command("category"))
async def cmd_pick_category(message: types.Message, state: FSMContext):
    if not is_admin(message.from_user.id):
        await message.answer("У вас нет прав администратора.")
        return

    await state.clear()
    picker = CategoryPicker()
    async with httpx.AsyncClient(base_url=settings.API_URL, timeout=settings.REQUEST_TIMEOUT) as client:
        await picker.load(client, settings.ADMIN_API_TOKEN)

    if picker.error:
        await message.answer(f"❌ Не удалось загрузить категории: {picker.error}")
        return

    await state.update_data(
        categories=[category.model_dump() for category in picker.categories],
        path=[],
    )
    await state.set_state(PickCategoryStates.choosing)
    await message.answer(format_selection_text(picker), reply_markup=build_level_keyboard(picker.levels))


@router.callback_query(PickCategoryStates.choosing, F.data.startswith(f"{CALLBACK_PREFIX}:"))
async def process_category_choice(callback_query: types.CallbackQuery, state: FSMContext):
    data = await state.get_data()
    picker = _picker_from_state(data)

    try:
        command = parse_callback(callback_query.data)
    except ValueError:
        logging.warning(f"Unknown callback data: {callback_query.data}")
        await callback_query.answer("Неизвестная команда")
        return

    if command["action"] == "done":
        selection = picker.selection
        await callback_query.answer()
        await callback_query.message.edit_text(
            f"✅ Выбрано: {category_label(picker.categories, picker.path) or 'ничего'}\n\n"
            f"categoryId: {selection.category_id or '-'}\n"
            f"subCategoryPath: {', '.join(selection.sub_category_path) or '-'}\n"
            f"subCategoryId: {selection.sub_category_id or '-'}"
        )
        await state.clear()
        return

    if command["action"] == "back":
        step_back(picker)
    else:
        picker.select(command["level"], command["value"])

    await state.update_data(path=picker.path)
    await callback_query.answer()
    await callback_query.message.edit_text(
        format_selection_text(picker),
        reply_markup=build_level_keyboard(picker.levels),
    )


@router.message(Command("cancel"))
async def cmd_cancel(message: types.Message, state: FSMContext):
    """Отмена текущей операции и сброс состояния FSM."""
    if await state.get_state() is None:
        await message.answer("Нет активных операций для отмены.")
        return
    await state.clear()
    await message.answer("Операция отменена.")


# --- Запуск Бота ---

async def main() -> None:
    """Инициализация и запуск бота."""
    if not settings.BOT_TOKEN:
        logging.error("BOT_TOKEN не найден. Завершение работы.")
        return

    if settings.ADMIN_ID == 0:
        logging.error("ADMIN_ID не задан в .env. Завершение работы.")
        return

    bot = Bot(token=settings.BOT_TOKEN)
    dp = Dispatcher()
    dp.include_router(router)

    logging.info("Бот запущен. Ожидание команд в Telegram...")
    await dp.start_polling(bot)


def run() -> None:
    logging.basicConfig(level=settings.LOG_LEVEL)
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logging.info("Бот остановлен пользователем.")


if __name__ == '__main__':
    run()
