from typing import List

from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    """Настройки админ-панели каталога."""
    # Базовый адрес внешнего REST API (бэкенд магазина)
    API_URL: str = "https://api.tratechbd.com"
    CATEGORY_TREE_PATH: str = "/api/v1/category/tree"
    REQUEST_TIMEOUT: float = 10.0

    # ID пользователя, от имени которого создаются/изменяются категории
    ACTING_USER_ID: int = 3

    # Telegram-бот оператора
    BOT_TOKEN: str = ""
    ADMIN_ID: int = 0
    ADMIN_API_TOKEN: str = ""

    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = [
        "http://127.0.0.1:3000",
        "http://localhost:3000",
    ]

    class Config:
        env_file = ".env"
        env_file_encoding = 'utf-8'
        case_sensitive = True

settings = Settings()
