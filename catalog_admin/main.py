import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# --- ИМПОРТЫ РОУТЕРОВ ---
from catalog_admin.api.v1.endpoints import categories
from catalog_admin.api.v1.endpoints import proxy
from catalog_admin.core.config import settings

# --- Настройка Логирования ---
logging.basicConfig(level=settings.LOG_LEVEL)

app = FastAPI(
    title="Catalog Admin Backend",
    version="1.0.0",
)

# Настройки CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Каскадный выбор и администрирование категорий
app.include_router(
    categories.router,
    prefix="/api/v1",
)

# Локальный прокси на внешний API: /api/proxy/<path>
app.include_router(
    proxy.router,
    prefix="/api",
)
