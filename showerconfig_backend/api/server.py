# api/server.py
import os
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from showerconfig_backend.database import Base, engine
from showerconfig_backend.render.image_compat import IMAGE_CACHE_DIR
from showerconfig_backend.routes.catalog_routes import router as catalog_router
from showerconfig_backend.routes.design_routes import router as design_router
from showerconfig_backend.routes.template_routes import router as template_router
from showerconfig_backend.routes.upload_routes import router as upload_router
from showerconfig_backend.storage import storage_local
from showerconfig_backend.storage.factory import STORAGE_BACKEND

logger = logging.getLogger(__name__)

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

SERVICE_NAME = "showerconfig-backend"
SERVICE_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.info("🚀 Iniciando backend do configurador de box")
    os.makedirs(IMAGE_CACHE_DIR, exist_ok=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logging.info("✅ Tabelas do catálogo prontas")
    yield
    await engine.dispose()
    logging.info("🛑 Backend finalizado")


app = FastAPI(title="Shower Configurator Backend", lifespan=lifespan)

# CORS_ORIGINS=https://configurador.example.com,http://localhost:3000
raw_origins = os.getenv("CORS_ORIGINS", "")
origins = [o.strip() for o in raw_origins.split(",") if o.strip()]

if not origins:
    logger.warning(
        "CORS_ORIGINS está vazio; nenhuma origem estará autorizada para CORS."
    )

logger.info("CORS allowed origins: %s", origins)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(catalog_router)
app.include_router(design_router)
app.include_router(template_router)
app.include_router(upload_router)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(_: Request, exc: StarletteHTTPException):
    if isinstance(exc.detail, dict) and "status" in exc.detail:
        content = exc.detail
    elif exc.status_code == 404:
        content = {"status": "error", "data": None, "error": "recurso não encontrado"}
    else:
        content = {"status": "error", "data": None, "error": str(exc.detail)}
    return JSONResponse(status_code=exc.status_code, content=content)


@app.get("/api/health")
def health():
    return {"status": "ok", "service": SERVICE_NAME, "version": SERVICE_VERSION, "storage": STORAGE_BACKEND}


if STORAGE_BACKEND == "local":
    os.makedirs(storage_local.STORAGE_ROOT, exist_ok=True)
    app.mount(storage_local.LOCAL_PUBLIC_URL, StaticFiles(directory=storage_local.STORAGE_ROOT), name="storage")
