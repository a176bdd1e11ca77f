from contextlib import asynccontextmanager
from fastapi import FastAPI
from services.factory import get_service_factory
from services.resource_service import register as register_resource, router as resource_router
from core.config import get_settings
from core.logging import setup_logging

setup_logging()
settings = get_settings()
factory = get_service_factory()


@asynccontextmanager
async def lifespan(app: FastAPI):
    register_resource(factory, settings=settings)
    await factory.startup_all()
    try:
        yield
    finally:
        await factory.shutdown_all()


app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG, lifespan=lifespan)
app.include_router(resource_router, tags=["resource"])


@app.get("/")
def health():
    return factory.info_all()
