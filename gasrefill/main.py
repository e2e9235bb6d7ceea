from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from gasrefill.api import api_router
from gasrefill.core.config import settings
from gasrefill.core.logging_config import configure_logging
from gasrefill.db.base import Base, import_models
from gasrefill.db.session import engine


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    import_models()
    Base.metadata.create_all(bind=engine)
    yield


def create_app() -> FastAPI:
    app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(api_router, prefix=settings.API_V1_STR)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
