from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from proctorview.api.v1 import interviews, profiles, reports, room, sessions
from proctorview.core.config import settings
from proctorview.core.context import AppContext, build_default_context
from proctorview.core.logging import setup_logging


def create_app(context: Optional[AppContext] = None) -> FastAPI:
    setup_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "context", None) is None:
            app.state.context = build_default_context(settings)
        yield
        for live_room in list(app.state.context.rooms.values()):
            await live_room.dispose()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Backend for AI-proctored voice interviews",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.context = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check
    @app.get("/health", tags=["Health"])
    async def health_check():
        return {"status": "ok"}

    # API Routers
    app.include_router(profiles.router, prefix=settings.API_V1_PREFIX, tags=["Profiles"])
    app.include_router(interviews.router, prefix=settings.API_V1_PREFIX, tags=["Interviews"])
    app.include_router(sessions.router, prefix=settings.API_V1_PREFIX, tags=["Sessions"])
    app.include_router(reports.router, prefix=settings.API_V1_PREFIX, tags=["Reports"])
    app.include_router(room.router, prefix=settings.API_V1_PREFIX, tags=["Room"])

    return app


app = create_app()
