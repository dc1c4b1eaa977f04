from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from auth_api.config import Settings
from auth_api.database import close_db, connect_db, ensure_indexes, get_database, users_collection
from auth_api.error_handlers import register_exception_handlers, setup_logging
from auth_api.repositories import UserRepository
from auth_api.routes import users as users_routes
from auth_api.utils.email_service import EmailService

logger = logging.getLogger("auth_api.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect the credential store unless one was injected"""
    settings: Settings = app.state.settings

    logger.info(f"Auth API starting on {settings.API_HOST}:{settings.API_PORT}")
    if app.state.users is not None:
        logger.info("Using injected user repository - skipping MongoDB connection")
        yield
        logger.info("Auth API shutting down")
        return

    client = await connect_db(settings)
    try:
        database = get_database(client, settings)
        await ensure_indexes(database)
        app.state.users = UserRepository(users_collection(database))
        yield
    finally:
        logger.info("Auth API shutting down")
        # The repository is bound to this client; the next startup reconnects
        app.state.users = None
        await close_db(client)


def create_app(
    settings: Optional[Settings] = None,
    users: Optional[UserRepository] = None,
    mailer: Optional[EmailService] = None,
) -> FastAPI:
    """Build the API with explicit collaborators.

    Args:
        settings: configuration; read from the environment when omitted
        users: credential store; a MongoDB-backed one is connected at startup when omitted
        mailer: reset mail sender; an SMTP one is built from settings when omitted
    """
    settings = settings or Settings()
    setup_logging(settings.DEBUG)

    app = FastAPI(
        title="Auth API",
        description="Username/password registration, login and password reset",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.users = users
    app.state.mailer = mailer or EmailService(settings)

    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials="*" not in settings.CORS_ORIGINS,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    app.include_router(users_routes.router)

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    return app


def main():
    settings = Settings()
    uvicorn.run(
        "auth_api.main:create_app",
        factory=True,
        host=settings.API_HOST,
        port=settings.API_PORT,
    )


if __name__ == "__main__":
    main()
