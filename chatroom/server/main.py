"""FastAPI application entrypoint for the chat server."""
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from strawberry.fastapi import GraphQLRouter

from . import config
from .context import build_context_getter
from .database import build_engine, build_session_factory, init_db
from .events import EventBus
from .logging_config import configure_logging
from .schema import schema

logger = configure_logging()


def create_app(
    database_url: Optional[str] = None,
    bus: Optional[EventBus] = None,
    graphql_path: Optional[str] = None,
) -> FastAPI:
    """Build the application with its own engine, session factory and event bus."""
    engine = build_engine(database_url or config.DATABASE_URL)
    init_db(engine)
    session_factory = build_session_factory(engine)
    bus = bus or EventBus()

    app = FastAPI(title="Chatroom Server", version="1.0.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    graphql_app = GraphQLRouter(schema, context_getter=build_context_getter(session_factory, bus))
    app.include_router(graphql_app, prefix=graphql_path or config.GRAPHQL_PATH)

    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.bus = bus

    @app.get("/")
    def root():
        return {"status": "ok"}

    logger.info("APP_CREATED graphql_path=%s", graphql_path or config.GRAPHQL_PATH)
    return app


def run() -> None:
    logger.info("SERVER_START host=%s port=%s", config.HOST, config.PORT)
    uvicorn.run(create_app(), host=config.HOST, port=config.PORT, reload=False)


if __name__ == "__main__":
    run()
