from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

Base = declarative_base()


class Database:
    """Owns the async engine and session factory for one application instance.

    Constructed explicitly by ``create_app()`` and stored on ``app.state``;
    opened at startup, disposed at shutdown.
    """

    def __init__(self, url: str, echo: bool = False):
        engine_kwargs = {"echo": echo}
        if url.startswith("sqlite"):
            # In-memory SQLite only survives on a single shared connection
            engine_kwargs["poolclass"] = StaticPool
            engine_kwargs["connect_args"] = {"check_same_thread": False}

        self.url = url
        self.engine = create_async_engine(url, **engine_kwargs)
        self.sessionmaker = async_sessionmaker(self.engine, expire_on_commit=False)

    async def create_all(self) -> None:
        # Import models so they register with Base
        from services.auth_service import models as auth_models  # noqa: F401
        from services.cart_service import models as cart_models  # noqa: F401
        from services.order_service import models as order_models  # noqa: F401
        from services.product_service import models as product_models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


async def get_db(request: Request):
    database: Database = request.app.state.db
    async with database.sessionmaker() as session:
        yield session


__all__ = ["AsyncSession", "Base", "Database", "get_db"]
