import argparse
import asyncio

from sqlalchemy import inspect, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app import models  # noqa: F401
from app.config import settings
from app.models.base import Base
from app.utils.logger import setup_logger

logger = setup_logger("db")


def _engine_kwargs() -> dict:
    if settings.is_sqlite:
        # aiosqlite connections are bound to the loop that opened them
        return {"poolclass": NullPool, "echo": False}
    return {
        "pool_pre_ping": True,
        "pool_size": 20,
        "max_overflow": 30,
        "pool_timeout": 60,
        "pool_recycle": 300,
        "echo": False,
        "connect_args": {"timeout": 30},
    }


logger.debug(f"Application DB URL: {settings.app_database_url}")
app_engine = create_async_engine(settings.app_database_url, **_engine_kwargs())

AppAsyncSessionLocal = async_sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=app_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# --- Function to create tables (for Application DB) ---
async def init_db():
    if not Base.metadata.tables:
        logger.warning("Base.metadata.tables is EMPTY! No tables will be created.")
    else:
        logger.debug(
            f"Tables registered in Base.metadata: {list(Base.metadata.tables.keys())}"
        )

    async with app_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Database schema initialized.")


async def reset_db():
    logger.warning(
        "Attempting to reset the Application database. THIS IS A DESTRUCTIVE OPERATION."
    )
    async with app_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        logger.info("All application tables dropped.")
    await init_db()
    logger.info("Application database has been reset and re-initialized.")


async def close_db():
    """Closes database connections."""
    logger.info("Closing database connections.")
    await app_engine.dispose()
    logger.info("Database connections closed.")


async def list_tables() -> list[str]:
    """Lists the tables that currently exist in the application database."""
    async with app_engine.connect() as conn:
        table_names = await conn.run_sync(
            lambda sync_conn: inspect(sync_conn).get_table_names()
        )

    if table_names:
        logger.info(f"Tables in application database: {table_names}")
    else:
        logger.info("No tables found in application database.")
    return table_names


async def check_db_connection(engine_to_check=None, db_name="Application DB"):
    """Performs a simple query to check actual DB connectivity."""
    if engine_to_check is None:
        engine_to_check = app_engine

    session_maker = async_sessionmaker(
        bind=engine_to_check,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )
    async with session_maker() as session:
        try:
            result = await session.execute(text("SELECT 1"))
            if result.scalar_one() == 1:
                logger.info(
                    f"Successfully connected to {db_name} and executed a test query."
                )
                return True
            logger.error(f"Test query to {db_name} did not return 1.")
            raise RuntimeError(f"Test query to {db_name} returned an unexpected result.")
        except Exception as e:
            logger.error(
                f"Failed to execute test query on {db_name}: {e}", exc_info=True
            )
            raise RuntimeError(
                f"Database connectivity check failed for {db_name}."
            ) from e


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="TaskFlow Application Database Initialization Utility"
    )
    parser.add_argument(
        "action",
        choices=["init", "reset", "list-tables"],
        help="'init' to create missing tables, "
        "'reset' to drop and recreate every table, "
        "'list-tables' to show the tables that exist.",
    )
    args = parser.parse_args()

    if args.action == "init":
        asyncio.run(init_db())
    elif args.action == "reset":
        confirm = input(
            "WARNING: This will delete all TaskFlow data. Are you sure? (yes/no): "
        )
        if confirm.lower() == "yes":
            asyncio.run(reset_db())
        else:
            logger.info("Application Database reset cancelled by user.")
    elif args.action == "list-tables":
        asyncio.run(list_tables())
    logger.info("Application Database utility script finished.")
