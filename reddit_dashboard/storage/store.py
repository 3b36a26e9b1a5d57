"""
Relational store for normalized Reddit records.

Writes are single ``INSERT ... ON CONFLICT (id) DO UPDATE`` statements, so a
batch either lands completely or not at all and re-storing a record
overwrites its row. Each operation runs on its own connection and
transaction, which lets the service issue two upserts concurrently.
"""

from typing import Any, Dict, List, Optional, Sequence

import structlog
from sqlalchemy import Table, desc, distinct, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from reddit_dashboard.reddit.exceptions import StorageError
from reddit_dashboard.storage.tables import metadata, reddit_comments, reddit_posts, subreddits
from reddit_dashboard.utils.logger import component_logger

Row = Dict[str, Any]

_UPSERT_BUILDERS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class RedditStore:
    """
    Upsert and paginated reads over the posts, comments and subreddits tables.

    Rows are plain dicts whose ``metadata`` value is already a JSON string;
    serialization of the bag is the caller's concern.

    Example:
        >>> store = RedditStore.from_url("sqlite+aiosqlite:///./reddit_dashboard.db")
        >>> await store.create_all()
        >>> await store.upsert_posts([row])
        >>> rows = await store.select_posts(subreddit="python", limit=25, offset=0)
    """

    def __init__(self, engine: AsyncEngine, logger: Optional[structlog.BoundLogger] = None) -> None:
        self.engine = engine
        self.logger = component_logger(logger, __name__)

        insert_builder = _UPSERT_BUILDERS.get(engine.dialect.name)
        if insert_builder is None:
            raise StorageError(f"Unsupported database dialect: {engine.dialect.name}")
        self._insert = insert_builder

    @classmethod
    def from_url(
        cls,
        database_url: str,
        echo: bool = False,
        logger: Optional[structlog.BoundLogger] = None,
    ) -> "RedditStore":
        """Create a store with its own async engine."""
        engine = create_async_engine(database_url, echo=echo, pool_pre_ping=True)
        return cls(engine, logger=logger)

    async def create_all(self) -> None:
        """Create missing tables."""
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(metadata.create_all)
        except SQLAlchemyError as e:
            self.logger.error("store_create_tables_failed", error=str(e))
            raise StorageError(f"Failed to create tables: {e}") from e

        self.logger.info("store_tables_ready", tables=sorted(metadata.tables))

    async def upsert_posts(self, rows: Sequence[Row]) -> int:
        return await self._upsert(reddit_posts, rows)

    async def upsert_comments(self, rows: Sequence[Row]) -> int:
        return await self._upsert(reddit_comments, rows)

    async def upsert_subreddits(self, rows: Sequence[Row]) -> int:
        return await self._upsert(subreddits, rows)

    async def _upsert(self, table: Table, rows: Sequence[Row]) -> int:
        """
        Insert ``rows`` or overwrite existing rows with the same id.

        A row repeated within the batch is written once, with its last
        occurrence winning; PostgreSQL refuses to update one row twice in a
        single ON CONFLICT statement.

        Returns:
            Number of distinct rows written

        Raises:
            StorageError: If the statement fails; no row of the batch is kept
        """
        if not rows:
            return 0

        rows = list({row["id"]: row for row in rows}.values())
        stmt = self._insert(table).values(rows)
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.id],
            set_={
                **{
                    column.name: stmt.excluded[column.name]
                    for column in table.columns
                    if column.name not in ("id", "updated_at")
                },
                "updated_at": func.current_timestamp(),
            },
        )

        try:
            async with self.engine.begin() as conn:
                await conn.execute(stmt)
        except SQLAlchemyError as e:
            self.logger.error(
                "store_upsert_failed",
                table=table.name,
                row_count=len(rows),
                ids=[row.get("id") for row in rows],
                error=str(e),
            )
            raise StorageError(f"Failed to upsert into {table.name}: {e}") from e

        self.logger.debug("store_upsert", table=table.name, row_count=len(rows))
        return len(rows)

    async def select_posts(
        self,
        subreddit: Optional[str] = None,
        limit: int = 25,
        offset: int = 0,
    ) -> List[Row]:
        """Posts newest first, optionally filtered by subreddit."""
        query = select(reddit_posts)
        if subreddit:
            query = query.where(reddit_posts.c.subreddit == subreddit)
        query = (
            query.order_by(desc(reddit_posts.c.created_at), reddit_posts.c.id)
            .limit(limit)
            .offset(offset)
        )
        return await self._fetch_all(query, table=reddit_posts.name, subreddit=subreddit)

    async def select_comments(self, post_id: str, limit: int = 100, offset: int = 0) -> List[Row]:
        """Comments of one post, highest score first."""
        query = (
            select(reddit_comments)
            .where(reddit_comments.c.post_id == post_id)
            .order_by(desc(reddit_comments.c.score), reddit_comments.c.id)
            .limit(limit)
            .offset(offset)
        )
        return await self._fetch_all(query, table=reddit_comments.name, post_id=post_id)

    async def counts(self) -> Dict[str, int]:
        """Row totals used for dashboard statistics."""
        query = select(
            select(func.count()).select_from(reddit_posts).scalar_subquery().label("posts"),
            select(func.count()).select_from(reddit_comments).scalar_subquery().label("comments"),
            select(func.count(distinct(reddit_posts.c.subreddit)))
            .scalar_subquery()
            .label("active_subreddits"),
            select(func.count(distinct(reddit_comments.c.post_id)))
            .where(reddit_comments.c.post_id.in_(select(reddit_posts.c.id)))
            .scalar_subquery()
            .label("commented_posts"),
        )
        rows = await self._fetch_all(query, table="*")
        return {key: int(value or 0) for key, value in rows[0].items()}

    async def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(select(1))
            return True
        except SQLAlchemyError as e:
            self.logger.warning("store_ping_failed", error=str(e))
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()

    async def _fetch_all(self, query: Any, **context: Any) -> List[Row]:
        try:
            async with self.engine.connect() as conn:
                result = await conn.execute(query)
                return [dict(row._mapping) for row in result]
        except SQLAlchemyError as e:
            self.logger.error("store_read_failed", error=str(e), **context)
            raise StorageError(f"Failed to read from store: {e}") from e
