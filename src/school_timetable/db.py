"""
PostgreSQL storage for classes and lessons via asyncpg.
"""

from contextlib import asynccontextmanager
from typing import Optional, Protocol

import asyncpg
import structlog

from .config import get_config
from .errors import PersistenceError
from .models import Lesson

logger = structlog.get_logger()

SCHEMA = """
CREATE TABLE IF NOT EXISTS school_class (
    id SERIAL PRIMARY KEY,
    name TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS lesson (
    id SERIAL PRIMARY KEY,
    class_id INTEGER NOT NULL REFERENCES school_class(id) ON DELETE CASCADE,
    day SMALLINT NOT NULL CHECK (day BETWEEN 0 AND 4),
    start_time TEXT NOT NULL,
    end_time TEXT NOT NULL DEFAULT '',
    subject TEXT NOT NULL,
    teacher TEXT NOT NULL,
    room TEXT NOT NULL DEFAULT ''
);
"""


class LessonStore(Protocol):
    """What the seeder needs from a storage backend."""

    async def delete_all_lessons(self) -> None: ...

    async def delete_all_classes(self) -> None: ...

    async def create_class(self, name: str) -> int: ...

    async def create_lesson(self, class_id: int, lesson: Lesson) -> int: ...

    async def save_class_schedule(self, name: str, lessons: list[Lesson]) -> int: ...


class Database:
    """Class and lesson tables."""

    def __init__(self, connection_string: str):
        """
        Args:
            connection_string: PostgreSQL DSN
        """
        self.connection_string = connection_string
        self.pool: Optional[asyncpg.Pool] = None

    async def connect(self) -> None:
        """Create the connection pool."""
        if self.pool is None:
            try:
                self.pool = await asyncpg.create_pool(
                    self.connection_string,
                    min_size=1,
                    max_size=10,
                    command_timeout=60
                )
            except (asyncpg.PostgresError, OSError) as e:
                raise PersistenceError(f"Cannot connect to database: {e}") from e
            logger.info("database_connected", pool_min=1, pool_max=10)

    async def disconnect(self) -> None:
        """Close the connection pool."""
        if self.pool:
            await self.pool.close()
            self.pool = None
            logger.info("database_disconnected")

    async def ensure_connected(self) -> None:
        if self.pool is None:
            await self.connect()

    @asynccontextmanager
    async def acquire_connection(self):
        """Borrow a pooled connection, translating driver errors."""
        await self.ensure_connected()
        assert self.pool is not None
        try:
            connection = await self.pool.acquire()
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            raise PersistenceError(f"Cannot acquire connection: {e}") from e
        try:
            yield connection
        except (asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            raise PersistenceError(str(e)) from e
        finally:
            await self.pool.release(connection)

    async def ensure_schema(self) -> None:
        """Create the tables if they do not exist."""
        async with self.acquire_connection() as conn:
            await conn.execute(SCHEMA)

    async def delete_all_lessons(self) -> None:
        async with self.acquire_connection() as conn:
            await conn.execute("DELETE FROM lesson")

    async def delete_all_classes(self) -> None:
        async with self.acquire_connection() as conn:
            await conn.execute("DELETE FROM school_class")

    async def create_class(self, name: str, conn: Optional[asyncpg.Connection] = None) -> int:
        """
        Insert a class.

        Args:
            name: Class name
            conn: Optional connection to reuse

        Returns:
            Id of the new class
        """
        async def _execute(connection: asyncpg.Connection) -> int:
            row = await connection.fetchrow(
                "INSERT INTO school_class (name) VALUES ($1) RETURNING id",
                name
            )
            return row['id']

        if conn is not None:
            return await _execute(conn)

        async with self.acquire_connection() as connection:
            return await _execute(connection)

    async def create_lesson(
        self,
        class_id: int,
        lesson: Lesson,
        conn: Optional[asyncpg.Connection] = None
    ) -> int:
        """
        Insert a lesson.

        Args:
            class_id: Id of the owning class
            lesson: Lesson to store
            conn: Optional connection to reuse

        Returns:
            Id of the new lesson
        """
        async def _execute(connection: asyncpg.Connection) -> int:
            row = await connection.fetchrow(
                """
                INSERT INTO lesson (
                    class_id, day, start_time, end_time, subject, teacher, room
                )
                VALUES ($1, $2, $3, $4, $5, $6, $7)
                RETURNING id
                """,
                class_id,
                lesson.day,
                lesson.start_time,
                lesson.end_time,
                lesson.subject,
                lesson.teacher,
                lesson.room
            )
            return row['id']

        if conn is not None:
            return await _execute(conn)

        async with self.acquire_connection() as connection:
            return await _execute(connection)

    async def save_class_schedule(self, name: str, lessons: list[Lesson]) -> int:
        """
        Store a class and all its lessons in one transaction.

        Returns:
            Id of the new class

        Raises:
            PersistenceError: Any database failure; nothing is kept for the class
        """
        async with self.acquire_connection() as conn:
            async with conn.transaction():
                class_id = await self.create_class(name, conn=conn)
                for lesson in lessons:
                    await self.create_lesson(class_id, lesson, conn=conn)

        logger.info("class_schedule_saved", class_name=name, class_id=class_id, lessons=len(lessons))
        return class_id


# Shared instance
_db_instance: Optional[Database] = None


async def get_database() -> Database:
    """
    Return the shared, connected Database.

    Raises:
        ValueError: DATABASE_URL is not configured
    """
    global _db_instance

    if _db_instance is None:
        config = get_config()
        if not config.database_url:
            raise ValueError("DATABASE_URL environment variable is required")
        _db_instance = Database(config.database_url)
        await _db_instance.connect()

    return _db_instance
