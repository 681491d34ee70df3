import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import aiosqlite

logger = logging.getLogger(__name__)


class AsyncDatabaseInitializer:
    """
    Manage the async SQLite database that stores image metadata.

    - The database file lives at the `db_path` given by the app config.
    - On the first call to `ensure_database()` for a given instance the IMAGE
      table is created if missing. Existing rows are kept across restarts.
    - Subsequent calls to `ensure_database()` on the same instance are no-ops,
      so it is safe for `connection()` to call it.
    """

    def __init__(self, db_path: Path | str) -> None:
        self.db_path = Path(db_path)
        self.db_dir = self.db_path.parent
        self._initialized = False

    async def ensure_database(self) -> None:
        """
        Ensure the SQLite schema exists at `self.db_path`.

        Creates the IMAGE table and its created_at index. The `objects`
        column holds a JSON array of labels and `attributes` a JSON object
        of caller-supplied fields.
        """
        if self._initialized:
            return

        self.db_dir.mkdir(parents=True, exist_ok=True)

        max_attempts = 3
        for attempt in range(1, max_attempts + 1):
            try:
                async with aiosqlite.connect(self.db_path) as db:
                    await db.execute(
                        """
                        CREATE TABLE IF NOT EXISTS IMAGE (
                            id TEXT PRIMARY KEY,
                            img_url TEXT NOT NULL,
                            objects TEXT NOT NULL DEFAULT '[]',
                            is_uploaded_file INTEGER NOT NULL DEFAULT 0,
                            attributes TEXT NOT NULL DEFAULT '{}',
                            created_at INTEGER NOT NULL
                        )
                        """
                    )
                    await db.execute(
                        "CREATE INDEX IF NOT EXISTS idx_image_created_at ON IMAGE(created_at)"
                    )
                    await db.commit()
                break
            except FileNotFoundError:
                # On some platforms a transient missing file error may occur; retry a few times.
                if attempt >= max_attempts:
                    raise
                await asyncio.sleep(0.1 * attempt)

        logger.info("Image database ready at %s", self.db_path)
        self._initialized = True

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Async context manager yielding an `aiosqlite.Connection`.

        The schema is created on first use via `ensure_database()`.
        """
        await self.ensure_database()
        conn = await aiosqlite.connect(self.db_path)
        try:
            yield conn
        finally:
            await conn.close()
