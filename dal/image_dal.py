"""Async Data Access Layer for IMAGE table.

Provides ImageDAL class with async create and read operations compatible with
`utils.database_init.AsyncDatabaseInitializer`.
"""

from __future__ import annotations

import json
import time
import uuid
from typing import Iterable, List, Optional, Sequence

from models.image_record import ImageRecord
from utils.database_init import AsyncDatabaseInitializer


class ImageDAL:
    """Data access layer for IMAGE records.

    The constructor accepts an `AsyncDatabaseInitializer` (or any object
    exposing an async `connection()` context manager that yields an
    `aiosqlite.Connection`). Records are immutable once written, so only
    create and read operations exist.
    """

    _COLUMNS = (
        "id",
        "img_url",
        "objects",
        "is_uploaded_file",
        "attributes",
        "created_at",
    )
    _COLUMN_LIST = ", ".join(_COLUMNS)

    def __init__(self, db_initializer: AsyncDatabaseInitializer) -> None:
        self._db = db_initializer

    async def create_image(self, record: ImageRecord) -> ImageRecord:
        """Insert a new IMAGE row and return the stored record.

        Args:
            record: ImageRecord with `id=None` and fields to insert.

        Returns:
            A copy of the record with its new id and created_at filled in.
        """
        image_id = uuid.uuid4().hex
        created_at = record.created_at or int(time.time())
        objects = list(dict.fromkeys(record.objects))

        async with self._db.connection() as conn:
            await conn.execute(
                f"INSERT INTO IMAGE ({self._COLUMN_LIST}) VALUES (?, ?, ?, ?, ?, ?)",
                (
                    image_id,
                    record.img_url,
                    json.dumps(objects),
                    int(record.is_uploaded_file),
                    json.dumps(record.attributes),
                    created_at,
                ),
            )
            await conn.commit()

        return ImageRecord(
            id=image_id,
            img_url=record.img_url,
            objects=objects,
            is_uploaded_file=record.is_uploaded_file,
            attributes=dict(record.attributes),
            created_at=created_at,
        )

    async def get_image_by_id(self, image_id: str) -> Optional[ImageRecord]:
        """Return ImageRecord for `image_id`, or None if not found."""
        async with self._db.connection() as conn:
            cur = await conn.execute(
                f"SELECT {self._COLUMN_LIST} FROM IMAGE WHERE id = ?",
                (image_id,),
            )
            row = await cur.fetchone()
            return self._row_to_record(row) if row else None

    async def list_images(self, objects: Optional[Iterable[str]] = None) -> List[ImageRecord]:
        """List IMAGE rows in insertion order.

        Args:
            objects: When given, only rows whose `objects` contain at least
                one of these labels are returned.
        """
        labels = list(dict.fromkeys(objects)) if objects is not None else None
        sql = f"SELECT {self._COLUMN_LIST} FROM IMAGE"
        params: tuple = ()
        if labels is not None:
            if not labels:
                return []
            placeholders = ", ".join("?" for _ in labels)
            sql += (
                " WHERE EXISTS (SELECT 1 FROM json_each(IMAGE.objects)"
                f" WHERE json_each.value IN ({placeholders}))"
            )
            params = tuple(labels)
        sql += " ORDER BY rowid"

        async with self._db.connection() as conn:
            cur = await conn.execute(sql, params)
            rows = await cur.fetchall()
            return [self._row_to_record(r) for r in rows]

    @staticmethod
    def _row_to_record(row: Sequence[object]) -> ImageRecord:
        """Convert a DB row tuple into an ImageRecord."""
        return ImageRecord(
            id=row[0],
            img_url=row[1],
            objects=json.loads(row[2] or "[]"),
            is_uploaded_file=bool(row[3]),
            attributes=json.loads(row[4] or "{}"),
            created_at=row[5],
        )
