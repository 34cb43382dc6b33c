"""
Recruitment Store
SQLite-backed collection of recruitment records.
"""
import re
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import aiosqlite

from .. import config as tracker_config
from ..config import StoreConfig
from ..core.errors import StoreError
from ..core.logging import store_logger
from ..models import PaidOutStatus, RecruitmentRecord

log = store_logger()

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class RecruitmentStore:
    """
    Persistent collection of RecruitmentRecord documents.

    Each operation opens its own connection and closes it on exit, so no
    handle outlives a request. Single statements are atomic; concurrent
    updates to the same record resolve as last write wins.
    """

    def __init__(self, db_path: Optional[Path] = None, collection: Optional[str] = None):
        store_config: StoreConfig = tracker_config.config.store
        self.db_path = Path(db_path) if db_path else store_config.db_path
        self.collection = collection or store_config.collection
        if not _IDENTIFIER.match(self.collection):
            raise ValueError(f"Invalid collection name: {self.collection!r}")
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self):
        """Create the collection table once per process"""
        if self._initialized:
            return

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            async with aiosqlite.connect(self.db_path) as db:
                await db.execute(f"""
                    CREATE TABLE IF NOT EXISTS {self.collection} (
                        seq INTEGER PRIMARY KEY AUTOINCREMENT,
                        id TEXT NOT NULL UNIQUE,
                        hstl_member TEXT NOT NULL,
                        recruited_member TEXT NOT NULL,
                        paid_out TEXT NOT NULL,
                        created_at TEXT NOT NULL
                    )
                """)
                await db.execute(f"""
                    CREATE INDEX IF NOT EXISTS idx_{self.collection}_created
                    ON {self.collection}(created_at)
                """)
                await db.commit()
        except aiosqlite.Error as e:
            log.error(f"Failed to initialize store at {self.db_path}: {e}")
            raise StoreError("Failed to initialize store") from e

        self._initialized = True
        log.info(f"Store ready at {self.db_path} (collection={self.collection})")

    @staticmethod
    def _row_to_record(row: aiosqlite.Row) -> RecruitmentRecord:
        return RecruitmentRecord(
            id=row["id"],
            hstlMember=row["hstl_member"],
            recruitedMember=row["recruited_member"],
            paidOut=PaidOutStatus(row["paid_out"]),
            createdAt=datetime.fromisoformat(row["created_at"]),
        )

    async def list(self, search: Optional[str] = None) -> List[RecruitmentRecord]:
        """
        Return all records, newest first.

        Args:
            search: optional case-insensitive substring matched against
                either member name
        """
        query = f"SELECT * FROM {self.collection}"
        params: tuple = ()
        if search:
            pattern = "%" + search.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_") + "%"
            query += (
                " WHERE lower(hstl_member) LIKE ? ESCAPE '\\'"
                " OR lower(recruited_member) LIKE ? ESCAPE '\\'"
            )
            params = (pattern, pattern)
        query += " ORDER BY created_at DESC, seq DESC"

        try:
            async with aiosqlite.connect(self.db_path) as db:
                db.row_factory = aiosqlite.Row
                async with db.execute(query, params) as cursor:
                    return [self._row_to_record(row) async for row in cursor]
        except aiosqlite.Error as e:
            log.error(f"Failed to fetch recruitments: {e}")
            raise StoreError("Failed to fetch recruitments") from e

    async def get(self, record_id: str) -> Optional[RecruitmentRecord]:
        """Get a record by ID"""
        try:
            async with aiosqlite.connect(self.db_path) as db:
                db.row_factory = aiosqlite.Row
                async with db.execute(
                    f"SELECT * FROM {self.collection} WHERE id = ?", (record_id,)
                ) as cursor:
                    row = await cursor.fetchone()
        except aiosqlite.Error as e:
            log.error(f"Failed to fetch recruitment {record_id}: {e}")
            raise StoreError("Failed to fetch recruitment") from e
        return self._row_to_record(row) if row else None

    async def insert(
        self,
        hstl_member: str,
        recruited_member: str,
        paid_out: PaidOutStatus = PaidOutStatus.PENDING,
    ) -> RecruitmentRecord:
        """Insert a new record with a fresh identifier and timestamp"""
        record = RecruitmentRecord(
            hstlMember=hstl_member,
            recruitedMember=recruited_member,
            paidOut=paid_out,
        )
        try:
            async with aiosqlite.connect(self.db_path) as db:
                await db.execute(f"""
                    INSERT INTO {self.collection}
                    (id, hstl_member, recruited_member, paid_out, created_at)
                    VALUES (?, ?, ?, ?, ?)
                """, (
                    record.id,
                    record.hstlMember,
                    record.recruitedMember,
                    record.paidOut.value,
                    record.createdAt.isoformat(),
                ))
                await db.commit()
        except aiosqlite.Error as e:
            log.error(f"Failed to add recruitment: {e}")
            raise StoreError("Failed to add recruitment") from e

        log.info(f"Inserted recruitment {record.id}")
        return record

    async def update_paid_out(self, record_id: str, paid_out: PaidOutStatus) -> int:
        """Set only the paidOut field. Returns the number of records matched."""
        try:
            async with aiosqlite.connect(self.db_path) as db:
                cursor = await db.execute(
                    f"UPDATE {self.collection} SET paid_out = ? WHERE id = ?",
                    (paid_out.value, record_id),
                )
                await db.commit()
                matched = cursor.rowcount
        except aiosqlite.Error as e:
            log.error(f"Failed to update recruitment {record_id}: {e}")
            raise StoreError("Failed to update recruitment") from e

        if matched:
            log.info(f"Recruitment {record_id} set to {paid_out.value}")
        else:
            log.info(f"Update matched no recruitment with id {record_id}")
        return matched

    async def delete(self, record_id: str) -> int:
        """Remove a record. Returns the number deleted (0 if it was absent)."""
        try:
            async with aiosqlite.connect(self.db_path) as db:
                cursor = await db.execute(
                    f"DELETE FROM {self.collection} WHERE id = ?", (record_id,)
                )
                await db.commit()
                deleted = cursor.rowcount
        except aiosqlite.Error as e:
            log.error(f"Failed to delete recruitment {record_id}: {e}")
            raise StoreError("Failed to delete recruitment") from e

        if deleted:
            log.info(f"Deleted recruitment {record_id}")
        return deleted

    async def count(self) -> int:
        try:
            async with aiosqlite.connect(self.db_path) as db:
                async with db.execute(f"SELECT COUNT(*) FROM {self.collection}") as cursor:
                    (total,) = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise StoreError("Failed to count recruitments") from e
        return total

