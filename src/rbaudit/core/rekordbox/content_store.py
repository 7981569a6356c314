"""Rekordbox content lookups by catalogue id."""

import logging
import queue
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator, List, Optional

from pyrekordbox import Rekordbox6Database, db6
from sqlalchemy.exc import SQLAlchemyError

from ...models.models import ExternalRecord

logger = logging.getLogger(__name__)


class ContentStoreUnavailableError(Exception):
    """Raised when the Rekordbox database cannot be opened or queried."""

    pass


class RekordboxContentStore:
    """Pool of Rekordbox database connections used for content lookups.

    Each worker borrows one connection per lookup. The Rekordbox database is
    only ever read.
    """

    def __init__(
        self,
        db_path: Optional[Path] = None,
        key: Optional[str] = None,
        pool_size: int = 8,
        db_factory: Optional[Callable[[], Any]] = None,
    ) -> None:
        """Initialize the content store.

        Args:
            db_path: Path to master.db (uses pyrekordbox discovery if None)
            key: SQLCipher key (uses pyrekordbox key discovery if None)
            pool_size: Number of pooled connections
            db_factory: Callable returning a database connection
        """
        if pool_size < 1:
            raise ValueError("pool_size must be at least 1")

        self.db_path = db_path
        self.key = key
        self.pool_size = pool_size
        self._db_factory = db_factory or self._connect
        self._pool: "queue.Queue[Any]" = queue.Queue(maxsize=pool_size)
        self._connections: List[Any] = []

    def _connect(self) -> Rekordbox6Database:
        kwargs: dict[str, Any] = {}
        if self.db_path is not None:
            kwargs["path"] = str(self.db_path)
        if self.key:
            kwargs["key"] = self.key
        return Rekordbox6Database(**kwargs)

    @property
    def is_open(self) -> bool:
        """Whether the pool has been filled."""
        return bool(self._connections)

    def open(self) -> "RekordboxContentStore":
        """Open every pooled connection.

        Raises:
            ContentStoreUnavailableError: If a connection cannot be established
        """
        if self.is_open:
            return self

        try:
            for _ in range(self.pool_size):
                db = self._db_factory()
                self._connections.append(db)
                self._pool.put_nowait(db)
        except Exception as e:
            self.close()
            raise ContentStoreUnavailableError(
                f"Failed to connect to Rekordbox database: {e}"
            ) from e

        logger.info(
            "Connected to Rekordbox database with %d pooled connections",
            self.pool_size,
        )
        return self

    @contextmanager
    def connection(self) -> Iterator[Any]:
        """Borrow a pooled connection for the duration of the block."""
        if not self.is_open:
            raise ContentStoreUnavailableError("Content store is not open")

        db = self._pool.get()
        try:
            yield db
        finally:
            self._pool.put(db)

    def find(self, external_id: str) -> Optional[ExternalRecord]:
        """Find the content whose filename carries ``[external_id]``.

        The first row returned by the database wins. When several rows match
        the record reports the number of matches; no tie-break is applied.

        Args:
            external_id: Catalogue id parsed from the library filename

        Returns:
            Matching record, or None when no content matches

        Raises:
            ContentStoreUnavailableError: If the query fails
        """
        pattern = f"%[{external_id}]%"
        with self.connection() as db:
            try:
                rows = (
                    db.get_content()
                    .filter(db6.DjmdContent.FileNameL.like(pattern))
                    .all()
                )
            except SQLAlchemyError as e:
                db.rollback()
                raise ContentStoreUnavailableError(
                    f"Rekordbox query for {external_id} failed: {e}"
                ) from e

        if not rows:
            return None

        if len(rows) > 1:
            logger.warning(
                "%d Rekordbox contents match id %s, using %s",
                len(rows),
                external_id,
                rows[0].FileNameL,
            )

        content = rows[0]
        return ExternalRecord(
            id=str(content.ID),
            filename=content.FileNameL or "",
            rating=content.Rating or 0,
            match_count=len(rows),
        )

    def close(self) -> None:
        """Close every pooled connection."""
        for db in self._connections:
            try:
                db.close()
            except Exception as e:
                logger.debug("Error closing Rekordbox connection: %s", e)
        self._connections.clear()

        while not self._pool.empty():
            self._pool.get_nowait()

    def __enter__(self) -> "RekordboxContentStore":
        """Open the pool on entering a with block."""
        return self.open()

    def __exit__(self, *exc_info: Any) -> None:
        """Close the pool on leaving a with block."""
        self.close()
