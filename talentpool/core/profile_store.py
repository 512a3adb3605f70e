"""
Profile Store for TalentPool

A key-value document store holding one JSON document per user id:
- get / set / update-by-id semantics
- atomic merge updates that always stamp `updated_at`
- optional compare-and-set guard on top-level fields

Two backends:
- InMemoryProfileStore: process-local, used for development and tests
- SQLProfileStore: SQLAlchemy async engine with a JSON document column
"""

import asyncio
import copy
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, Column, DateTime, Integer, String, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from talentpool.core.errors import ProfileNotFoundError

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _matches(document: dict[str, Any], expected: dict[str, Any] | None) -> bool:
    if not expected:
        return True
    return all(document.get(key) == value for key, value in expected.items())


class ProfileStore(ABC):
    """Document store contract consumed by the lifecycle core."""

    @abstractmethod
    async def get(self, uid: str) -> dict[str, Any] | None:
        """Return the document for `uid`, or None if it does not exist."""

    @abstractmethod
    async def set(self, uid: str, fields: dict[str, Any]) -> None:
        """Create or fully replace the document for `uid`."""

    @abstractmethod
    async def update(
        self,
        uid: str,
        fields: dict[str, Any],
        expected: dict[str, Any] | None = None,
    ) -> bool:
        """
        Atomically merge `fields` into the document.

        Args:
            uid: Document id
            fields: Top-level fields to merge (None values are written as null)
            expected: Top-level field values that must match for the write to happen

        Returns:
            False if `expected` did not match and nothing was written

        Raises:
            ProfileNotFoundError: If the document does not exist
        """

    @abstractmethod
    async def list_profiles(
        self,
        role: str | None = None,
        status: str | None = None,
    ) -> list[dict[str, Any]]:
        """List documents, optionally filtered by role and talent status."""

    async def init(self) -> None:
        """Prepare the backend (create tables, etc.)."""

    async def close(self) -> None:
        """Release backend resources."""


# ============================================================================
# IN-MEMORY BACKEND
# ============================================================================

class InMemoryProfileStore(ProfileStore):
    """Process-local store. Every write runs under one asyncio lock."""

    def __init__(self):
        self._documents: dict[str, dict[str, Any]] = {}
        self._lock = asyncio.Lock()

    async def get(self, uid: str) -> dict[str, Any] | None:
        document = self._documents.get(uid)
        return copy.deepcopy(document) if document is not None else None

    async def set(self, uid: str, fields: dict[str, Any]) -> None:
        async with self._lock:
            document = copy.deepcopy(fields)
            document["uid"] = uid
            document.setdefault("created_at", _now_iso())
            document["updated_at"] = _now_iso()
            self._documents[uid] = document

    async def update(
        self,
        uid: str,
        fields: dict[str, Any],
        expected: dict[str, Any] | None = None,
    ) -> bool:
        async with self._lock:
            document = self._documents.get(uid)
            if document is None:
                raise ProfileNotFoundError(uid)
            if not _matches(document, expected):
                return False
            document.update(copy.deepcopy(fields))
            document["updated_at"] = _now_iso()
            return True

    async def list_profiles(
        self,
        role: str | None = None,
        status: str | None = None,
    ) -> list[dict[str, Any]]:
        return [
            copy.deepcopy(document)
            for document in self._documents.values()
            if (role is None or document.get("role") == role)
            and (status is None or document.get("talent_status") == status)
        ]


# ============================================================================
# SQL BACKEND
# ============================================================================

class Base(DeclarativeBase):
    pass


class ProfileDocument(Base):
    __tablename__ = "profiles"

    uid = Column(String, primary_key=True)
    role = Column(String, nullable=True, index=True)
    talent_status = Column(String, nullable=True, index=True)
    document = Column(JSON, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
    version = Column(Integer, nullable=False, default=0)


class SQLProfileStore(ProfileStore):
    """
    SQLAlchemy-backed store.

    `role` and `talent_status` are mirrored into indexed columns so listing
    and the reconciliation sweep do not scan documents.

    Merge updates are optimistic. The write is a single UPDATE conditioned
    on the row version that was read, so a compare-and-set can only apply
    to the document state it checked.
    """

    def __init__(self, database_url: str):
        self.engine = create_async_engine(database_url, echo=False)
        self.session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

    async def init(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Profile store tables ready")

    async def close(self) -> None:
        await self.engine.dispose()

    async def get(self, uid: str) -> dict[str, Any] | None:
        async with self.session_factory() as session:
            row = await session.get(ProfileDocument, uid)
            return dict(row.document) if row else None

    async def set(self, uid: str, fields: dict[str, Any]) -> None:
        document = copy.deepcopy(fields)
        document["uid"] = uid
        document.setdefault("created_at", _now_iso())
        document["updated_at"] = _now_iso()
        async with self.session_factory() as session, session.begin():
            row = await session.get(ProfileDocument, uid)
            if row is None:
                row = ProfileDocument(uid=uid, version=0)
                session.add(row)
            else:
                row.version += 1
            for column, value in self._columns(document).items():
                setattr(row, column, value)

    async def update(
        self,
        uid: str,
        fields: dict[str, Any],
        expected: dict[str, Any] | None = None,
    ) -> bool:
        while True:
            async with self.session_factory() as session:
                row = await session.get(ProfileDocument, uid)
                if row is None:
                    raise ProfileNotFoundError(uid)
                document = dict(row.document)
                if not _matches(document, expected):
                    return False
                document.update(copy.deepcopy(fields))
                document["updated_at"] = _now_iso()

                result = await session.execute(
                    update(ProfileDocument)
                    .where(ProfileDocument.uid == uid, ProfileDocument.version == row.version)
                    .values(version=row.version + 1, **self._columns(document))
                    .execution_options(synchronize_session=False)
                )
                await session.commit()

            if result.rowcount == 1:
                return True
            # Another writer got in between the read and the write; re-check
            logger.debug(f"Concurrent write on profile {uid}, retrying")

    async def list_profiles(
        self,
        role: str | None = None,
        status: str | None = None,
    ) -> list[dict[str, Any]]:
        query = select(ProfileDocument)
        if role is not None:
            query = query.where(ProfileDocument.role == role)
        if status is not None:
            query = query.where(ProfileDocument.talent_status == status)
        async with self.session_factory() as session:
            result = await session.execute(query.order_by(ProfileDocument.updated_at.desc()))
            return [dict(row.document) for row in result.scalars()]

    @staticmethod
    def _columns(document: dict[str, Any]) -> dict[str, Any]:
        return {
            "document": document,
            "role": document.get("role"),
            "talent_status": document.get("talent_status"),
            "updated_at": datetime.fromisoformat(document["updated_at"]),
        }
