"""
Local Persistence Store for psup.

Owns the SQLite file holding the problem cache, chat transcripts and the
solve ledger. Every operation holds a single lock for its whole duration
and runs in its own session, so concurrent callers are totally ordered.
Callers only ever receive Pydantic copies, never ORM rows.
"""

import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Iterator, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .config import get_activity_level
from .database import Base, create_db_engine, utcnow
from .errors import StorageError
from .models import CachedProblem, Chat, SolveRecord
from .schemas import (
    ActivityData,
    ChatRecord,
    Problem,
    ProblemRecord,
    RecordSolveResult,
    SolveStatus,
)

logger = logging.getLogger(__name__)


def _as_utc(now: Optional[datetime]) -> datetime:
    """Normalize an optional reference time to naive UTC."""
    if now is None:
        return utcnow()
    if now.tzinfo is not None:
        return now.astimezone(timezone.utc).replace(tzinfo=None)
    return now


def _day_bounds(now: datetime) -> Tuple[datetime, datetime]:
    """Start (inclusive) and end (exclusive) of the calendar day containing now."""
    start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)


class ProblemStore:
    """
    Thread-safe facade over the local database.

    Features:
    - Idempotent schema creation on open
    - Upserts for cached problems and chats
    - One-per-day solve ledger with activity aggregation
    - Storage engine failures surfaced as StorageError
    """

    def __init__(self, database_url: Optional[str] = None):
        self.engine = create_db_engine(database_url)
        self._session_factory = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self.engine
        )
        self._lock = threading.Lock()
        self.init_tables()

    def init_tables(self) -> None:
        """Create tables and indexes if they do not exist yet."""
        with self._lock:
            try:
                Base.metadata.create_all(bind=self.engine)
            except SQLAlchemyError as e:
                logger.error(f"Schema creation failed: {e}")
                raise StorageError(str(e)) from e

    @contextmanager
    def _session(self) -> Iterator[Session]:
        """
        Hold the store lock for one operation.
        Commits on success; rolls back and raises StorageError on engine failure.
        """
        with self._lock:
            db = self._session_factory()
            try:
                yield db
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"Storage error: {e}")
                raise StorageError(str(e)) from e
            finally:
                db.close()

    def close(self) -> None:
        """Release all pooled connections."""
        with self._lock:
            self.engine.dispose()

    # =========================================================================
    # PROBLEM CACHE
    # =========================================================================

    def save_problem(self, problem: Problem) -> int:
        """
        Insert or replace the cached copy of a problem.

        Args:
            problem: Successfully parsed problem

        Returns:
            Surrogate id of the affected row
        """
        with self._session() as db:
            row = db.query(CachedProblem).filter(
                CachedProblem.problem_id == problem.id
            ).first()

            if row is None:
                row = CachedProblem(problem_id=problem.id)
                db.add(row)

            row.title = problem.title
            row.description = problem.description
            row.input_description = problem.input_description
            row.output_description = problem.output_description
            row.samples_json = problem.samples_json()
            row.time_limit = problem.time_limit
            row.memory_limit = problem.memory_limit
            row.created_at = utcnow()
            db.flush()

            logger.info(f"Cached problem {problem.id} (row {row.id})")
            return row.id

    def get_problem(self, problem_id: str) -> Optional[ProblemRecord]:
        """Return the cached problem, or None if it was never fetched."""
        with self._session() as db:
            row = db.query(CachedProblem).filter(
                CachedProblem.problem_id == problem_id
            ).first()
            return ProblemRecord.model_validate(row) if row else None

    def get_all_problems(self) -> List[ProblemRecord]:
        """Return every cached problem, most recently fetched first."""
        with self._session() as db:
            rows = db.query(CachedProblem).order_by(
                CachedProblem.created_at.desc(),
                CachedProblem.id.desc()
            ).all()
            return [ProblemRecord.model_validate(r) for r in rows]

    def delete_problem(self, problem_id: str) -> None:
        """
        Delete a cached problem together with its chat transcript.
        Both deletes share one transaction.
        """
        with self._session() as db:
            problems = db.query(CachedProblem).filter(
                CachedProblem.problem_id == problem_id
            ).delete(synchronize_session=False)
            chats = db.query(Chat).filter(
                Chat.problem_id == problem_id
            ).delete(synchronize_session=False)

            logger.info(f"Deleted problem {problem_id}: {problems} problem row(s), {chats} chat row(s)")

    # =========================================================================
    # CHAT TRANSCRIPTS
    # =========================================================================

    def save_chat(self, problem_id: str, messages_json: str) -> int:
        """
        Store the chat transcript for a problem.

        Overwrites the existing transcript in place (bumping updated_at),
        otherwise inserts a new row.

        Returns:
            Surrogate id of the affected row
        """
        with self._session() as db:
            chat = db.query(Chat).filter(Chat.problem_id == problem_id).first()

            if chat:
                chat.messages_json = messages_json
                chat.updated_at = utcnow()
            else:
                chat = Chat(problem_id=problem_id, messages_json=messages_json)
                db.add(chat)
            db.flush()

            logger.debug(f"Saved chat for problem {problem_id} (row {chat.id})")
            return chat.id

    def get_chat_by_problem(self, problem_id: str) -> Optional[ChatRecord]:
        """Return the chat transcript for a problem, or None."""
        with self._session() as db:
            chat = db.query(Chat).filter(Chat.problem_id == problem_id).first()
            return ChatRecord.model_validate(chat) if chat else None

    # =========================================================================
    # SOLVE LEDGER
    # =========================================================================

    def record_solve(self, problem_id: str, now: Optional[datetime] = None) -> RecordSolveResult:
        """
        Record that a problem was solved today.

        Args:
            problem_id: Problem identifier
            now: Reference time (defaults to current UTC time)

        Returns:
            RecordSolveResult with status INSERTED and the new row id, or
            ALREADY_RECORDED if today's entry exists
        """
        now = _as_utc(now)
        start, end = _day_bounds(now)

        with self._session() as db:
            existing = db.query(SolveRecord).filter(
                SolveRecord.problem_id == problem_id,
                SolveRecord.solved_at >= start,
                SolveRecord.solved_at < end
            ).first()

            if existing:
                logger.debug(f"Solve for {problem_id} already recorded on {start.date()}")
                return RecordSolveResult(status=SolveStatus.ALREADY_RECORDED)

            record = SolveRecord(problem_id=problem_id, solved_at=now)
            db.add(record)
            db.flush()

            logger.info(f"Recorded solve for {problem_id} on {start.date()}")
            return RecordSolveResult(status=SolveStatus.INSERTED, id=record.id)

    def unrecord_solve(self, problem_id: str, now: Optional[datetime] = None) -> bool:
        """Remove today's solve entry. Returns True if a row was deleted."""
        start, end = _day_bounds(_as_utc(now))

        with self._session() as db:
            deleted = db.query(SolveRecord).filter(
                SolveRecord.problem_id == problem_id,
                SolveRecord.solved_at >= start,
                SolveRecord.solved_at < end
            ).delete(synchronize_session=False)

            if deleted:
                logger.info(f"Removed today's solve for {problem_id}")
            return deleted > 0

    def is_solved_today(self, problem_id: str, now: Optional[datetime] = None) -> bool:
        start, end = _day_bounds(_as_utc(now))

        with self._session() as db:
            return db.query(SolveRecord.id).filter(
                SolveRecord.problem_id == problem_id,
                SolveRecord.solved_at >= start,
                SolveRecord.solved_at < end
            ).first() is not None

    def get_activity_data(self, days: int, now: Optional[datetime] = None) -> List[ActivityData]:
        """
        Aggregate the ledger into per-day counts.

        Args:
            days: Size of the look-back window
            now: Reference time (defaults to current UTC time)

        Returns:
            One ActivityData per day with at least one solve, oldest first
        """
        cutoff = _as_utc(now) - timedelta(days=days)
        solve_date = func.date(SolveRecord.solved_at).label("solve_date")

        with self._session() as db:
            rows = db.query(solve_date, func.count(SolveRecord.id)).filter(
                SolveRecord.solved_at >= cutoff
            ).group_by(solve_date).order_by(solve_date.asc()).all()

        return [
            ActivityData(date=str(day), count=count, level=get_activity_level(count))
            for day, count in rows
        ]


# =============================================================================
# APPLICATION STORE
# =============================================================================

_store: Optional[ProblemStore] = None
_store_lock = threading.Lock()


def open_store(database_url: Optional[str] = None) -> ProblemStore:
    """Open (or return) the application-wide store."""
    global _store
    with _store_lock:
        if _store is None:
            _store = ProblemStore(database_url)
        return _store


def close_store() -> None:
    """Close the application-wide store if it is open."""
    global _store
    with _store_lock:
        if _store is not None:
            _store.close()
            _store = None


def get_store() -> ProblemStore:
    """Dependency function returning the application-wide store."""
    return open_store()
