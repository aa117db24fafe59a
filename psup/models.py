"""
SQLAlchemy ORM models for psup.
Defines the problem cache, chat transcript and solve ledger tables.
"""

from sqlalchemy import Column, Integer, String, Text, DateTime

from .database import Base, utcnow


class CachedProblem(Base):
    """
    Problem statement cached after a successful fetch and parse.
    One row per problem id; re-fetching overwrites the row.
    """
    __tablename__ = "problems"

    id = Column(Integer, primary_key=True, autoincrement=True)
    problem_id = Column(String, unique=True, index=True, nullable=False)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False, default="")
    input_description = Column(Text, nullable=False, default="")
    output_description = Column(Text, nullable=False, default="")
    samples_json = Column(Text, nullable=False, default="[]")  # [{"input", "output"}, ...]
    time_limit = Column(String, nullable=False, default="")
    memory_limit = Column(String, nullable=False, default="")
    created_at = Column(DateTime, nullable=False, default=utcnow)


class Chat(Base):
    """
    Chat transcript for a problem, stored as a JSON list of messages.
    """
    __tablename__ = "chats"

    id = Column(Integer, primary_key=True, autoincrement=True)
    problem_id = Column(String, unique=True, index=True, nullable=False)
    messages_json = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)


class SolveRecord(Base):
    """
    Solve ledger. At most one row per problem per UTC calendar day,
    enforced by the store.
    """
    __tablename__ = "solve_records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    problem_id = Column(String, nullable=False, index=True)
    solved_at = Column(DateTime, nullable=False, default=utcnow, index=True)
