"""
Pydantic schemas for request/response validation.
Defines the value types handed out by the extractor and the store.
"""

import json
from datetime import datetime
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel


# ============ Problem Schemas ============

class Sample(BaseModel):
    """One sample input/output pair."""
    input: str
    output: str


class Problem(BaseModel):
    """Structured problem extracted from a problem page."""
    id: str
    title: str
    description: str = ""
    input_description: str = ""
    output_description: str = ""
    samples: List[Sample] = []
    time_limit: str = ""
    memory_limit: str = ""

    def samples_json(self) -> str:
        return json.dumps([s.model_dump() for s in self.samples], ensure_ascii=False)


class ProblemRecord(BaseModel):
    """Cached problem row."""
    id: int
    problem_id: str
    title: str
    description: str
    input_description: str
    output_description: str
    samples_json: str
    time_limit: str
    memory_limit: str
    created_at: datetime

    class Config:
        from_attributes = True

    @property
    def samples(self) -> List[Sample]:
        return [Sample(**s) for s in json.loads(self.samples_json or "[]")]

    def to_problem(self) -> Problem:
        return Problem(
            id=self.problem_id,
            title=self.title,
            description=self.description,
            input_description=self.input_description,
            output_description=self.output_description,
            samples=self.samples,
            time_limit=self.time_limit,
            memory_limit=self.memory_limit,
        )


# ============ Chat Schemas ============

class ChatMessage(BaseModel):
    """A single role-tagged chat message."""
    role: str
    content: str


class ChatRecord(BaseModel):
    """Stored chat transcript for one problem."""
    id: int
    problem_id: str
    messages_json: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @property
    def messages(self) -> List[ChatMessage]:
        return [ChatMessage(**m) for m in json.loads(self.messages_json or "[]")]


class SaveChatRequest(BaseModel):
    messages: List[ChatMessage]


class ChatRequest(BaseModel):
    """Request body for the chat proxy."""
    messages: List[ChatMessage]
    system_prompt: str = ""
    model: Optional[str] = None
    api_key: Optional[str] = None


class ModelsRequest(BaseModel):
    api_key: Optional[str] = None


class ChatResponse(BaseModel):
    content: str


class StreamChunk(BaseModel):
    """Incremental piece of a streamed chat answer."""
    text: str
    done: bool


class ModelInfo(BaseModel):
    name: str
    display_name: str


# ============ Solve / Activity Schemas ============

class SolveStatus(str, Enum):
    INSERTED = "inserted"
    ALREADY_RECORDED = "already_recorded"


class RecordSolveResult(BaseModel):
    """Outcome of recording a solve for today."""
    status: SolveStatus
    id: Optional[int] = None

    @property
    def inserted(self) -> bool:
        return self.status == SolveStatus.INSERTED


class ActivityData(BaseModel):
    """Daily solve count with its heatmap intensity level."""
    date: str
    count: int
    level: int
