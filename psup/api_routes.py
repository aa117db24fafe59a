"""
API routes for psup.
Exposes the fetch pipeline, the local store and the chat proxy as commands.
"""

import asyncio
import json
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from . import ai_tutor
from .config import DEFAULT_ACTIVITY_DAYS
from .crawler import fetch_problem
from .errors import APIError, ValidationError
from .schemas import (
    ActivityData,
    ChatRecord,
    ChatRequest,
    ChatResponse,
    ModelInfo,
    ModelsRequest,
    Problem,
    ProblemRecord,
    RecordSolveResult,
    SaveChatRequest,
)
from .store import ProblemStore, get_store
from .validation import require_days, require_problem_id, validate_chat_messages

logger = logging.getLogger(__name__)

# Create router instance
router = APIRouter()


def _check_messages(messages) -> None:
    is_valid, error = validate_chat_messages([m.model_dump() for m in messages])
    if not is_valid:
        raise ValidationError(error)


# =============================================================================
# PROBLEM ENDPOINTS
# =============================================================================

@router.post("/problems/{problem_id}/fetch", response_model=Problem)
async def fetch_and_cache_problem(
    problem_id: str,
    store: ProblemStore = Depends(get_store)
):
    """
    Fetch a problem page, parse it and cache the result.

    The cache is only written after a successful parse, so a failed
    re-fetch leaves the previously cached copy intact. The store write runs
    in a worker thread like the fetch.
    """
    problem_id = require_problem_id(problem_id)
    problem = await fetch_problem(problem_id)
    await asyncio.to_thread(store.save_problem, problem)
    return problem


@router.get("/problems", response_model=List[ProblemRecord])
def list_cached_problems(store: ProblemStore = Depends(get_store)):
    """List cached problems, most recently fetched first."""
    return store.get_all_problems()


@router.get("/problems/{problem_id}", response_model=Optional[ProblemRecord])
def get_cached_problem(problem_id: str, store: ProblemStore = Depends(get_store)):
    """Get a cached problem; returns null if it was never fetched."""
    return store.get_problem(require_problem_id(problem_id))


@router.delete("/problems/{problem_id}")
def delete_problem(problem_id: str, store: ProblemStore = Depends(get_store)):
    """Delete a cached problem and its chat transcript."""
    problem_id = require_problem_id(problem_id)
    store.delete_problem(problem_id)
    return {"deleted": problem_id}


# =============================================================================
# CHAT HISTORY ENDPOINTS
# =============================================================================

@router.put("/chats/{problem_id}")
def save_chat(
    problem_id: str,
    body: SaveChatRequest,
    store: ProblemStore = Depends(get_store)
):
    """Store the chat transcript of a problem, replacing any previous one."""
    problem_id = require_problem_id(problem_id)
    if body.messages:
        _check_messages(body.messages)
    messages_json = json.dumps([m.model_dump() for m in body.messages], ensure_ascii=False)
    chat_id = store.save_chat(problem_id, messages_json)
    return {"id": chat_id}


@router.get("/chats/{problem_id}", response_model=Optional[ChatRecord])
def get_chat(problem_id: str, store: ProblemStore = Depends(get_store)):
    """Get the chat transcript of a problem; returns null if none exists."""
    return store.get_chat_by_problem(require_problem_id(problem_id))


# =============================================================================
# SOLVE LEDGER ENDPOINTS
# =============================================================================

@router.post("/solves/{problem_id}", response_model=RecordSolveResult)
def record_solve(problem_id: str, store: ProblemStore = Depends(get_store)):
    """
    Record a solve for today.
    A repeat on the same day reports status 'already_recorded'.
    """
    return store.record_solve(require_problem_id(problem_id))


@router.delete("/solves/{problem_id}")
def unrecord_solve(problem_id: str, store: ProblemStore = Depends(get_store)):
    """Remove today's solve entry for a problem."""
    removed = store.unrecord_solve(require_problem_id(problem_id))
    return {"removed": removed}


@router.get("/solves/{problem_id}/today")
def is_solved_today(problem_id: str, store: ProblemStore = Depends(get_store)):
    """Check whether a problem was marked solved today."""
    solved = store.is_solved_today(require_problem_id(problem_id))
    return {"solved": solved}


@router.get("/activity", response_model=List[ActivityData])
def get_activity(
    days: int = Query(DEFAULT_ACTIVITY_DAYS, description="Look-back window in days"),
    store: ProblemStore = Depends(get_store)
):
    """Per-day solve counts with heatmap levels, oldest day first."""
    return store.get_activity_data(require_days(days))


# =============================================================================
# CHAT PROXY ENDPOINTS
# =============================================================================

@router.post("/chat", response_model=ChatResponse)
def chat_with_ai(body: ChatRequest):
    """Forward a transcript to the chat model and return the full answer."""
    _check_messages(body.messages)
    content = ai_tutor.chat(body.api_key, body.messages, body.system_prompt, body.model)
    return ChatResponse(content=content)


@router.post("/chat/stream")
def chat_with_ai_stream(body: ChatRequest):
    """
    Forward a transcript and relay the answer as server-sent events.

    Each event carries a StreamChunk; the last one has done=true. A failure
    after streaming started is sent as an 'error' event.
    """
    _check_messages(body.messages)
    chunks = ai_tutor.chat_stream(body.api_key, body.messages, body.system_prompt, body.model)

    def event_stream():
        try:
            for chunk in chunks:
                yield f"data: {chunk.model_dump_json()}\n\n"
        except APIError as e:
            yield f"event: error\ndata: {json.dumps(e.to_response().to_dict())}\n\n"

    return StreamingResponse(event_stream(), media_type="text/event-stream")


@router.post("/chat/models", response_model=List[ModelInfo])
def get_available_models(body: ModelsRequest):
    """List the chat models available to an API key."""
    return ai_tutor.list_models(body.api_key)
