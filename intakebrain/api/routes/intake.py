"""
Intake API Routes
Chat, requirements extraction and intake session endpoints
"""

import logging
from typing import AsyncIterator

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from fastapi.responses import StreamingResponse

from intakebrain.api.dependencies import ServiceContainer, get_services
from intakebrain.extraction import normalize_requirements
from intakebrain.models import (
    ChatRequest,
    ChatResponse,
    CompensationRequest,
    CompensationResponse,
    ConversationTurn,
    ExtractRequirementsRequest,
    ExtractRequirementsResponse,
    NormalizeRequirementsRequest,
    NormalizeRequirementsResponse,
    SessionMessageRequest,
    SessionReply,
    SessionState,
)
from intakebrain.services.chat_service import preview_ready
from intakebrain.services.compensation import estimate_compensation
from intakebrain.services.session import IntakeSession

logger = logging.getLogger(__name__)

router = APIRouter()


# ==========================================
# Chat
# ==========================================

@router.post("/chat", response_model=ChatResponse)
async def chat(request: ChatRequest, services: ServiceContainer = Depends(get_services)):
    """
    Next intake question for the conversation so far.

    With ``stream=true`` the reply is sent as a plain-text stream.
    """
    assistant = services.assistant

    if request.stream:
        chunks = assistant.stream_reply(request.messages)
        # Pull the first chunk here so provider errors map to a status code
        try:
            first = await chunks.__anext__()
        except StopAsyncIteration:
            first = ""

        async def body() -> AsyncIterator[str]:
            if first:
                yield first
            async for chunk in chunks:
                yield chunk

        return StreamingResponse(body(), media_type="text/plain; charset=utf-8")

    message = await assistant.reply(request.messages)
    return ChatResponse(message=message, preview_ready=preview_ready(request.messages))


# ==========================================
# Requirements
# ==========================================

@router.post("/extract-requirements", response_model=ExtractRequirementsResponse)
async def extract_requirements(
    request: ExtractRequirementsRequest,
    services: ServiceContainer = Depends(get_services),
):
    """Extract structured requirements from the conversation; degrades to regex-only on AI failure."""
    run = await services.orchestrator.run(request.messages, request.existing_requirements)
    return ExtractRequirementsResponse(
        extracted_requirements=run.requirements,
        ai_skipped=run.ai_skipped,
    )


@router.post("/normalize-requirements", response_model=NormalizeRequirementsResponse)
async def normalize(request: NormalizeRequirementsRequest):
    return NormalizeRequirementsResponse(
        normalized_requirements=normalize_requirements(request.raw_requirements)
    )


@router.post("/estimate-compensation", response_model=CompensationResponse)
async def estimate(request: CompensationRequest, services: ServiceContainer = Depends(get_services)):
    try:
        compensation = await estimate_compensation(
            services.provider,
            request.role,
            request.location,
            request.experience,
            request.skills,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return CompensationResponse(compensation=compensation)


# ==========================================
# Sessions
# ==========================================

def _session_or_404(services: ServiceContainer, session_id: str) -> IntakeSession:
    session = services.sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
    return session


@router.post("/sessions", response_model=SessionState, status_code=201)
async def create_session(services: ServiceContainer = Depends(get_services)):
    session = services.sessions.create()
    return session.to_dict()


@router.get("/sessions/{session_id}", response_model=SessionState)
async def get_session(session_id: str, services: ServiceContainer = Depends(get_services)):
    return _session_or_404(services, session_id).to_dict()


@router.delete("/sessions/{session_id}")
async def delete_session(session_id: str, services: ServiceContainer = Depends(get_services)):
    if not services.sessions.delete(session_id):
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
    return {"deleted": True, "session_id": session_id}


@router.post("/sessions/{session_id}/messages", response_model=SessionReply)
async def post_session_message(
    session_id: str,
    request: SessionMessageRequest,
    background_tasks: BackgroundTasks,
    services: ServiceContainer = Depends(get_services),
):
    """
    Add a hiring-manager message to the session.

    The assistant reply is returned immediately; requirements are
    re-extracted in the background (debounced, newest result wins).
    """
    session = _session_or_404(services, session_id)

    # Turns are recorded only once the reply succeeds; a failed call leaves the session as it was
    turn = ConversationTurn(role="user", content=request.content)
    reply = await services.assistant.reply(session.messages + [turn])

    session.add_user_message(request.content)
    session.add_assistant_message(reply)

    background_tasks.add_task(session.refresh_requirements)

    return SessionReply(
        session_id=session.session_id,
        reply=reply,
        preview_ready=preview_ready(session.messages),
        requirements=session.requirements,
    )
