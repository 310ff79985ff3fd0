"""
API Models
Request / response bodies for the HTTP endpoints
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from intakebrain.models.requirements import ConversationTurn, Requirements


# ==========================================
# Chat
# ==========================================

class ChatRequest(BaseModel):
    messages: List[ConversationTurn] = Field(default_factory=list)
    stream: bool = False


class ChatResponse(BaseModel):
    message: str
    preview_ready: bool = False


# ==========================================
# Extraction
# ==========================================

class ExtractRequirementsRequest(BaseModel):
    """Conversation so far plus the record accumulated by earlier calls"""
    messages: List[ConversationTurn] = Field(..., max_length=500)
    existing_requirements: Optional[Requirements] = None


class ExtractRequirementsResponse(BaseModel):
    extracted_requirements: Requirements
    ai_skipped: bool = False


class NormalizeRequirementsRequest(BaseModel):
    raw_requirements: Optional[Requirements] = None


class NormalizeRequirementsResponse(BaseModel):
    normalized_requirements: Requirements


class CompensationRequest(BaseModel):
    role: Optional[str] = None
    location: Optional[str] = None
    experience: Optional[List[str]] = None
    skills: Optional[List[str]] = None


class CompensationResponse(BaseModel):
    compensation: str


# ==========================================
# Speech
# ==========================================

class TranscriptionResponse(BaseModel):
    text: str


class TextToSpeechRequest(BaseModel):
    text: str = Field(..., max_length=4096)
    voice: Optional[str] = None


# ==========================================
# Sessions
# ==========================================

class SessionMessageRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=20000)


class SessionState(BaseModel):
    session_id: str
    messages: List[ConversationTurn]
    requirements: Requirements
    preview_ready: bool
    created_at: str
    updated_at: str


class SessionReply(BaseModel):
    session_id: str
    reply: str
    preview_ready: bool
    requirements: Requirements
