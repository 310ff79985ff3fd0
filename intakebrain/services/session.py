"""
Intake Session - in-memory conversation state
Holds the turns and the latest requirements of one hiring-manager session
"""

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from intakebrain.extraction.orchestrator import ExtractionOrchestrator, ExtractionRun
from intakebrain.models import ConversationTurn, Requirements
from intakebrain.retry import Sleep
from intakebrain.services.chat_service import GREETING, preview_ready

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class IntakeSession:
    """
    In-memory intake session.

    Requirement refreshes are debounced and fenced by sequence number:
    every call to ``refresh_requirements`` takes the next number, only the
    newest call still pending after the debounce runs extraction, and a
    finished extraction is applied only if its number is newer than the
    last one applied.
    """

    def __init__(
        self,
        session_id: str,
        orchestrator: ExtractionOrchestrator,
        *,
        debounce_seconds: float = 1.0,
        sleep: Sleep = asyncio.sleep,
        greeting: Optional[str] = GREETING,
    ):
        self.session_id = session_id
        self.orchestrator = orchestrator
        self.debounce_seconds = debounce_seconds
        self._sleep = sleep

        self.messages: List[ConversationTurn] = []
        self.requirements = Requirements()
        self.last_run: Optional[ExtractionRun] = None

        self.created_at = _now()
        self.updated_at = self.created_at

        self._requested_seq = 0
        self._applied_seq = 0

        if greeting:
            self.add_assistant_message(greeting)

    def add_user_message(self, text: str) -> ConversationTurn:
        return self._add("user", text)

    def add_assistant_message(self, text: str) -> ConversationTurn:
        return self._add("assistant", text)

    def _add(self, role: str, text: str) -> ConversationTurn:
        turn = ConversationTurn(role=role, content=text)
        self.messages.append(turn)
        self.updated_at = _now()
        return turn

    @property
    def applied_sequence(self) -> int:
        return self._applied_seq

    def next_sequence(self) -> int:
        self._requested_seq += 1
        return self._requested_seq

    def apply(self, seq: int, requirements: Requirements) -> bool:
        """Apply an extraction result unless a newer one has already landed."""
        if seq <= self._applied_seq:
            logger.info(f"Session {self.session_id}: discarding stale extraction #{seq}")
            return False
        self._applied_seq = seq
        self.requirements = requirements
        self.updated_at = _now()
        return True

    async def refresh_requirements(self) -> bool:
        """Re-extract requirements from the current turns. Returns True if applied."""
        seq = self.next_sequence()

        if self.debounce_seconds > 0:
            await self._sleep(self.debounce_seconds)
        if seq != self._requested_seq:
            logger.debug(f"Session {self.session_id}: extraction #{seq} superseded during debounce")
            return False

        run = await self.orchestrator.run(list(self.messages), self.requirements)
        if not self.apply(seq, run.requirements):
            return False

        self.last_run = run
        logger.info(
            f"✅ Session {self.session_id}: requirements updated "
            f"(#{seq}, ai_skipped={run.ai_skipped})"
        )
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "messages": [turn.model_dump() for turn in self.messages],
            "requirements": self.requirements.model_dump(),
            "preview_ready": preview_ready(self.messages),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


class SessionStore:
    """In-memory session storage (simple, no persistence)."""

    def __init__(
        self,
        orchestrator: ExtractionOrchestrator,
        *,
        debounce_seconds: float = 1.0,
        sleep: Sleep = asyncio.sleep,
    ):
        self.orchestrator = orchestrator
        self.debounce_seconds = debounce_seconds
        self._sleep = sleep
        self._sessions: Dict[str, IntakeSession] = {}
        logger.info("✅ In-memory session store initialized")

    def create(self) -> IntakeSession:
        session_id = str(uuid.uuid4())
        session = IntakeSession(
            session_id,
            self.orchestrator,
            debounce_seconds=self.debounce_seconds,
            sleep=self._sleep,
        )
        self._sessions[session_id] = session
        logger.info(f"Created intake session {session_id}")
        return session

    def get(self, session_id: str) -> Optional[IntakeSession]:
        return self._sessions.get(session_id)

    def delete(self, session_id: str) -> bool:
        removed = self._sessions.pop(session_id, None)
        if removed:
            logger.info(f"Deleted intake session {session_id}")
        return removed is not None

    def __len__(self) -> int:
        return len(self._sessions)
