"""Conversational intake assistant that interviews the hiring manager."""
import logging
from typing import AsyncIterator, List, Sequence

from intakebrain.models import ConversationTurn
from intakebrain.services.llm_client import CompletionProvider, Message

logger = logging.getLogger(__name__)

GREETING = "Hi! What role are you hiring for today?"

PREVIEW_AFTER_USER_MESSAGES = 5
PREVIEW_MESSAGE = "Your first slate of candidates is ready! Tap 'Review Matches' to share your feedback."

SYSTEM_PROMPT = f"""You are a friendly intake assistant helping a hiring manager define a job role.
Your style: short, natural, and approachable. Avoid long explanations. Always end with a clear, focused question.

Flow:
1. Confirm role/title.
2. Confirm location (or remote).
3. Ask about key skills/tools.
4. Uncover deeper needs:
   - What problem will this hire solve?
   - What kind of person would thrive here?
   - Non-negotiables (mindset, traits, experience)?
   - What would make someone not a fit?

Guidelines:
- One question per message, max 15 words.
- No checklist dumps. Keep it conversational.
- Don't give hiring suggestions unless asked.
- Do not restate all previous info. Just move to the next question.

Examples:
"Got it. Where will this person be based, or is it remote?"
"Great. What skills or tools should they be strong in?"
"Perfect. What's the main problem you want them to solve?"

After {PREVIEW_AFTER_USER_MESSAGES} user messages, show preview:
"{PREVIEW_MESSAGE}\""""


def to_chat_messages(turns: Sequence[ConversationTurn]) -> List[Message]:
    return [{"role": turn.role, "content": turn.content} for turn in turns]


def preview_ready(turns: Sequence[ConversationTurn]) -> bool:
    """True once the manager has sent enough messages for a first candidate slate."""
    return sum(1 for turn in turns if turn.role == "user") >= PREVIEW_AFTER_USER_MESSAGES


class IntakeAssistant:
    def __init__(self, provider: CompletionProvider, system_prompt: str = SYSTEM_PROMPT):
        self.provider = provider
        self.system_prompt = system_prompt

    async def reply(self, turns: Sequence[ConversationTurn]) -> str:
        logger.info(f"Chat called with {len(turns)} messages")
        if not turns:
            return GREETING
        return await self.provider.complete_text(self.system_prompt, to_chat_messages(turns))

    async def stream_reply(self, turns: Sequence[ConversationTurn]) -> AsyncIterator[str]:
        logger.info(f"Streaming chat reply for {len(turns)} messages")
        if not turns:
            yield GREETING
            return
        async for chunk in self.provider.stream_text(self.system_prompt, to_chat_messages(turns)):
            yield chunk
