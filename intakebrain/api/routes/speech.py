"""
Speech API Routes
Voice input (Whisper) and spoken replies (TTS)
"""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import Response

from intakebrain.api.dependencies import ServiceContainer, get_services
from intakebrain.exceptions import SpeechServiceError
from intakebrain.models import TextToSpeechRequest, TranscriptionResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/speech-to-text", response_model=TranscriptionResponse)
async def speech_to_text(
    audio: UploadFile = File(...),
    services: ServiceContainer = Depends(get_services),
):
    """Transcribe recorded audio for voice input."""
    filename = audio.filename or "audio.webm"
    logger.info(f"🎤 Audio transcription request: {filename}")

    # One byte past the limit is enough for the size check to reject it
    audio_bytes = await audio.read(services.settings.max_audio_bytes + 1)
    try:
        text = await services.speech.transcribe(audio_bytes, filename)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SpeechServiceError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return TranscriptionResponse(text=text)


@router.post("/text-to-speech")
async def text_to_speech(
    request: TextToSpeechRequest,
    services: ServiceContainer = Depends(get_services),
):
    """Speak an assistant reply; returns MP3 bytes."""
    try:
        audio = await services.speech.synthesize(request.text, request.voice)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SpeechServiceError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return Response(content=audio, media_type="audio/mpeg")
