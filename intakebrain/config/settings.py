"""
Application Settings
Loads configuration from environment variables
"""

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings

from intakebrain.config.env_loader import load_env


class Settings(BaseSettings):
    """Application configuration"""

    # ===== APPLICATION =====
    app_name: str = "IntakeBrain Hiring Intake"
    app_env: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # ===== OPENAI =====
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o"
    openai_chat_model: str = "gpt-4o"
    openai_extraction_temperature: float = 0.1
    openai_chat_temperature: float = 0.7
    openai_chat_max_tokens: int = 1000
    openai_timeout_seconds: float = 30.0

    # ===== SPEECH =====
    stt_model: str = "whisper-1"
    tts_model: str = "tts-1"
    tts_default_voice: str = "nova"
    tts_speed: float = 1.0
    max_audio_bytes: int = 25 * 1024 * 1024  # Whisper upload limit

    # ===== CACHE =====
    redis_url: Optional[str] = None
    cache_max_size: int = 1000
    extraction_cache_ttl_seconds: float = 30.0
    cache_key_prefix_chars: int = 100
    cache_sweep_probability: float = 0.1

    # ===== RETRY =====
    retry_max_attempts: int = 3
    retry_base_delay_ms: int = 1000
    rate_limit_buffer_ms: int = 100

    # ===== EXTRACTION HEURISTICS =====
    skip_never_up_to_user_turns: int = 2
    skip_short_message_chars: int = 10
    skip_comprehensive_message_chars: int = 50
    comprehensive_min_skills: int = 2
    comprehensive_min_qualities: int = 2
    jitter_min_ms: int = 200
    jitter_max_ms: int = 700

    # ===== SESSIONS =====
    extraction_debounce_seconds: float = 1.0

    # ===== API =====
    api_bind_host: str = "0.0.0.0"
    api_port: int = 8000
    api_reload: bool = False

    # CORS
    cors_origins: List[str] = ["http://localhost:3000", "http://localhost:8080"]
    cors_allow_credentials: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def has_openai(self) -> bool:
        """Check if an OpenAI API key is configured."""
        return bool(self.openai_api_key)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get settings singleton (loads .env files first)."""
    load_env()
    return Settings()
