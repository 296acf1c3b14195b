"""Application configuration."""
from functools import lru_cache
from typing import List, Optional, Any
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator

def clean_int_value(v: Any) -> int:
    """Clean integer values from environment variables."""
    if isinstance(v, str):
        # Remove any comments and whitespace
        v = v.split('#')[0].strip()
    return int(v)

class Settings(BaseSettings):
    # Application settings
    PROJECT_NAME: str = "Lunchbox.ai"
    API_V1_STR: str = "/api/v1"
    BACKEND_CORS_ORIGINS: List[str] = ["*"]
    APP_VERSION: str = "0.1.0"
    ENVIRONMENT: str = "development"
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Every redirect the app builds starts from this origin
    PUBLIC_BASE_URL: str = "http://localhost:3000"

    # Logging settings
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s"
    LOG_DIR: Optional[str] = None

    # Client storage ("memory" or "redis")
    STORAGE_BACKEND: str = "memory"
    REDIS_URL: str = "redis://localhost:6379/0"

    # Client session tokens
    JWT_SECRET_KEY: str = "change-me-to-a-long-random-secret-key"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 30
    SESSION_COOKIE_NAME: str = "lunchbox_session"

    # In-process conversations; idle ones expire and the oldest are evicted
    CONVERSATION_CACHE_SIZE: int = 1000
    CONVERSATION_TTL_SECONDS: int = 60 * 60 * 2

    # Chat completion (Groq, OpenAI compatible)
    GROQ_API_KEY: str = ""
    GROQ_BASE_URL: str = "https://api.groq.com/openai/v1"
    GROQ_MODEL: str = "llama3-8b-8192"

    # Supabase auth
    SUPABASE_URL: Optional[str] = None
    SUPABASE_ANON_KEY: Optional[str] = None

    # OAuth - Google
    GOOGLE_CLIENT_ID: Optional[str] = None
    GOOGLE_CLIENT_SECRET: Optional[str] = None

    # OAuth - Discord
    DISCORD_CLIENT_ID: Optional[str] = None
    DISCORD_CLIENT_SECRET: Optional[str] = None

    # OAuth - Spotify
    SPOTIFY_CLIENT_ID: Optional[str] = None
    SPOTIFY_CLIENT_SECRET: Optional[str] = None
    SPOTIFY_SCOPES: str = " ".join([
        'user-read-private',
        'user-read-email',
        'user-read-playback-state',
        'user-modify-playback-state',
        'user-read-currently-playing',
        'playlist-read-private',
        'playlist-read-collaborative',
        'playlist-modify-private',
        'streaming'
    ])

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"  # Allow extra fields in the environment
    )

    _clean_ints = field_validator(
        'PORT', 'ACCESS_TOKEN_EXPIRE_MINUTES', 'CONVERSATION_CACHE_SIZE', 'CONVERSATION_TTL_SECONDS',
        mode='before')(clean_int_value)

    @field_validator('PUBLIC_BASE_URL', 'SUPABASE_URL', mode='after')
    @classmethod
    def strip_trailing_slash(cls, v: Optional[str]) -> Optional[str]:
        return v.rstrip('/') if v else v

    @property
    def supabase_enabled(self) -> bool:
        return bool(self.SUPABASE_URL and self.SUPABASE_ANON_KEY)

    @property
    def identity_callback_url(self) -> str:
        return f"{self.PUBLIC_BASE_URL}/auth/callback"

    @property
    def spotify_callback_url(self) -> str:
        return f"{self.PUBLIC_BASE_URL}/auth/spotify/callback"

@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
