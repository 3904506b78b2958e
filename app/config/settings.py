from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Needed by maintenance scripts that bypass RLS

    # Storage
    chat_media_bucket: str = "chat-media"
    chat_media_cache_control: str = "3600"

    # OpenRouter (quiz generation)
    openrouter_api_key: str = ""
    openrouter_api_url: str = "https://openrouter.ai/api/v1/chat/completions"
    openrouter_model: str = "google/gemini-2.5-pro-exp-03-25:free"
    openrouter_referer: str = "https://puzzlechat.app"
    openrouter_title: str = "PuzzleChat"
    openrouter_timeout: float = 60.0

    # Matching
    match_min_tag_matches: int = 1
    match_max_group_size: int = 6
    fallback_max_extra_members: int = 5
    quiz_max_questions: int = 7

    # Calls
    ice_servers: str = "stun:stun.l.google.com:19302,stun:stun1.l.google.com:19302"

    # App
    app_name: str = "bulbulchat-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def get_ice_servers(self) -> List[dict]:
        return [{"urls": u.strip()} for u in self.ice_servers.split(",") if u.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
