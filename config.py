from typing import Optional

from pydantic import PrivateAttr
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Surya Partner API"
    debug: bool = False
    log_level: str = "INFO"

    database_url: str = "sqlite+aiosqlite:///./surya_partner.db"
    cors_origins: str = "http://localhost:5173,http://127.0.0.1:5173"

    # OpenAI-compatible endpoint used for lead scoring
    openai_api_key: str = ""
    openai_base_url: Optional[str] = None
    lead_scoring_model: str = "gpt-4o-mini"
    lead_scoring_max_tokens: int = 1024
    lead_score_stale_days: int = 7
    lead_scoring_batch_delay_seconds: float = 1.0

    upload_dir: str = "./uploads"
    max_upload_bytes: int = 10 * 1024 * 1024

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    _is_sqlite: bool = PrivateAttr(default=False)
    _is_postgresql: bool = PrivateAttr(default=False)

    def model_post_init(self, __context: object) -> None:
        _scheme = self.database_url.split(":")[0].lower()
        object.__setattr__(self, "_is_sqlite", "sqlite" in _scheme)
        object.__setattr__(self, "_is_postgresql", "postgresql" in _scheme)

    @property
    def is_sqlite(self) -> bool:
        return self._is_sqlite

    @property
    def is_postgresql(self) -> bool:
        return self._is_postgresql

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def lead_scoring_enabled(self) -> bool:
        return bool(self.openai_api_key)


settings = Settings()
