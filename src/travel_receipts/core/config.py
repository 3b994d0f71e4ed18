from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    environment: str = "dev"

    database_url: str = "sqlite:///./eval.sqlite"

    llm_provider: str = "openai"
    llm_base_url: str | None = None
    llm_timeout_seconds: float = 60.0
    llm_max_tokens: int = 700

    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    openai_base_url: str = "https://api.openai.com/v1"

    ollama_base_url: str = "http://127.0.0.1:11434/v1"
    ollama_model: str | None = None

    input_max_chars: int = 12000
    min_text_chars: int = 40

    ocr_max_pages: int = 3
    ocr_render_scale: float = 2.0
    ocr_timeout_seconds: float = 60.0
    tesseract_lang: str = "eng"


settings = Settings()
