import os
from pydantic_settings import BaseSettings


def _parse_cors_origins() -> list[str] | None:
    """Parse CORS_ORIGINS env var as comma-separated string or JSON list."""
    raw = os.environ.get("CORS_ORIGINS")
    if not raw:
        return None
    if raw.startswith("["):
        import json
        return json.loads(raw)
    return [o.strip() for o in raw.split(",") if o.strip()]


class Settings(BaseSettings):
    gemini_api_key: str = ""
    llm_model: str = "gemini-2.5-flash"
    llm_temperature: float = 0.2
    llm_max_output_tokens: int = 2048
    auditor_system_prompt: str = "You are an OHS compliance auditor."

    max_upload_size_mb: int = 10
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "https://vendoriq-chatbot.vercel.app",
    ]
    debug: bool = False
    log_level: str = "INFO"

    # Review pipeline settings
    identity_match_strategy: str = "token_overlap"  # "token_overlap" | "exact_normalized"
    onboarding_question_number: int = 1
    ocr_languages: list[str] = ["tha", "ind", "vie", "eng"]
    upload_tmp_dir: str = ""  # empty -> system temp dir
    rubric_path: str = ""  # empty -> built-in OHS checklist

    # Storage
    store_backend: str = "memory"  # "memory" | "json"
    store_path: str = "data/review_store.json"

    # Rate limiting for LLM-backed endpoints
    rate_limit_enabled: bool = True
    upload_rate_limit: str = "10/minute"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


_cors_override = _parse_cors_origins()
settings = Settings(**{"cors_origins": _cors_override} if _cors_override else {})
