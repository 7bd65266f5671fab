"""
Process configuration and the supported language list.

Rationale:
- Values come from the environment (a local .env file is loaded on import).
- Settings are a frozen object handed to the AI client and orchestrators
  explicitly, so tests can build their own without touching os.environ.
- One language list drives both the translation fan-out and /languages.
"""

import os
from typing import List, Optional, Tuple

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

load_dotenv()

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_MODEL = "google/gemini-pro-1.5"
DEFAULT_MAX_TOKENS = 1024
DEFAULT_TIMEOUT_SECONDS = 120.0
# 5 MiB upload ceiling
DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024


class LanguageInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    name: str
    flag: str = ""
    prompt_label: str


LANGUAGE_CATALOG: Tuple[LanguageInfo, ...] = (
    LanguageInfo(code="english", name="English", flag="🇺🇸", prompt_label="English"),
    LanguageInfo(code="hindi", name="हिंदी", flag="🇮🇳", prompt_label="Hindi (हिंदी)"),
    LanguageInfo(code="kannada", name="ಕನ್ನಡ", flag="🇮🇳", prompt_label="Kannada (ಕನ್ನಡ)"),
    LanguageInfo(code="marathi", name="मराठी", flag="🇮🇳", prompt_label="Marathi (मराठी)"),
)

DEFAULT_LANGUAGE_CODES = tuple(lang.code for lang in LANGUAGE_CATALOG)


def resolve_languages(codes) -> Tuple[LanguageInfo, ...]:
    """
    Turn language codes into LanguageInfo entries.
    Codes missing from the catalog are kept, using the code itself as label.
    """
    known = {lang.code: lang for lang in LANGUAGE_CATALOG}
    resolved: List[LanguageInfo] = []
    for raw in codes:
        code = raw.strip().lower()
        if not code or any(lang.code == code for lang in resolved):
            continue
        resolved.append(known.get(code) or LanguageInfo(code=code, name=code, prompt_label=code))
    if not resolved:
        raise ValueError("At least one insight language must be configured")
    return tuple(resolved)


def _float_or_none(value: Optional[str], default: Optional[float]) -> Optional[float]:
    if value is None or value == "":
        return default
    if value.lower() == "none":
        return None
    return float(value)


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    api_key: Optional[str] = None
    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    max_tokens: int = DEFAULT_MAX_TOKENS
    request_timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    # first entry is the language the analysis is written in
    languages: Tuple[LanguageInfo, ...] = LANGUAGE_CATALOG

    @classmethod
    def from_env(cls) -> "Settings":
        # Credential stays optional here; it is checked on first AI call
        api_key = os.getenv("OPENROUTER_API_KEY") or os.getenv("LLM_API_KEY")
        language_codes = os.getenv("INSIGHT_LANGUAGES")
        return cls(
            api_key=api_key or None,
            base_url=os.getenv("OPENROUTER_BASE_URL", DEFAULT_BASE_URL),
            model=os.getenv("OPENROUTER_MODEL", DEFAULT_MODEL),
            max_tokens=int(os.getenv("LLM_MAX_TOKENS", str(DEFAULT_MAX_TOKENS))),
            request_timeout=_float_or_none(os.getenv("LLM_TIMEOUT_SECONDS"), DEFAULT_TIMEOUT_SECONDS),
            max_upload_bytes=int(os.getenv("MAX_UPLOAD_BYTES", str(DEFAULT_MAX_UPLOAD_BYTES))),
            languages=resolve_languages(
                language_codes.split(",") if language_codes else DEFAULT_LANGUAGE_CODES
            ),
        )
