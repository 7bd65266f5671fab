"""
Prompt builders for analysis, translation and chat.

Templates are plain text files under templates/ so wording can change without
touching code. All builders are pure functions.
"""

import json
import os
from functools import lru_cache
from typing import Any, Dict

from .config import LANGUAGE_CATALOG
from .schemas import TabularData

TEMPLATES_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "templates")
ANALYSIS_PROMPT_PATH = os.path.join(TEMPLATES_DIR, "analysis.txt")
TRANSLATION_PROMPT_PATH = os.path.join(TEMPLATES_DIR, "translation.txt")
CHAT_PROMPT_PATH = os.path.join(TEMPLATES_DIR, "chat.txt")

ANALYSIS_SAMPLE_ROWS = 5
CHAT_SAMPLE_ROWS = 3

LANGUAGE_LABELS: Dict[str, str] = {lang.code: lang.prompt_label for lang in LANGUAGE_CATALOG}


@lru_cache(maxsize=None)
def _read_prompt(path: str) -> str:
    """Read a prompt text file."""
    with open(path, "r", encoding="utf-8") as f:
        return f.read().strip()


def _to_json(obj: Any) -> str:
    return json.dumps(obj, indent=2, ensure_ascii=False)


def language_label(code: str) -> str:
    """Display label used in prompts; unknown codes are used as-is."""
    return LANGUAGE_LABELS.get(code, code)


def build_analysis_prompt(data: TabularData, language: str = "english") -> str:
    summary = {
        "rows": data.row_count,
        "columns": data.headers,
        "sample": data.sample(ANALYSIS_SAMPLE_ROWS),
    }
    return _read_prompt(ANALYSIS_PROMPT_PATH).format(
        language=language_label(language),
        summary=_to_json(summary),
    )


def build_translation_prompt(text: str, target_language: str) -> str:
    return _read_prompt(TRANSLATION_PROMPT_PATH).format(
        language=language_label(target_language),
        text=text,
    )


def build_chat_prompt(question: str, data: TabularData, language: str) -> str:
    return _read_prompt(CHAT_PROMPT_PATH).format(
        language=language_label(language),
        rows=data.row_count,
        columns=", ".join(data.headers),
        sample=_to_json(data.sample(CHAT_SAMPLE_ROWS)),
        question=question,
    )
