"""
Pydantic request/response models.

Rationale:
- Define simple, explicit input/output contracts for the API.
- TabularData enforces row/column alignment once, at construction, so the
  prompt builders and orchestrators can trust it.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .config import LanguageInfo


class TabularData(BaseModel):
    model_config = ConfigDict(frozen=True)

    headers: List[str]
    rows: List[List[str]] = Field(default_factory=list)

    @model_validator(mode="after")
    def _rows_match_headers(self):
        width = len(self.headers)
        for index, row in enumerate(self.rows):
            if len(row) != width:
                raise ValueError(
                    f"Row {index} has {len(row)} cells but there are {width} headers"
                )
        return self

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def sample(self, n: int) -> List[List[str]]:
        return [list(row) for row in self.rows[:n]]


# Language code -> insight text, in configured language order
InsightBundle = Dict[str, str]


class ChartDescriptor(BaseModel):
    id: str
    title: str
    type: str  # "bar" | "line" | "pie" | anything else
    image: str
    description: str


class FileMeta(BaseModel):
    name: str
    content_type: Optional[str] = None
    size: Optional[int] = None


class UploadResult(BaseModel):
    file: FileMeta
    data: TabularData


class AnalysisRequest(BaseModel):
    csv_data: TabularData
    # accepted so existing clients can keep sending it; every configured
    # language is produced regardless
    language: Optional[str] = None


class AnalysisResponse(BaseModel):
    insights: InsightBundle
    charts: List[ChartDescriptor] = Field(default_factory=list)


class ChatRequest(BaseModel):
    question: str = Field(min_length=1)
    csv_data: TabularData
    language: str = "english"


class ChatResponse(BaseModel):
    answer: str


__all__ = [
    "AnalysisRequest",
    "AnalysisResponse",
    "ChartDescriptor",
    "ChatRequest",
    "ChatResponse",
    "FileMeta",
    "InsightBundle",
    "LanguageInfo",
    "TabularData",
    "UploadResult",
]
