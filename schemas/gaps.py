from __future__ import annotations

from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class Importance(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class GapKind(str, Enum):
    MISSING = "missing"
    TOO_SHORT = "too_short"
    MISSING_CONTEXT = "missing_context"


class Gap(BaseModel):
    model_config = ConfigDict(frozen=True)

    field_path: str
    section_label: str
    importance: Importance
    kind: GapKind = GapKind.MISSING
    prompt_question: str


class GapReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    gaps: List[Gap] = Field(default_factory=list)
    is_complete: bool = True

    def field_paths(self) -> List[str]:
        return [gap.field_path for gap in self.gaps]

    def find(self, field_path: str) -> List[Gap]:
        return [gap for gap in self.gaps if gap.field_path == field_path]
