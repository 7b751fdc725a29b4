"""Shapes that language-model responses must conform to before they are used."""
from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .gaps import Importance
from .resume import EducationStatus


class _Response(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class MissingField(_Response):
    field: str
    section: str
    importance: Importance
    question: str


class GapAnalysis(_Response):
    missing_fields: List[MissingField] = Field(alias="missingFields")
    suggestions: List[str]
    is_complete: bool = Field(alias="isComplete")


class AnalysisStatus(str, Enum):
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    CREDENTIAL_REQUIRED = "credential_required"


class GapAnalysisResult(BaseModel):
    status: AnalysisStatus
    analysis: Optional[GapAnalysis] = None
    message: str = ""

    @property
    def available(self) -> bool:
        return self.status == AnalysisStatus.AVAILABLE


class ParsedPersonalInfo(_Response):
    full_name: str = Field(alias="fullName")
    email: Optional[str] = None
    phone: Optional[str] = None
    current_address: Optional[str] = Field(default=None, alias="currentAddress")


class ParsedEducation(_Response):
    school_name: str = Field(alias="schoolName")
    start_date: Optional[str] = Field(default=None, alias="startDate")
    end_date: Optional[str] = Field(default=None, alias="endDate")
    status: EducationStatus


class ParsedWork(_Response):
    company_name: str = Field(alias="companyName")
    start_date: Optional[str] = Field(default=None, alias="startDate")
    end_date: Optional[str] = Field(default=None, alias="endDate")
    role: str
    description: Optional[str] = None


class SectionConfidence(_Response):
    personal_info: float = Field(alias="personalInfo", ge=0, le=1)
    education: float = Field(ge=0, le=1)
    work_history: float = Field(alias="workHistory", ge=0, le=1)
    skills: float = Field(ge=0, le=1)


class ParsedCV(_Response):
    personal_info: ParsedPersonalInfo = Field(alias="personalInfo")
    education: List[ParsedEducation] = Field(default_factory=list)
    work_history: List[ParsedWork] = Field(default_factory=list, alias="workHistory")
    skills: List[str] = Field(default_factory=list)
    confidence: SectionConfidence


class Transliteration(_Response):
    katakana: str
    pronunciation: str
    notes: Optional[str] = None

    @field_validator("katakana")
    @classmethod
    def katakana_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("katakana must not be empty")
        return v.strip()
