from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, field_validator

CURRENT = "Current"


class VisaTier(str, Enum):
    ENGINEER = "ENGINEER"
    SSW = "SSW"
    TITP = "TITP"


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"


class JlptLevel(str, Enum):
    N1 = "N1"
    N2 = "N2"
    N3 = "N3"
    N4 = "N4"
    N5 = "N5"
    NONE = "None"


class EducationStatus(str, Enum):
    GRADUATED = "Graduated"
    DROPOUT = "Dropout"


class DominantHand(str, Enum):
    RIGHT = "Right"
    LEFT = "Left"


class RecordModel(BaseModel):
    """Base for record parts: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(populate_by_name=True)


class FamilyMember(RecordModel):
    name: str = ""
    relationship: str = ""
    age: Optional[int] = Field(default=None, ge=0)
    occupation: str = ""

    @field_validator("age", mode="before")
    @classmethod
    def coerce_age(cls, v):
        # Form inputs arrive as strings.
        if isinstance(v, str):
            stripped = v.strip()
            return int(stripped) if stripped else None
        return v


class PhysicalStats(RecordModel):
    height_cm: Optional[float] = Field(default=None, alias="heightCm")
    weight_kg: Optional[float] = Field(default=None, alias="weightKg")
    blood_type: Optional[str] = Field(default=None, alias="bloodType")
    dominant_hand: DominantHand = Field(default=DominantHand.RIGHT, alias="handz")

    @field_validator("height_cm", "weight_kg", mode="before")
    @classmethod
    def coerce_measure(cls, v):
        if isinstance(v, str):
            stripped = v.strip()
            return float(stripped) if stripped else None
        return v


class PersonalInfo(RecordModel):
    full_name: str = Field(default="", alias="fullName")
    katakana_name: str = Field(default="", alias="katakanaName")
    gender: Gender = Gender.MALE
    birth_date: str = Field(default="", alias="birthDate")
    current_address: str = Field(default="", alias="currentAddress")
    japan_address: Optional[str] = Field(default=None, alias="japanAddress")
    email: str = ""
    phone: str = ""
    photo_url: Optional[str] = Field(default=None, alias="photoUrl")
    family_details: Optional[List[FamilyMember]] = Field(
        default=None, alias="familyDetails"
    )
    physical_stats: Optional[PhysicalStats] = Field(default=None, alias="physicalStats")


class EducationEntry(RecordModel):
    school_name: str = Field(default="", alias="schoolName")
    start_date: str = Field(default="", alias="startDate")
    end_date: str = Field(default="", alias="endDate")
    status: EducationStatus = EducationStatus.GRADUATED


class WorkEntry(RecordModel):
    company_name: str = Field(default="", alias="companyName")
    start_date: str = Field(default="", alias="startDate")
    end_date: str = Field(
        default="",
        alias="endDate",
        description=f'A date string, or the literal "{CURRENT}" for an ongoing job.',
    )
    role: str = ""
    description: Optional[str] = None

    @property
    def is_current(self) -> bool:
        return self.end_date == CURRENT


class Skills(RecordModel):
    jlpt_level: Optional[JlptLevel] = Field(default=None, alias="jlptLevel")
    ssw_certificates: Optional[List[str]] = Field(default=None, alias="sswCertificates")
    technical_skills: Optional[List[str]] = Field(default=None, alias="technicalSkills")

    @field_validator("jlpt_level", mode="before")
    @classmethod
    def blank_level_is_unset(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("ssw_certificates", "technical_skills", mode="before")
    @classmethod
    def normalize_items(cls, v):
        return _coerce_string_list(v)


class Motivation(RecordModel):
    reason_for_applying: str = Field(default="", alias="reasonForApplying")
    self_pr: str = Field(default="", alias="selfPR")


class ApplicantRecord(RecordModel):
    tier: VisaTier = VisaTier.ENGINEER
    personal_info: PersonalInfo = Field(default_factory=PersonalInfo, alias="personalInfo")
    education: List[EducationEntry] = Field(default_factory=list)
    work_history: List[WorkEntry] = Field(default_factory=list, alias="workHistory")
    skills: Skills = Field(default_factory=Skills)
    motivation: Motivation = Field(default_factory=Motivation)

    @field_validator("personal_info", "skills", "motivation", mode="before")
    @classmethod
    def null_section_is_empty(cls, v):
        # Persisted blobs may carry `null` for a section that was never touched.
        return {} if v is None else v

    @field_validator("education", "work_history", mode="before")
    @classmethod
    def null_list_is_empty(cls, v):
        return [] if v is None else v

    def to_wire(self) -> Dict[str, Any]:
        """Plain nested dict with camelCase keys, as persisted and sent to the model."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def field_name_for(model: Type[BaseModel], key: str) -> str:
    """Resolve a wire alias or a Python field name to the Python field name."""
    if key in model.model_fields:
        return key
    for name, info in model.model_fields.items():
        if info.alias == key:
            return name
    raise KeyError(f"{model.__name__} has no field {key!r}")


def _coerce_string_list(value):
    if value is None:
        return None
    if isinstance(value, str):
        value = value.split(",")
    if isinstance(value, list):
        items = []
        for item in value:
            if item is None:
                continue
            text = str(item).strip()
            if text:
                items.append(text)
        return items
    return value
