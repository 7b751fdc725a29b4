from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List

from .resume import CURRENT, ApplicantRecord

DATE_RE = re.compile(r"^\d{4}-\d{2}(-\d{2})?$")
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^\+?\d{6,16}$")
MIN_MOTIVATION_LENGTH = 10


@dataclass(frozen=True)
class FieldError:
    path: str
    message: str


class RecordValidationError(ValueError):
    """Raised when a record is exported while it still has field-level errors."""

    def __init__(self, errors: List[FieldError]):
        self.errors = list(errors)
        summary = "; ".join(f"{e.path}: {e.message}" for e in self.errors[:5])
        if len(self.errors) > 5:
            summary += f" (+{len(self.errors) - 5} more)"
        super().__init__(f"Record is not ready for export: {summary}")


def is_valid_date(value: str) -> bool:
    return bool(DATE_RE.match(value or ""))


def validate_record(record: ApplicantRecord) -> List[FieldError]:
    """
    Collect field-level errors that block export. Nothing is coerced; the record
    is reported on as-is, in section order.
    """
    errors: List[FieldError] = []
    info = record.personal_info

    def require(path: str, value, message: str) -> None:
        if not (value or "").strip():
            errors.append(FieldError(path, message))

    require("personalInfo.fullName", info.full_name, "Full name is required")
    require("personalInfo.katakanaName", info.katakana_name, "Katakana name is required")
    if not is_valid_date(info.birth_date):
        errors.append(FieldError("personalInfo.birthDate", "Invalid date format"))
    require("personalInfo.currentAddress", info.current_address, "Current address is required")
    if not EMAIL_RE.match(info.email or ""):
        errors.append(FieldError("personalInfo.email", "Invalid email format"))
    if not PHONE_RE.match(re.sub(r"[\s-]", "", info.phone or "")):
        errors.append(FieldError("personalInfo.phone", "Invalid phone format"))

    for i, member in enumerate(info.family_details or []):
        base = f"personalInfo.familyDetails[{i}]"
        require(f"{base}.name", member.name, "Name is required")
        require(f"{base}.relationship", member.relationship, "Relationship is required")
        require(f"{base}.occupation", member.occupation, "Occupation is required")

    for i, edu in enumerate(record.education):
        base = f"education[{i}]"
        require(f"{base}.schoolName", edu.school_name, "School name is required")
        if not is_valid_date(edu.start_date):
            errors.append(FieldError(f"{base}.startDate", "Invalid start date"))
        if not is_valid_date(edu.end_date):
            errors.append(FieldError(f"{base}.endDate", "Invalid end date"))

    for i, work in enumerate(record.work_history):
        base = f"workHistory[{i}]"
        require(f"{base}.companyName", work.company_name, "Company name is required")
        if not is_valid_date(work.start_date):
            errors.append(FieldError(f"{base}.startDate", "Invalid start date"))
        # The sentinel is checked before any date parsing.
        if not work.is_current and not is_valid_date(work.end_date):
            errors.append(
                FieldError(f"{base}.endDate", f'Use a date or "{CURRENT}"')
            )
        require(f"{base}.role", work.role, "Role is required")

    motivation = record.motivation
    if len(motivation.reason_for_applying.strip()) < MIN_MOTIVATION_LENGTH:
        errors.append(
            FieldError(
                "motivation.reasonForApplying",
                f"Reason must be at least {MIN_MOTIVATION_LENGTH} characters",
            )
        )
    if len(motivation.self_pr.strip()) < MIN_MOTIVATION_LENGTH:
        errors.append(
            FieldError(
                "motivation.selfPR",
                f"Self-PR must be at least {MIN_MOTIVATION_LENGTH} characters",
            )
        )
    return errors


def ensure_exportable(record: ApplicantRecord) -> ApplicantRecord:
    errors = validate_record(record)
    if errors:
        raise RecordValidationError(errors)
    return record
