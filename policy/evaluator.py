"""
Field-completeness analysis for an applicant record.

``evaluate`` walks a record against the active tier's policy and returns a
``GapReport``. Gaps come out in a fixed section order (personal, family and
physical stats, education, work history, skills, motivation) so evaluating an
unchanged record always yields an identical report.
"""
from __future__ import annotations

from typing import Any, List, Optional

from schemas.gaps import Gap, GapKind, GapReport, Importance
from schemas.resume import ApplicantRecord, WorkEntry
from schemas.validation import MIN_MOTIVATION_LENGTH

from .tiers import IDENTITY_FIELDS, TierPolicy, importance_of, policy_for

SECTION_LABELS = {
    "personalInfo": "Personal Information",
    "familyDetails": "Family Details",
    "physicalStats": "Physical Stats",
    "education": "Education",
    "workHistory": "Work History",
    "skills": "Skills & Qualifications",
    "motivation": "Motivation",
}

FIELD_LABELS = {
    "personalInfo.fullName": "full name",
    "personalInfo.katakanaName": "name in Katakana",
    "personalInfo.birthDate": "date of birth",
    "personalInfo.currentAddress": "current address",
    "personalInfo.email": "email address",
    "personalInfo.phone": "phone number",
    "personalInfo.familyDetails": "family members",
    "personalInfo.physicalStats": "physical details (height, weight, dominant hand)",
    "personalInfo.physicalStats.heightCm": "height in cm",
    "personalInfo.physicalStats.weightKg": "weight in kg",
    "education": "education history",
    "workHistory": "work history",
    "skills.jlptLevel": "JLPT level",
    "skills.sswCertificates": "SSW skill certificates",
    "skills.technicalSkills": "technical skills",
    "motivation.reasonForApplying": "reason for applying",
    "motivation.selfPR": "self-PR",
}

FAMILY_FIELDS = (("name", "name"), ("relationship", "relationship"), ("occupation", "occupation"))
SKILL_FIELDS = (
    ("skills.jlptLevel", "jlpt_level"),
    ("skills.sswCertificates", "ssw_certificates"),
    ("skills.technicalSkills", "technical_skills"),
)
MOTIVATION_FIELDS = (
    ("motivation.reasonForApplying", "reason_for_applying"),
    ("motivation.selfPR", "self_pr"),
)


def evaluate(record: ApplicantRecord) -> GapReport:
    policy = policy_for(record.tier)
    required = policy.required_fields
    gaps: List[Gap] = []

    gaps.extend(_personal_gaps(record, policy))
    gaps.extend(_tier_section_gaps(record, policy))

    if "education" in required and not record.education:
        gaps.append(_gap(policy, "education", "education"))
    gaps.extend(_work_history_gaps(record, policy))

    for path, attr in SKILL_FIELDS:
        if path in required and is_blank(getattr(record.skills, attr)):
            gaps.append(_gap(policy, path, "skills"))

    for path, attr in MOTIVATION_FIELDS:
        if path not in required:
            continue
        text = getattr(record.motivation, attr).strip()
        if not text:
            gaps.append(_gap(policy, path, "motivation"))
        elif len(text) < MIN_MOTIVATION_LENGTH:
            gaps.append(
                Gap(
                    field_path=path,
                    section_label=SECTION_LABELS["motivation"],
                    importance=Importance.MEDIUM,
                    kind=GapKind.TOO_SHORT,
                    prompt_question=(
                        f"Your {FIELD_LABELS[path]} is quite short. Could you expand it "
                        f"to at least {MIN_MOTIVATION_LENGTH} characters with more detail?"
                    ),
                )
            )

    return GapReport(gaps=gaps, is_complete=not gaps)


def is_blank(value: Any) -> bool:
    """None, whitespace-only strings and empty collections all count as not provided."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, frozenset, dict)):
        return len(value) == 0
    return False


def _personal_gaps(record: ApplicantRecord, policy: TierPolicy) -> List[Gap]:
    info = record.personal_info
    values = {
        "personalInfo.fullName": info.full_name,
        "personalInfo.katakanaName": info.katakana_name,
        "personalInfo.birthDate": info.birth_date,
        "personalInfo.currentAddress": info.current_address,
        "personalInfo.email": info.email,
        "personalInfo.phone": info.phone,
    }
    return [
        _gap(policy, path, "personalInfo")
        for path in IDENTITY_FIELDS
        if path in policy.required_fields and is_blank(values[path])
    ]


def _tier_section_gaps(record: ApplicantRecord, policy: TierPolicy) -> List[Gap]:
    info = record.personal_info
    required = policy.required_fields
    gaps: List[Gap] = []

    if "personalInfo.familyDetails" in required:
        if is_blank(info.family_details):
            gaps.append(_gap(policy, "personalInfo.familyDetails", "familyDetails"))
        else:
            for i, member in enumerate(info.family_details):
                for wire, attr in FAMILY_FIELDS:
                    if is_blank(getattr(member, attr)):
                        path = f"personalInfo.familyDetails[{i}].{wire}"
                        gaps.append(
                            _gap(
                                policy,
                                path,
                                "familyDetails",
                                question=f"What is the {wire} of family member #{i + 1}?",
                            )
                        )

    if "personalInfo.physicalStats" in required:
        stats = info.physical_stats
        if stats is None:
            gaps.append(_gap(policy, "personalInfo.physicalStats", "physicalStats"))
        else:
            if stats.height_cm is None:
                gaps.append(_gap(policy, "personalInfo.physicalStats.heightCm", "physicalStats"))
            if stats.weight_kg is None:
                gaps.append(_gap(policy, "personalInfo.physicalStats.weightKg", "physicalStats"))
    return gaps


def _work_history_gaps(record: ApplicantRecord, policy: TierPolicy) -> List[Gap]:
    if "workHistory" not in policy.required_fields:
        return []
    if not record.work_history:
        return [_gap(policy, "workHistory", "workHistory")]
    gaps = []
    for i, entry in enumerate(record.work_history):
        if is_blank(entry.description):
            gaps.append(
                Gap(
                    field_path=f"workHistory[{i}].description",
                    section_label=SECTION_LABELS["workHistory"],
                    importance=importance_of(policy.tier, f"workHistory[{i}].description"),
                    kind=GapKind.MISSING_CONTEXT,
                    prompt_question=_context_question(entry),
                )
            )
    return gaps


def _context_question(entry: WorkEntry) -> str:
    role = entry.role.strip() or "your role"
    company = entry.company_name.strip() or "this company"
    return f"Could you briefly describe what you did as {role} at {company}?"


def _gap(
    policy: TierPolicy, path: str, section: str, *, question: Optional[str] = None
) -> Gap:
    section_label = SECTION_LABELS[section]
    if question is None:
        label = FIELD_LABELS.get(path, path)
        question = f"Your {label} ({section_label}) is missing. Could you provide it?"
    return Gap(
        field_path=path,
        section_label=section_label,
        importance=importance_of(policy.tier, path),
        kind=GapKind.MISSING,
        prompt_question=question,
    )
