from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Tuple

from schemas.gaps import Importance
from schemas.resume import VisaTier


class LayoutKind(str, Enum):
    STANDARD = "standard"  # JIS Rirekisho
    EXTENDED = "extended"  # Bio-Data


FAMILY_DETAILS = "familyDetails"
PHYSICAL_STATS = "physicalStats"

IDENTITY_FIELDS: Tuple[str, ...] = (
    "personalInfo.fullName",
    "personalInfo.katakanaName",
    "personalInfo.birthDate",
    "personalInfo.currentAddress",
    "personalInfo.email",
    "personalInfo.phone",
)
EXPECTED_LISTS: Tuple[str, ...] = ("education", "workHistory")


@dataclass(frozen=True)
class TierPolicy:
    tier: VisaTier
    layout: LayoutKind
    critical_fields: Tuple[str, ...]
    sections: FrozenSet[str]

    @property
    def required_fields(self) -> FrozenSet[str]:
        return frozenset(IDENTITY_FIELDS + EXPECTED_LISTS + self.critical_fields)


POLICIES: Dict[VisaTier, TierPolicy] = {
    VisaTier.ENGINEER: TierPolicy(
        tier=VisaTier.ENGINEER,
        layout=LayoutKind.STANDARD,
        critical_fields=(
            "skills.technicalSkills",
            "skills.jlptLevel",
            "motivation.reasonForApplying",
        ),
        sections=frozenset(),
    ),
    VisaTier.SSW: TierPolicy(
        tier=VisaTier.SSW,
        layout=LayoutKind.STANDARD,
        critical_fields=(
            "skills.sswCertificates",
            "skills.technicalSkills",
            "personalInfo.physicalStats",
        ),
        sections=frozenset({PHYSICAL_STATS}),
    ),
    VisaTier.TITP: TierPolicy(
        tier=VisaTier.TITP,
        layout=LayoutKind.EXTENDED,
        critical_fields=(
            "personalInfo.familyDetails",
            "personalInfo.physicalStats",
            "motivation.reasonForApplying",
            "motivation.selfPR",
        ),
        sections=frozenset({FAMILY_DETAILS, PHYSICAL_STATS}),
    ),
}

# Importance of a gap on a field that is required but absent. Tier-critical
# fields are always high; anything not listed here falls back to medium.
FIELD_IMPORTANCE: Dict[str, Importance] = {
    **{path: Importance.HIGH for path in IDENTITY_FIELDS},
    "education": Importance.MEDIUM,
    "workHistory": Importance.MEDIUM,
    "personalInfo.physicalStats.heightCm": Importance.MEDIUM,
    "personalInfo.physicalStats.weightKg": Importance.MEDIUM,
    "workHistory.description": Importance.LOW,
}


def policy_for(tier: VisaTier) -> TierPolicy:
    return POLICIES[VisaTier(tier)]


def required_fields(tier: VisaTier) -> FrozenSet[str]:
    return policy_for(tier).required_fields


def tier_sections(tier: VisaTier) -> FrozenSet[str]:
    return policy_for(tier).sections


def layout_for(tier: VisaTier) -> LayoutKind:
    return policy_for(tier).layout


def importance_of(tier: VisaTier, field_path: str) -> Importance:
    """Static importance for a gap at ``field_path``; list indices are ignored."""
    if field_path in policy_for(tier).critical_fields:
        return Importance.HIGH
    generic = _strip_indices(field_path)
    return FIELD_IMPORTANCE.get(generic, Importance.MEDIUM)


def critical_field_table() -> Dict[str, list]:
    """Tier → critical field paths, in the shape handed to the gap-analysis model."""
    return {tier.value: list(policy.critical_fields) for tier, policy in POLICIES.items()}


def _strip_indices(field_path: str) -> str:
    parts = []
    for part in field_path.split("."):
        bracket = part.find("[")
        parts.append(part if bracket == -1 else part[:bracket])
    return ".".join(parts)
