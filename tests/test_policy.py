from policy.tiers import (
    LayoutKind,
    critical_field_table,
    importance_of,
    layout_for,
    required_fields,
    tier_sections,
)
from schemas.gaps import Importance
from schemas.resume import VisaTier


def test_engineer_requires_skills_and_reason():
    required = required_fields(VisaTier.ENGINEER)
    assert {"skills.technicalSkills", "skills.jlptLevel", "motivation.reasonForApplying"} <= required
    assert "personalInfo.physicalStats" not in required
    assert "motivation.selfPR" not in required


def test_ssw_requires_certificates_and_physical_stats():
    required = required_fields(VisaTier.SSW)
    assert {"skills.sswCertificates", "skills.technicalSkills", "personalInfo.physicalStats"} <= required
    assert "skills.jlptLevel" not in required


def test_titp_requires_family_physical_and_both_motivation_fields():
    required = required_fields(VisaTier.TITP)
    assert {
        "personalInfo.familyDetails",
        "personalInfo.physicalStats",
        "motivation.reasonForApplying",
        "motivation.selfPR",
    } <= required


def test_every_tier_requires_identity_and_history():
    for tier in VisaTier:
        required = required_fields(tier)
        assert "personalInfo.fullName" in required
        assert "education" in required
        assert "workHistory" in required


def test_tier_sections_and_layouts():
    assert tier_sections(VisaTier.TITP) == {"familyDetails", "physicalStats"}
    assert tier_sections(VisaTier.SSW) == {"physicalStats"}
    assert tier_sections(VisaTier.ENGINEER) == frozenset()
    assert layout_for(VisaTier.TITP) == LayoutKind.EXTENDED
    assert layout_for(VisaTier.ENGINEER) == LayoutKind.STANDARD
    assert layout_for(VisaTier.SSW) == LayoutKind.STANDARD


def test_importance_table():
    assert importance_of(VisaTier.ENGINEER, "skills.jlptLevel") == Importance.HIGH
    assert importance_of(VisaTier.SSW, "skills.jlptLevel") == Importance.MEDIUM
    assert importance_of(VisaTier.TITP, "personalInfo.email") == Importance.HIGH
    assert importance_of(VisaTier.TITP, "education") == Importance.MEDIUM
    assert importance_of(VisaTier.TITP, "workHistory[3].description") == Importance.LOW


def test_critical_field_table_covers_all_tiers():
    table = critical_field_table()
    assert set(table) == {"ENGINEER", "SSW", "TITP"}
    assert table["SSW"] == ["skills.sswCertificates", "skills.technicalSkills", "personalInfo.physicalStats"]
