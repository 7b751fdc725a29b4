import copy

import pytest

from policy.evaluator import evaluate
from policy.tiers import importance_of, required_fields
from schemas.gaps import GapKind, Importance
from schemas.resume import ApplicantRecord, VisaTier
from schemas.samples import sample_record


def _without(record: ApplicantRecord, path: str) -> ApplicantRecord:
    data = copy.deepcopy(record.to_wire())
    *parents, leaf = path.split(".")
    target = data
    for key in parents:
        target = target.setdefault(key, {})
    current = target.get(leaf)
    if isinstance(current, list):
        target[leaf] = []
    elif isinstance(current, str):
        target[leaf] = "   "
    else:
        target.pop(leaf, None)
    return ApplicantRecord.model_validate(data)


@pytest.mark.parametrize("tier", list(VisaTier))
def test_record_meeting_tier_requirements_is_complete(tier):
    report = evaluate(sample_record(tier))
    assert report.gaps == []
    assert report.is_complete


@pytest.mark.parametrize("tier", list(VisaTier))
def test_removing_any_required_field_reports_it(tier):
    complete = sample_record(tier)
    for path in sorted(required_fields(tier)):
        report = evaluate(_without(complete, path))
        matches = report.find(path)
        assert matches, f"{tier.value}: no gap for {path}"
        assert matches[0].importance == importance_of(tier, path)
        assert matches[0].kind == GapKind.MISSING
        assert not report.is_complete


def test_engineer_missing_skills_and_short_reason():
    record = ApplicantRecord.model_validate(
        {
            "tier": "ENGINEER",
            "skills": {"jlptLevel": None, "technicalSkills": []},
            "motivation": {"reasonForApplying": "ok"},
        }
    )
    report = evaluate(record)

    jlpt = report.find("skills.jlptLevel")[0]
    skills = report.find("skills.technicalSkills")[0]
    reason = report.find("motivation.reasonForApplying")[0]
    assert jlpt.importance == Importance.HIGH
    assert skills.importance == Importance.HIGH
    assert reason.importance == Importance.MEDIUM
    assert reason.kind == GapKind.TOO_SHORT
    assert "short" in reason.prompt_question
    assert report.is_complete is False


def test_titp_empty_family_is_a_high_gap():
    data = sample_record(VisaTier.TITP).to_wire()
    data["personalInfo"]["familyDetails"] = []
    report = evaluate(ApplicantRecord.model_validate(data))
    gap = report.find("personalInfo.familyDetails")[0]
    assert gap.importance == Importance.HIGH
    assert gap.section_label == "Family Details"


def test_gaps_follow_fixed_section_order():
    report = evaluate(ApplicantRecord(tier=VisaTier.TITP))
    assert report.field_paths() == [
        "personalInfo.fullName",
        "personalInfo.katakanaName",
        "personalInfo.birthDate",
        "personalInfo.currentAddress",
        "personalInfo.email",
        "personalInfo.phone",
        "personalInfo.familyDetails",
        "personalInfo.physicalStats",
        "education",
        "workHistory",
        "motivation.reasonForApplying",
        "motivation.selfPR",
    ]


def test_evaluation_is_reproducible():
    record = ApplicantRecord.model_validate(
        {"tier": "SSW", "workHistory": [{"companyName": "A", "role": "Cook"}, {"companyName": "B", "role": "Cook"}]}
    )
    assert evaluate(record).model_dump_json() == evaluate(record).model_dump_json()


def test_work_entry_without_description_is_low_context_gap():
    data = sample_record(VisaTier.ENGINEER).to_wire()
    data["workHistory"].append({"companyName": "Shop", "startDate": "2012-01", "endDate": "2013-12", "role": "Clerk"})
    report = evaluate(ApplicantRecord.model_validate(data))

    assert report.field_paths() == ["workHistory[1].description"]
    gap = report.gaps[0]
    assert gap.importance == Importance.LOW
    assert gap.kind == GapKind.MISSING_CONTEXT
    assert "Clerk" in gap.prompt_question and "Shop" in gap.prompt_question
    assert not report.is_complete


def test_partial_physical_stats_are_medium_gaps():
    data = sample_record(VisaTier.SSW).to_wire()
    data["personalInfo"]["physicalStats"] = {"handz": "Left"}
    report = evaluate(ApplicantRecord.model_validate(data))
    assert report.field_paths() == [
        "personalInfo.physicalStats.heightCm",
        "personalInfo.physicalStats.weightKg",
    ]
    assert {g.importance for g in report.gaps} == {Importance.MEDIUM}


def test_blank_family_member_fields_are_reported():
    data = sample_record(VisaTier.TITP).to_wire()
    data["personalInfo"]["familyDetails"].append({"name": "Kim", "relationship": " ", "age": 20, "occupation": ""})
    report = evaluate(ApplicantRecord.model_validate(data))
    assert report.field_paths() == [
        "personalInfo.familyDetails[1].relationship",
        "personalInfo.familyDetails[1].occupation",
    ]


def test_fields_of_other_tiers_are_not_scored():
    data = sample_record(VisaTier.ENGINEER).to_wire()
    data["personalInfo"]["familyDetails"] = [{"name": ""}]
    data["motivation"]["selfPR"] = ""
    assert evaluate(ApplicantRecord.model_validate(data)).is_complete
