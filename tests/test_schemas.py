import pytest
from pydantic import ValidationError

from schemas.resume import ApplicantRecord, Gender, JlptLevel, VisaTier
from schemas.samples import sample_record
from schemas.validation import RecordValidationError, ensure_exportable, validate_record


def test_record_loads_persisted_camel_case_blob():
    data = {
        "tier": "TITP",
        "personalInfo": {
            "fullName": "Nguyen Van An",
            "katakanaName": "グエン・ヴァン・アン",
            "gender": "Female",
            "physicalStats": {"heightCm": "160", "weightKg": 50, "handz": "Left"},
            "familyDetails": [{"name": "Binh", "relationship": "Father", "age": "52", "occupation": "Driver"}],
        },
        "workHistory": [{"companyName": "Acme", "startDate": "2020-01", "endDate": "Current", "role": "Welder"}],
        "skills": {"technicalSkills": [" Welding ", "", "Forklift"]},
    }
    record = ApplicantRecord.model_validate(data)
    assert record.tier == VisaTier.TITP
    assert record.personal_info.gender == Gender.FEMALE
    assert record.personal_info.physical_stats.height_cm == 160
    assert record.personal_info.family_details[0].age == 52
    assert record.work_history[0].is_current
    assert record.skills.technical_skills == ["Welding", "Forklift"]

    wire = record.to_wire()
    assert wire["personalInfo"]["physicalStats"]["handz"] == "Left"
    assert wire["workHistory"][0]["endDate"] == "Current"


def test_record_tolerates_missing_and_null_sections():
    record = ApplicantRecord.model_validate(
        {"tier": "SSW", "personalInfo": None, "education": None, "skills": {"jlptLevel": ""}}
    )
    assert record.personal_info.full_name == ""
    assert record.education == []
    assert record.work_history == []
    assert record.skills.jlpt_level is None
    assert record.motivation.self_pr == ""


def test_enum_values_out_of_range_are_rejected():
    with pytest.raises(ValidationError):
        ApplicantRecord.model_validate({"tier": "STUDENT"})
    with pytest.raises(ValidationError):
        ApplicantRecord.model_validate({"skills": {"jlptLevel": "N6"}})
    with pytest.raises(ValidationError):
        ApplicantRecord.model_validate({"personalInfo": {"familyDetails": [{"age": -1}]}})


def test_jlpt_none_is_a_real_level():
    record = ApplicantRecord.model_validate({"skills": {"jlptLevel": "None"}})
    assert record.skills.jlpt_level == JlptLevel.NONE


@pytest.mark.parametrize("tier", list(VisaTier))
def test_sample_records_are_exportable(tier):
    record = sample_record(tier)
    assert validate_record(record) == []
    assert ensure_exportable(record) is record


def test_validation_reports_field_errors_without_coercing():
    record = sample_record(VisaTier.ENGINEER)
    data = record.to_wire()
    data["personalInfo"]["email"] = "not-an-email"
    data["education"][0]["endDate"] = "March 2014"
    data["workHistory"][0]["endDate"] = ""
    data["motivation"]["selfPR"] = "short"
    broken = ApplicantRecord.model_validate(data)

    paths = [e.path for e in validate_record(broken)]
    assert paths == [
        "personalInfo.email",
        "education[0].endDate",
        "workHistory[0].endDate",
        "motivation.selfPR",
    ]
    assert broken.personal_info.email == "not-an-email"

    with pytest.raises(RecordValidationError) as excinfo:
        ensure_exportable(broken)
    assert len(excinfo.value.errors) == 4


def test_current_sentinel_is_accepted_as_end_date():
    record = sample_record(VisaTier.ENGINEER)
    assert record.work_history[0].end_date == "Current"
    assert not [e for e in validate_record(record) if e.path.startswith("workHistory")]
