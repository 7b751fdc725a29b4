import pytest
from pydantic import ValidationError

from schemas.ai import ParsedCV
from schemas.resume import ApplicantRecord, EducationEntry, VisaTier
from schemas.samples import sample_record
from store.mutations import (
    EntryIndexError,
    append_list_entry,
    merge_parsed_cv,
    remove_list_entry,
    set_tier,
    update_list_entry,
    update_section,
)
from store.record_store import RecordStore, RequestToken, StaleRecordError

TOKYO = {"schoolName": "Tokyo University", "startDate": "2018-04-01", "endDate": "2022-03-31", "status": "Graduated"}
OSAKA = {"schoolName": "Osaka University", "startDate": "2014-04-01", "endDate": "2018-03-31", "status": "Dropout"}


def test_update_section_shallow_merges():
    record = update_section(ApplicantRecord(), "personalInfo", {"fullName": "John Doe", "email": "john@example.com"})
    record = update_section(record, "personalInfo", {"phone": "090-0000-0000"})
    assert record.personal_info.full_name == "John Doe"
    assert record.personal_info.email == "john@example.com"
    assert record.personal_info.phone == "090-0000-0000"


def test_update_section_accepts_python_field_names():
    record = update_section(ApplicantRecord(), "motivation", {"self_pr": "Hard working person."})
    assert record.motivation.self_pr == "Hard working person."


def test_update_section_rejects_unknown_names():
    with pytest.raises(ValueError):
        update_section(ApplicantRecord(), "hobbies", {"x": 1})
    with pytest.raises(ValueError):
        update_section(ApplicantRecord(), "skills", {"favouriteColour": "blue"})
    with pytest.raises(ValidationError):
        update_section(ApplicantRecord(), "skills", {"jlptLevel": "N9"})


def test_mutations_do_not_modify_input():
    original = ApplicantRecord()
    updated = append_list_entry(original, "education", TOKYO)
    assert original.education == []
    assert len(updated.education) == 1


def test_append_and_remove_education():
    record = append_list_entry(ApplicantRecord(), "education", TOKYO)
    assert record.education[0].school_name == "Tokyo University"
    record = remove_list_entry(record, "education", 0)
    assert record.education == []


def test_no_op_partial_update_leaves_entry_unchanged():
    entry = EducationEntry.model_validate(TOKYO)
    record = append_list_entry(ApplicantRecord(), "education", entry)
    updated = update_list_entry(record, "education", len(record.education) - 1, {})
    assert updated.education[-1] == entry


def test_update_list_entry_merges_fields():
    record = append_list_entry(ApplicantRecord(), "workHistory", {"companyName": "Acme", "role": "Cook"})
    record = update_list_entry(record, "workHistory", 0, {"endDate": "Current", "description": "Line cook"})
    work = record.work_history[0]
    assert work.company_name == "Acme"
    assert work.is_current
    assert work.description == "Line cook"


def test_remove_shifts_indices_and_reappend_goes_to_end():
    record = append_list_entry(ApplicantRecord(), "education", TOKYO)
    record = append_list_entry(record, "education", OSAKA)
    record = remove_list_entry(record, "education", 0)
    assert record.education[0].school_name == "Osaka University"

    record = append_list_entry(record, "education", TOKYO)
    assert [e.school_name for e in record.education] == ["Osaka University", "Tokyo University"]


@pytest.mark.parametrize("index", [1, 5, -1])
def test_out_of_range_index_raises_and_keeps_record(index):
    record = append_list_entry(ApplicantRecord(), "education", TOKYO)
    with pytest.raises(EntryIndexError):
        remove_list_entry(record, "education", index)
    with pytest.raises(EntryIndexError):
        update_list_entry(record, "education", index, {"schoolName": "X"})
    assert record.education[0].school_name == "Tokyo University"


def test_out_of_range_on_absent_family_list():
    with pytest.raises(EntryIndexError) as excinfo:
        remove_list_entry(ApplicantRecord(tier=VisaTier.TITP), "familyDetails", 0)
    assert excinfo.value.length == 0


def test_family_and_skill_lists():
    record = append_list_entry(ApplicantRecord(tier=VisaTier.TITP), "familyDetails", {"name": "Binh", "age": "50"})
    assert record.personal_info.family_details[0].age == 50

    record = append_list_entry(record, "technicalSkills", "Welding")
    record = append_list_entry(record, "technicalSkills", "Forklift")
    record = update_list_entry(record, "technicalSkills", 1, "Crane")
    record = remove_list_entry(record, "technicalSkills", 0)
    assert record.skills.technical_skills == ["Crane"]

    record = append_list_entry(record, "sswCertificates", "Caregiving")
    assert record.skills.ssw_certificates == ["Caregiving"]


def test_unknown_list_is_rejected():
    with pytest.raises(ValueError):
        append_list_entry(ApplicantRecord(), "projects", {"name": "x"})


def test_switching_tier_retains_tier_specific_data():
    titp = sample_record(VisaTier.TITP)
    engineer = set_tier(titp, VisaTier.ENGINEER)
    assert engineer.tier == VisaTier.ENGINEER
    assert engineer.personal_info.family_details == titp.personal_info.family_details
    assert engineer.personal_info.physical_stats == titp.personal_info.physical_stats
    assert set_tier(engineer, "TITP").personal_info.family_details


def test_merge_parsed_cv_appends_and_keeps_filled_fields():
    record = update_section(ApplicantRecord(), "personalInfo", {"fullName": "Taro Yamada"})
    record = append_list_entry(record, "technicalSkills", "Python")
    parsed = ParsedCV.model_validate(
        {
            "personalInfo": {"fullName": "T. Yamada", "email": "taro@example.com"},
            "education": [{"schoolName": "Kyoto Univ", "status": "Graduated"}],
            "workHistory": [{"companyName": "Acme", "role": "Engineer", "endDate": "Current"}],
            "skills": ["python", "Docker"],
            "confidence": {"personalInfo": 0.9, "education": 0.8, "workHistory": 0.7, "skills": 1},
        }
    )
    merged = merge_parsed_cv(record, parsed)
    assert merged.personal_info.full_name == "Taro Yamada"
    assert merged.personal_info.email == "taro@example.com"
    assert merged.education[0].school_name == "Kyoto Univ"
    assert merged.education[0].start_date == ""
    assert merged.work_history[0].is_current
    assert merged.skills.technical_skills == ["Python", "Docker"]


def test_store_publishes_each_committed_mutation():
    store = RecordStore()
    seen = []
    unsubscribe = store.subscribe(lambda snapshot, revision: seen.append((revision, snapshot)))

    store.set_tier(VisaTier.SSW)
    store.append_list_entry("education", TOKYO)
    assert [rev for rev, _ in seen] == [1, 2]
    assert seen[-1][1].tier == VisaTier.SSW
    assert len(seen[-1][1].education) == 1

    with pytest.raises(EntryIndexError):
        store.remove_list_entry("education", 3)
    assert store.revision == 2
    assert len(seen) == 2

    unsubscribe()
    store.reset()
    assert len(seen) == 2
    assert store.snapshot().education == []


def test_store_snapshots_are_independent_copies():
    store = RecordStore(sample_record(VisaTier.ENGINEER))
    snapshot = store.snapshot()
    snapshot.education.clear()
    assert len(store.snapshot().education) == 1


PARSED_ANA = {
    "personalInfo": {"fullName": "Ana Cruz"},
    "workHistory": [{"companyName": "Acme", "role": "Nurse"}],
    "confidence": {"personalInfo": 0.9, "education": 0.1, "workHistory": 0.6, "skills": 0.5},
}


def test_store_rejects_change_computed_for_older_revision():
    store = RecordStore(sample_record(VisaTier.ENGINEER))
    token = store.token()
    assert token == RequestToken(0, VisaTier.ENGINEER)

    store.set_tier(VisaTier.TITP)
    with pytest.raises(StaleRecordError):
        store.update_section("personalInfo", {"katakanaName": "ヤマダ タロー"}, token=token)
    with pytest.raises(StaleRecordError):
        store.merge_parsed_cv(ParsedCV.model_validate(PARSED_ANA), token=token)
    assert store.revision == 1
    assert store.snapshot().personal_info.katakana_name != "ヤマダ タロー"
    assert [w.company_name for w in store.snapshot().work_history] == ["Tech Company"]

    record = store.update_section("personalInfo", {"katakanaName": "ヤマダ タロー"}, token=store.token())
    assert record.personal_info.katakana_name == "ヤマダ タロー"
    assert store.revision == 2
