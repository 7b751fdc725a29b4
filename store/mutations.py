"""
Structural operations on an ApplicantRecord.

Every function takes a record and returns a new, validated record; the input
is never modified. List entries are identified only by their index, so
removing entry ``i`` shifts every later entry down by one.

Out-of-range indices raise ``EntryIndexError`` and leave the record as it was.
Tier-exclusive data (family details, physical stats) is never cleared or
blocked here; the evaluator only scores what the current tier requires.
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Type, Union

from pydantic import BaseModel

from schemas.ai import ParsedCV
from schemas.resume import (
    ApplicantRecord,
    EducationEntry,
    FamilyMember,
    Motivation,
    PersonalInfo,
    Skills,
    VisaTier,
    WorkEntry,
    field_name_for,
)

SECTIONS: Dict[str, tuple] = {
    "personalInfo": ("personal_info", PersonalInfo),
    "skills": ("skills", Skills),
    "motivation": ("motivation", Motivation),
}

# list name -> (path of attribute names from the record root, entry model or None for strings)
LISTS: Dict[str, tuple] = {
    "education": (("education",), EducationEntry),
    "workHistory": (("work_history",), WorkEntry),
    "familyDetails": (("personal_info", "family_details"), FamilyMember),
    "sswCertificates": (("skills", "ssw_certificates"), None),
    "technicalSkills": (("skills", "technical_skills"), None),
}

Entry = Union[BaseModel, Mapping[str, Any], str]


class EntryIndexError(IndexError):
    def __init__(self, list_name: str, index: int, length: int):
        self.list_name = list_name
        self.index = index
        self.length = length
        super().__init__(
            f"{list_name} has {length} entries; index {index} is out of range"
        )


def set_tier(record: ApplicantRecord, tier: Union[VisaTier, str]) -> ApplicantRecord:
    data = record.model_dump()
    data["tier"] = VisaTier(tier)
    return ApplicantRecord.model_validate(data)


def update_section(
    record: ApplicantRecord, section: str, partial: Mapping[str, Any]
) -> ApplicantRecord:
    """Shallow-merge ``partial`` into personalInfo, skills or motivation."""
    attr, model = _section(section)
    data = record.model_dump()
    data[attr].update(_normalize(model, partial))
    return ApplicantRecord.model_validate(data)


def append_list_entry(record: ApplicantRecord, list_name: str, entry: Entry) -> ApplicantRecord:
    path, model = _list_spec(list_name)
    data = record.model_dump()
    items = _items(data, path, create=True)
    items.append(_entry(model, entry))
    return ApplicantRecord.model_validate(data)


def update_list_entry(
    record: ApplicantRecord,
    list_name: str,
    index: int,
    partial: Optional[Union[Mapping[str, Any], str]],
) -> ApplicantRecord:
    """
    Merge ``partial`` into entry ``index``. For the skill string-lists the
    partial is the replacement string; an empty partial leaves the entry as is.
    """
    path, model = _list_spec(list_name)
    data = record.model_dump()
    items = _items(data, path, create=False)
    _check_index(list_name, index, items)
    if model is None:
        if partial:
            if not isinstance(partial, str):
                raise TypeError(f"{list_name} entries are strings, got {type(partial).__name__}")
            items[index] = partial
    elif partial:
        items[index].update(_normalize(model, partial))
    return ApplicantRecord.model_validate(data)


def remove_list_entry(record: ApplicantRecord, list_name: str, index: int) -> ApplicantRecord:
    path, _ = _list_spec(list_name)
    data = record.model_dump()
    items = _items(data, path, create=False)
    _check_index(list_name, index, items)
    del items[index]
    return ApplicantRecord.model_validate(data)


def merge_parsed_cv(record: ApplicantRecord, parsed: ParsedCV) -> ApplicantRecord:
    """
    Merge structured CV data: blank personal fields are filled, education and
    work entries are appended, and new technical skills are added once.
    """
    info = record.personal_info
    filled = {}
    for attr in ("full_name", "email", "phone", "current_address"):
        incoming = (getattr(parsed.personal_info, attr) or "").strip()
        if incoming and not getattr(info, attr).strip():
            filled[attr] = incoming
    merged = update_section(record, "personalInfo", filled) if filled else record

    for edu in parsed.education:
        merged = append_list_entry(
            merged,
            "education",
            {
                "school_name": edu.school_name,
                "start_date": edu.start_date or "",
                "end_date": edu.end_date or "",
                "status": edu.status,
            },
        )
    for work in parsed.work_history:
        merged = append_list_entry(
            merged,
            "workHistory",
            {
                "company_name": work.company_name,
                "start_date": work.start_date or "",
                "end_date": work.end_date or "",
                "role": work.role,
                "description": work.description,
            },
        )

    known = {s.casefold() for s in merged.skills.technical_skills or []}
    for skill in parsed.skills:
        text = skill.strip()
        if text and text.casefold() not in known:
            known.add(text.casefold())
            merged = append_list_entry(merged, "technicalSkills", text)
    return merged


def _section(section: str):
    for wire, (attr, model) in SECTIONS.items():
        if section in (wire, attr):
            return attr, model
    raise ValueError(f"Unknown section {section!r}; expected one of {list(SECTIONS)}")


def _list_spec(list_name: str):
    if list_name not in LISTS:
        raise ValueError(f"Unknown list {list_name!r}; expected one of {list(LISTS)}")
    return LISTS[list_name]


def _items(data: Dict[str, Any], path: tuple, *, create: bool) -> List[Any]:
    parent = data
    for key in path[:-1]:
        parent = parent[key]
    items = parent.get(path[-1])
    if items is None:
        items = []
        if create:
            parent[path[-1]] = items
    return items


def _check_index(list_name: str, index: int, items: List[Any]) -> None:
    if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < len(items):
        raise EntryIndexError(list_name, index, len(items))


def _entry(model: Optional[Type[BaseModel]], entry: Entry):
    if model is None:
        if not isinstance(entry, str):
            raise TypeError(f"Expected a string entry, got {type(entry).__name__}")
        return entry
    if isinstance(entry, BaseModel):
        return model.model_validate(entry.model_dump()).model_dump()
    return model.model_validate(_normalize(model, entry)).model_dump()


def _normalize(model: Type[BaseModel], partial: Mapping[str, Any]) -> Dict[str, Any]:
    normalized = {}
    for key, value in partial.items():
        try:
            normalized[field_name_for(model, key)] = value
        except KeyError as exc:
            raise ValueError(str(exc.args[0])) from exc
    return normalized
