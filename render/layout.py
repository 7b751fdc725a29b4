"""
Map an applicant record onto one of the two fixed paper-form layouts.

The standard layout is the JIS Rirekisho used for ENGINEER and SSW; the
extended layout is the Bio-Data form used for TITP, which adds physical stats
and a family table. Both are pure functions of the record.
"""
from __future__ import annotations

import datetime as dt
from typing import Callable, Dict, List, Optional

from policy.tiers import LayoutKind, layout_for
from schemas.layout import DocumentLayout, KeyValueRow, Section, Table
from schemas.resume import (
    ApplicantRecord,
    DominantHand,
    EducationStatus,
    Gender,
    Skills,
)

SKILL_DELIMITER = ", "
NOT_AVAILABLE = "N/A"

STANDARD_GENDER = {Gender.MALE: "男", Gender.FEMALE: "女"}
EXTENDED_GENDER = {Gender.MALE: "Male", Gender.FEMALE: "Female"}
STANDARD_STATUS = {EducationStatus.GRADUATED: "卒業", EducationStatus.DROPOUT: "中退"}
EXTENDED_STATUS = {EducationStatus.GRADUATED: "Graduated", EducationStatus.DROPOUT: "Dropout"}
EXTENDED_HAND = {DominantHand.RIGHT: "Right", DominantHand.LEFT: "Left"}

# (start, era name); checked newest first.
ERAS = (
    (dt.date(2019, 5, 1), "令和"),
    (dt.date(1989, 1, 8), "平成"),
    (dt.date(1926, 12, 25), "昭和"),
)


def render(record: ApplicantRecord, *, as_of: Optional[dt.date] = None) -> DocumentLayout:
    kind = layout_for(record.tier)
    builder = _BUILDERS[kind]
    return builder(record, as_of)


def to_japanese_era(day: dt.date) -> str:
    for start, era in ERAS:
        if day >= start:
            break
    else:
        raise ValueError(f"{day.isoformat()} is before the Showa era")
    era_year = day.year - start.year + 1
    year = "元" if era_year == 1 else str(era_year)
    return f"{era}{year}年{day.month}月{day.day}日"


def format_period(start: str, end: str) -> str:
    # `end` may be the "Current" sentinel; it is emitted verbatim.
    if not start and not end:
        return ""
    return f"{start} - {end}"


def _standard(record: ApplicantRecord, as_of: Optional[dt.date]) -> DocumentLayout:
    info = record.personal_info
    personal = [
        _row("fullName", "氏名", info.full_name),
        _row("katakanaName", "フリガナ", info.katakana_name),
        _row("birthDate", "生年月日", info.birth_date),
        _row("gender", "性別", STANDARD_GENDER[info.gender]),
        _row("currentAddress", "現住所", info.current_address),
    ]
    if info.japan_address:
        personal.append(_row("japanAddress", "日本国内連絡先", info.japan_address))
    personal += [
        _row("email", "メール", info.email),
        _row("phone", "電話", info.phone),
    ]

    education = Table(
        columns=["年月", "学歴"],
        rows=[
            [format_period(e.start_date, e.end_date), f"{e.school_name} {STANDARD_STATUS[e.status]}"]
            for e in record.education
        ],
    )
    work = Table(
        columns=["年月", "会社名", "職種・業務内容"],
        rows=[
            [format_period(w.start_date, w.end_date), w.company_name, _role_text(w.role, w.description)]
            for w in record.work_history
        ],
    )

    sections = [
        Section(key="personalInfo", label="個人情報", rows=personal),
        Section(key="education", label="学歴", table=_or_placeholder(education, "なし")),
        Section(key="workHistory", label="職歴", table=_or_placeholder(work, "なし")),
        Section(
            key="skills",
            label="技能・資格",
            rows=_skill_rows(record.skills, "日本語能力試験", "SSW資格", "技術スキル"),
        ),
        Section(
            key="motivation",
            label="志望動機・自己PR",
            rows=[
                _row("reasonForApplying", "志望動機", record.motivation.reason_for_applying),
                _row("selfPR", "自己PR", record.motivation.self_pr),
            ],
        ),
    ]
    return DocumentLayout(
        kind=LayoutKind.STANDARD.value,
        title="履歴書",
        issued_on=f"{to_japanese_era(as_of)} 現在" if as_of else None,
        sections=sections,
    )


def _extended(record: ApplicantRecord, as_of: Optional[dt.date]) -> DocumentLayout:
    info = record.personal_info
    personal = [
        _row("fullName", "Full Name", info.full_name),
        _row("katakanaName", "Katakana Name", info.katakana_name),
        _row("gender", "Gender", EXTENDED_GENDER[info.gender]),
        _row("birthDate", "Date of Birth", info.birth_date),
        _row("currentAddress", "Current Address", info.current_address),
    ]
    if info.japan_address:
        personal.append(_row("japanAddress", "Address in Japan", info.japan_address))
    personal += [
        _row("email", "Email", info.email),
        _row("phone", "Phone", info.phone),
    ]

    titled: List[tuple] = [("personalInfo", "PERSONAL DETAILS", {"rows": personal})]

    stats = info.physical_stats
    if stats is not None:
        titled.append(
            (
                "physicalStats",
                "PHYSICAL STATS",
                {
                    "rows": [
                        _row("heightCm", "Height", _measure(stats.height_cm, "cm")),
                        _row("weightKg", "Weight", _measure(stats.weight_kg, "kg")),
                        _row("bloodType", "Blood Type", (stats.blood_type or "").strip() or NOT_AVAILABLE),
                        _row("dominantHand", "Dominant Hand", EXTENDED_HAND[stats.dominant_hand]),
                    ]
                },
            )
        )

    if info.family_details:
        family = Table(
            columns=["Relationship", "Name", "Age", "Occupation"],
            rows=[
                [m.relationship, m.name, "" if m.age is None else str(m.age), m.occupation]
                for m in info.family_details
            ],
        )
        titled.append(("familyDetails", "FAMILY DETAILS", {"table": family}))

    education = Table(
        columns=["Period", "School Name", "Status"],
        rows=[
            [format_period(e.start_date, e.end_date), e.school_name, EXTENDED_STATUS[e.status]]
            for e in record.education
        ],
    )
    work = Table(
        columns=["Period", "Company", "Role & Description"],
        rows=[
            [format_period(w.start_date, w.end_date), w.company_name, _role_text(w.role, w.description)]
            for w in record.work_history
        ],
    )
    titled += [
        (
            "education",
            "EDUCATIONAL BACKGROUND",
            {"table": _or_placeholder(education, "No education history provided.")},
        ),
        (
            "workHistory",
            "EMPLOYMENT HISTORY",
            {"table": _or_placeholder(work, "No work history provided.")},
        ),
        (
            "skills",
            "SKILLS & QUALIFICATIONS",
            {"rows": _skill_rows(record.skills, "Japanese Level", "SSW Certificates", "Technical Skills")},
        ),
        (
            "motivation",
            "MOTIVATION",
            {
                "rows": [
                    _row("reasonForApplying", "Reason for Applying", record.motivation.reason_for_applying),
                    _row("selfPR", "Self-PR", record.motivation.self_pr),
                ]
            },
        ),
    ]

    sections = [
        Section(key=key, label=f"{n}. {title}", **body)
        for n, (key, title, body) in enumerate(titled, start=1)
    ]
    return DocumentLayout(
        kind=LayoutKind.EXTENDED.value,
        title="BIO-DATA",
        issued_on=as_of.isoformat() if as_of else None,
        sections=sections,
    )


_BUILDERS: Dict[LayoutKind, Callable[[ApplicantRecord, Optional[dt.date]], DocumentLayout]] = {
    LayoutKind.STANDARD: _standard,
    LayoutKind.EXTENDED: _extended,
}


def _row(key: str, label: str, value: str) -> KeyValueRow:
    return KeyValueRow(key=key, label=label, value=value or "")


def _role_text(role: str, description: Optional[str]) -> str:
    if description:
        return f"{role}\n{description}"
    return role


def _or_placeholder(table: Table, text: str) -> Table:
    if table.rows:
        return table
    row = [""] * len(table.columns)
    row[-1] = text
    return Table(columns=table.columns, rows=[row], placeholder=True)


def _skill_rows(skills: Skills, jlpt_label: str, ssw_label: str, tech_label: str) -> List[KeyValueRow]:
    level = skills.jlpt_level.value if skills.jlpt_level is not None else "None"
    rows = [_row("jlptLevel", jlpt_label, level)]
    if skills.ssw_certificates:
        rows.append(_row("sswCertificates", ssw_label, SKILL_DELIMITER.join(skills.ssw_certificates)))
    if skills.technical_skills:
        rows.append(_row("technicalSkills", tech_label, SKILL_DELIMITER.join(skills.technical_skills)))
    return rows


def _measure(value: Optional[float], unit: str) -> str:
    if value is None:
        return ""
    number = int(value) if float(value).is_integer() else value
    return f"{number} {unit}"
