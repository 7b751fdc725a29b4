from __future__ import annotations

from .resume import ApplicantRecord, VisaTier

_BASE = {
    "personalInfo": {
        "fullName": "山田 太郎",
        "katakanaName": "ヤマダ タロウ",
        "gender": "Male",
        "birthDate": "1990-01-01",
        "currentAddress": "東京都渋谷区神南1-2-3",
        "email": "taro.yamada@example.com",
        "phone": "090-1234-5678",
    },
    "education": [
        {
            "schoolName": "Test University",
            "startDate": "2010-04",
            "endDate": "2014-03",
            "status": "Graduated",
        }
    ],
    "workHistory": [
        {
            "companyName": "Tech Company",
            "startDate": "2014-04",
            "endDate": "Current",
            "role": "Developer",
            "description": "Frontend development",
        }
    ],
    "skills": {"jlptLevel": "N2", "technicalSkills": ["React", "TypeScript"]},
    "motivation": {
        "reasonForApplying": "御社のビジョンに共感し、技術で貢献したいと考えました。",
        "selfPR": "粘り強い性格で、最後までやり遂げる力があります。",
    },
}

_TIER_EXTRAS = {
    VisaTier.ENGINEER: {},
    VisaTier.SSW: {
        "personalInfo": {
            "physicalStats": {"heightCm": 168, "weightKg": 60, "handz": "Right"},
        },
        "skills": {"sswCertificates": ["Food Service Skills Test"]},
    },
    VisaTier.TITP: {
        "personalInfo": {
            "physicalStats": {"heightCm": 165, "weightKg": 58, "bloodType": "O", "handz": "Right"},
            "familyDetails": [
                {"name": "Hanako Yamada", "relationship": "Mother", "age": 58, "occupation": "Farmer"},
            ],
        },
    },
}


def sample_record(tier: VisaTier = VisaTier.ENGINEER) -> ApplicantRecord:
    """A fully completed record for ``tier``, used for demos and smoke runs."""
    tier = VisaTier(tier)
    data = {key: (dict(value) if isinstance(value, dict) else list(value)) for key, value in _BASE.items()}
    data["tier"] = tier.value
    for section, extra in _TIER_EXTRAS[tier].items():
        data[section] = {**data[section], **extra}
    return ApplicantRecord.model_validate(data)
