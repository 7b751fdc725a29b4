GAP_ANALYSIS_PROMPT = """
You review application data for a Japanese job application (履歴書 / Bio-Data) and identify missing information.
Resume data (JSON):
{record_json}

Visa tier of this application: {tier}
For each visa tier, these fields are critical:
{critical_fields}

Identify:
1. Any null or empty fields
2. Fields that should be expanded (descriptions or motivation statements that are too short)
3. Missing context for work history entries

Return JSON with exactly this schema and nothing else:
{{
  "missingFields": [
    {{
      "field": string,
      "section": string,
      "importance": "high"|"medium"|"low",
      "question": string
    }}
  ],
  "suggestions": [string],
  "isComplete": boolean
}}

Rules:
- Use field paths from the resume JSON (for example "skills.jlptLevel").
- Ask one specific, polite question per missing field.
- Return ONLY JSON.
"""


CV_EXTRACTION_PROMPT = """
Extract structured resume information from this CV text.
CV text:
\"\"\"
{cv_text}
\"\"\"

Return JSON with exactly this schema and nothing else:
{{
  "personalInfo": {{
    "fullName": string,
    "email": string|null,
    "phone": string|null,
    "currentAddress": string|null
  }},
  "education": [
    {{
      "schoolName": string,
      "startDate": string|null,
      "endDate": string|null,
      "status": "Graduated"|"Dropout"
    }}
  ],
  "workHistory": [
    {{
      "companyName": string,
      "startDate": string|null,
      "endDate": string|null,
      "role": string,
      "description": string|null
    }}
  ],
  "skills": [string],
  "confidence": {{
    "personalInfo": number,
    "education": number,
    "workHistory": number,
    "skills": number
  }}
}}

Rules:
- Use ONLY information found in the CV text; do not fabricate.
- Dates as YYYY-MM-DD or YYYY-MM. Use "Current" as endDate for an ongoing job.
- Confidence scores are between 0 and 1 and reflect the data quality of each section.
- Return ONLY JSON.
"""


TRANSLITERATION_PROMPT = """
Transliterate this name from {source_language} to Japanese Katakana for a formal job application (履歴書).
Name: {name}
Source language: {source_language}

Guidelines:
- Use proper Japanese phonetics suitable for formal documents.
- Apply Hepburn romanization principles adapted to Katakana.
- Use interpuncts (・) between name components.
- Consider the speaker's likely pronunciation, not strict letter-by-letter conversion.

Return JSON with exactly this schema and nothing else:
{{
  "katakana": string,
  "pronunciation": string,
  "notes": string|null
}}
"""


CHAT_SYSTEM_PROMPT = """
You are a Japanese resume assistant. Help users fill out their Rirekisho (履歴書) form.

Current resume context:
{record_json}

Guidelines:
- Be professional and helpful.
- Ask questions when information is missing.
- Provide suggestions in business Japanese.
- Keep responses concise (2-3 sentences max).
- When the user provides information, acknowledge it and ask if they want to update their resume.
"""
