from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class KeyValueRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    value: str


class Table(BaseModel):
    model_config = ConfigDict(frozen=True)

    columns: List[str]
    rows: List[List[str]] = Field(default_factory=list)
    placeholder: bool = Field(
        default=False,
        description="True when the only row is the 'none provided' placeholder.",
    )


class Section(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    rows: List[KeyValueRow] = Field(default_factory=list)
    table: Optional[Table] = None

    def value_of(self, key: str) -> Optional[str]:
        for row in self.rows:
            if row.key == key:
                return row.value
        return None


class DocumentLayout(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: str
    title: str
    issued_on: Optional[str] = None
    sections: List[Section] = Field(default_factory=list)

    def section(self, key: str) -> Optional[Section]:
        for section in self.sections:
            if section.key == key:
                return section
        return None

    def section_keys(self) -> List[str]:
        return [section.key for section in self.sections]
