"""Segmenter output: contact details and section bodies of a resume."""

from pydantic import BaseModel, ConfigDict


class ContactInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    email: str | None = None
    phone: str | None = None
    linkedin: str | None = None
    github: str | None = None
    website: str | None = None
    location: str | None = None

    @property
    def has_profile_link(self) -> bool:
        return bool(self.linkedin or self.github or self.website)


class SectionValidation(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_valid: bool = True
    errors: list[str] = []
    warnings: list[str] = []
    has_required_sections: dict[str, bool] = {}


class SectionBundle(BaseModel):
    """Structured view of one resume. Built per call, never persisted."""

    model_config = ConfigDict(frozen=True)

    contact: ContactInfo = ContactInfo()
    summary: str | None = None
    experience: str | None = None
    education: str | None = None
    skills: list[str] = []
    achievements: list[str] = []
    detected_sections: list[str] = []  # canonical header names, in document order
    validation: SectionValidation = SectionValidation()
