from pydantic import BaseModel, Field, field_validator


class SubjectBase(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=200)
    yearly_hours: int = Field(ge=1, le=2000)

    @field_validator("code", "name")
    @classmethod
    def strip_text(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("Value cannot be blank")
        return trimmed


class SubjectCreate(SubjectBase):
    pass


class SubjectOut(SubjectBase):
    id: str
    term_ceiling_minutes: int

    model_config = {"from_attributes": True}
