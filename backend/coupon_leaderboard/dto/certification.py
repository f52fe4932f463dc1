"""Request payloads for the email certification flow.

Pure data carriers: every field must be non-blank and ``email`` must be a
syntactically valid address. Values are validated, never rewritten. Invalid
input raises ``pydantic.ValidationError``.
"""

from typing import Annotated

from pydantic import AfterValidator, AliasChoices, BaseModel, EmailStr, Field


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError('must not be blank')
    return value


NonBlankStr = Annotated[str, Field(min_length=1), AfterValidator(_not_blank)]


class EmailCertificationRequest(BaseModel):
    username: NonBlankStr
    email: EmailStr


class CheckEmailCertificationRequest(BaseModel):
    username: NonBlankStr
    email: EmailStr
    certification: NonBlankStr = Field(
        validation_alias=AliasChoices('certification', 'certificationCode'),
    )
