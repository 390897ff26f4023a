from typing import Any, Optional

from pydantic import BaseModel, field_validator
from pydantic import ValidationError as PydanticValidationError

from book import has_illegal_xml_chars
from errors import ValidationError

REQUIRED_FIELDS = ("title", "author", "year", "type")


class BookDraft(BaseModel):
    """The client-supplied part of a book record, before id and timestamp are assigned."""

    title: Optional[str] = None
    author: Optional[str] = None
    year: Optional[int] = None
    type: Optional[str] = None

    @field_validator("year", mode="before")
    @classmethod
    def _reject_bool_year(cls, value: Any) -> Any:
        # bool is an int subclass and would otherwise pass as 0/1
        if isinstance(value, bool):
            raise ValueError("year must be an integer")
        return value

    @field_validator("title", "author", "type")
    @classmethod
    def _check_text(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        # Stored text must be representable in the XML wire format
        if has_illegal_xml_chars(value):
            raise ValueError("contains characters not allowed in XML")
        return value.strip()


class TextValidator:
    """Small helpers for raw field values coming off the wire."""

    @staticmethod
    def is_blank(value: Any) -> bool:
        if value is None:
            return True
        return isinstance(value, str) and not value.strip()

    @staticmethod
    def clean(value: Any) -> Any:
        """Strip strings; blank ones become None so they count as missing rather than malformed."""
        if TextValidator.is_blank(value):
            return None
        return value.strip() if isinstance(value, str) else value


def validate_draft(data: Any) -> BookDraft:
    """Validate a decoded add-request payload and return a complete draft.

    Raises ValidationError when the payload is not a mapping, when a required
    field is missing or blank, or when a field has an unusable value (e.g. a
    year that is not an integer).
    """
    if not isinstance(data, dict):
        raise ValidationError("Missing required fields")

    cleaned = {name: TextValidator.clean(data.get(name)) for name in REQUIRED_FIELDS}
    if any(value is None for value in cleaned.values()):
        raise ValidationError("Missing required fields")

    try:
        draft = BookDraft.model_validate(cleaned)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = first["loc"][0] if first.get("loc") else "body"
        raise ValidationError(f"Invalid value for field '{field}'") from e

    return draft
