"""
Pydantic models for the property values Notion returns on database rows.

Each property carries a ``type`` tag naming the single populated payload key.
Only the kinds the progress journal can hold are modelled; anything else is
treated as "no value" by :func:`parse_property`.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

logger = logging.getLogger(__name__)


class _NotionModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class TextRun(_NotionModel):
    plain_text: Optional[str] = None


class SelectOption(_NotionModel):
    name: Optional[str] = None


class DateValue(_NotionModel):
    start: Optional[str] = None
    end: Optional[str] = None


class TitleProperty(_NotionModel):
    type: Literal["title"]
    title: List[TextRun] = Field(default_factory=list)


class RichTextProperty(_NotionModel):
    type: Literal["rich_text"]
    rich_text: List[TextRun] = Field(default_factory=list)


class SelectProperty(_NotionModel):
    type: Literal["select"]
    select: Optional[SelectOption] = None


class StatusProperty(_NotionModel):
    type: Literal["status"]
    status: Optional[SelectOption] = None


class NumberProperty(_NotionModel):
    type: Literal["number"]
    number: Optional[Union[int, float]] = None


class DateProperty(_NotionModel):
    type: Literal["date"]
    date: Optional[DateValue] = None


class MultiSelectProperty(_NotionModel):
    type: Literal["multi_select"]
    multi_select: List[SelectOption] = Field(default_factory=list)


class FormulaString(_NotionModel):
    type: Literal["string"]
    string: Optional[str] = None


class FormulaNumber(_NotionModel):
    type: Literal["number"]
    number: Optional[Union[int, float]] = None


class FormulaBoolean(_NotionModel):
    type: Literal["boolean"]
    boolean: Optional[bool] = None


class FormulaDate(_NotionModel):
    type: Literal["date"]
    date: Optional[DateValue] = None


FormulaResult = Annotated[
    Union[FormulaString, FormulaNumber, FormulaBoolean, FormulaDate],
    Field(discriminator="type"),
]


class FormulaProperty(_NotionModel):
    type: Literal["formula"]
    formula: Optional[FormulaResult] = None


PropertyValue = Annotated[
    Union[
        TitleProperty,
        RichTextProperty,
        SelectProperty,
        StatusProperty,
        NumberProperty,
        DateProperty,
        MultiSelectProperty,
        FormulaProperty,
    ],
    Field(discriminator="type"),
]

_PROPERTY_ADAPTER: TypeAdapter[PropertyValue] = TypeAdapter(PropertyValue)


def parse_property(raw: Any) -> Optional[PropertyValue]:
    """Validate a raw property payload, returning ``None`` when it is unusable."""
    if not isinstance(raw, dict) or not raw:
        return None
    try:
        return _PROPERTY_ADAPTER.validate_python(raw)
    except ValidationError as exc:
        logger.debug(
            "Ignoring unsupported Notion property of type %r: %s",
            raw.get("type"),
            exc.errors()[0].get("msg") if exc.errors() else exc,
        )
        return None


__all__ = [
    "DateProperty",
    "DateValue",
    "FormulaBoolean",
    "FormulaDate",
    "FormulaNumber",
    "FormulaProperty",
    "FormulaString",
    "MultiSelectProperty",
    "NumberProperty",
    "PropertyValue",
    "RichTextProperty",
    "SelectOption",
    "SelectProperty",
    "StatusProperty",
    "TextRun",
    "TitleProperty",
    "parse_property",
]
