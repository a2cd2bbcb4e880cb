"""Boundary validation for requests handed to the core components."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, fields
from typing import Any, TypeVar

from pydantic import BaseModel, Field, ValidationInfo, field_validator
from pydantic import ValidationError as PydanticValidationError

from core.errors import ValidationError
from memory.layers import MemoryLayer

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_RULE_NAME = re.compile(r"^[A-Za-z0-9_-]+$")

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass(frozen=True)
class Limits:
    """Configured bounds for request fields."""

    max_action_length: int = 1000
    max_rule_name_length: int = 100
    max_rule_description_length: int = 500
    max_content_length: int = 10000
    min_weight: float = 0.0
    max_weight: float = 100.0
    max_search_limit: int = 100

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> Limits:
        raw = config.get("limits", {}) or {}
        values: dict[str, Any] = {}
        for item in fields(cls):
            if item.name in raw:
                values[item.name] = type(item.default)(raw[item.name])
        return cls(**values)


def sanitize_string(value: str) -> str:
    """Drop control characters, keeping tabs and newlines."""
    return _CONTROL_CHARS.sub("", value)


def _limits(info: ValidationInfo) -> Limits:
    context = info.context or {}
    return context.get("limits") or Limits()


def _clean_text(value: str, field_name: str, max_length: int) -> str:
    if len(value) > max_length:
        raise ValueError(f"{field_name} exceeds maximum length of {max_length}")
    cleaned = sanitize_string(value)
    if not cleaned.strip():
        raise ValueError(f"{field_name} cannot be empty")
    return cleaned


class ActionInput(BaseModel):
    """Evaluate request."""

    action: str
    entity_id: str | None = None

    @field_validator("action")
    @classmethod
    def _check_action(cls, value: str, info: ValidationInfo) -> str:
        return _clean_text(value, "action", _limits(info).max_action_length)


class RuleInput(BaseModel):
    """Add-rule request."""

    name: str
    description: str
    weight: float
    keywords: list[str] = Field(default_factory=list)
    replace: bool = False

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str, info: ValidationInfo) -> str:
        value = _clean_text(value, "name", _limits(info).max_rule_name_length)
        if not _RULE_NAME.match(value):
            raise ValueError("name must contain only letters, digits, hyphens and underscores")
        return value

    @field_validator("description")
    @classmethod
    def _check_description(cls, value: str, info: ValidationInfo) -> str:
        return _clean_text(value, "description", _limits(info).max_rule_description_length)

    @field_validator("weight")
    @classmethod
    def _check_weight(cls, value: float, info: ValidationInfo) -> float:
        limits = _limits(info)
        if not math.isfinite(value):
            raise ValueError("weight must be a finite number")
        if value < limits.min_weight or value > limits.max_weight:
            raise ValueError(f"weight must be between {limits.min_weight} and {limits.max_weight}")
        return value

    @field_validator("keywords")
    @classmethod
    def _check_keywords(cls, value: list[str]) -> list[str]:
        return [sanitize_string(word).strip() for word in value if sanitize_string(word).strip()]


class MemoryInput(BaseModel):
    """Store-memory request."""

    layer: MemoryLayer
    content: str
    entity_id: str | None = None
    preferred_llm_provider: str | None = None

    @field_validator("layer", mode="before")
    @classmethod
    def _check_layer(cls, value: Any) -> MemoryLayer:
        return MemoryLayer.parse(value)

    @field_validator("content")
    @classmethod
    def _check_content(cls, value: str, info: ValidationInfo) -> str:
        return _clean_text(value, "content", _limits(info).max_content_length)


class SearchInput(BaseModel):
    """Search-memory request."""

    layer: MemoryLayer
    query: str
    limit: int = 10

    @field_validator("layer", mode="before")
    @classmethod
    def _check_layer(cls, value: Any) -> MemoryLayer:
        return MemoryLayer.parse(value)

    @field_validator("query")
    @classmethod
    def _check_query(cls, value: str, info: ValidationInfo) -> str:
        return _clean_text(value, "query", _limits(info).max_content_length)

    @field_validator("limit")
    @classmethod
    def _check_limit(cls, value: int, info: ValidationInfo) -> int:
        maximum = _limits(info).max_search_limit
        if value < 1 or value > maximum:
            raise ValueError(f"limit must be between 1 and {maximum}")
        return value


def validate_request(model: type[ModelT], payload: dict[str, Any], limits: Limits) -> ModelT:
    """Validate ``payload`` against ``model`` under ``limits``."""
    try:
        return model.model_validate(payload, context={"limits": limits})
    except PydanticValidationError as exc:
        messages = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'request'}: {error['msg']}"
            for error in exc.errors()
        )
        raise ValidationError(messages) from exc
