from __future__ import annotations

from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ActionKind(str, Enum):
    CLICK = "click"
    INPUT = "input"
    ASSERTION = "assertion"
    NAVIGATION = "navigation"
    WAIT = "wait"


class TestStep(BaseModel):
    """A single executable step of a generated UI test."""

    # Not a pytest test class.
    __test__ = False

    model_config = ConfigDict(frozen=True)

    name: str
    action: ActionKind
    locator: str | None = Field(default=None, validation_alias=AliasChoices("locator", "selector"))
    value: str | None = None
    expected: str | None = None
    timeout: int | None = Field(default=None, ge=0)
