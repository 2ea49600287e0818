"""Condition tree — recursively composed boolean predicates.

Every node carries a ``condition`` tag; the set of tags is closed and the
evaluator dispatches on it exhaustively.
"""

import re
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

_TIME_RE = re.compile(r"^([01]?\d|2[0-3]):[0-5]\d(:[0-5]\d)?$")

Weekday = Literal["mon", "tue", "wed", "thu", "fri", "sat", "sun"]


class StateCondition(BaseModel):
    """Entity (or attribute) value equals / differs from given values."""

    condition: Literal["state"] = "state"
    entity: Optional[str] = None            # Injected from the filter entry when absent
    attribute: Optional[str] = None
    state: Optional[Union[str, List[str]]] = None
    state_not: Optional[Union[str, List[str]]] = None


class NumericStateCondition(BaseModel):
    """Entity (or attribute) value lies strictly between ``above`` and ``below``."""

    condition: Literal["numeric_state"] = "numeric_state"
    entity: Optional[str] = None
    attribute: Optional[str] = None
    above: Optional[Union[float, str]] = None   # Number or entity id
    below: Optional[Union[float, str]] = None


class TimeCondition(BaseModel):
    condition: Literal["time"] = "time"
    after: Optional[str] = None             # "HH:MM" or "HH:MM:SS"
    before: Optional[str] = None
    weekdays: Optional[List[Weekday]] = None

    @field_validator("after", "before")
    @classmethod
    def _check_time(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not _TIME_RE.match(value):
            raise ValueError(f"Invalid time '{value}', expected HH:MM[:SS]")
        return value


class SunCondition(BaseModel):
    """Day/night window derived from the ``sun.sun`` entity."""

    condition: Literal["sun"] = "sun"
    after: Optional[Literal["sunrise", "sunset"]] = None
    before: Optional[Literal["sunrise", "sunset"]] = None


class ScreenCondition(BaseModel):
    condition: Literal["screen"] = "screen"
    media_query: str


class UserCondition(BaseModel):
    condition: Literal["user"] = "user"
    users: List[str]


class AndCondition(BaseModel):
    condition: Literal["and"] = "and"
    conditions: List["Condition"]


class OrCondition(BaseModel):
    condition: Literal["or"] = "or"
    conditions: List["Condition"]


class NotCondition(BaseModel):
    """Holds when none of its children holds."""

    condition: Literal["not"] = "not"
    conditions: List["Condition"] = Field(min_length=1)


Condition = Annotated[
    Union[
        StateCondition,
        NumericStateCondition,
        TimeCondition,
        SunCondition,
        ScreenCondition,
        UserCondition,
        AndCondition,
        OrCondition,
        NotCondition,
    ],
    Field(discriminator="condition"),
]

# Entity-scoped leaves: the ones that get the filter entry's entity injected.
EntityCondition = (StateCondition, NumericStateCondition)
CombinatorCondition = (AndCondition, OrCondition, NotCondition)

AndCondition.model_rebuild()
OrCondition.model_rebuild()
NotCondition.model_rebuild()
