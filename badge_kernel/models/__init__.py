"""Badge Kernel data models."""

from badge_kernel.models.badge import (
    BadgeRender,
    BadgeStats,
    DerivedEntity,
    EntityFilterBadgeConfig,
    EntityFilterEntityConfig,
    StateFilter,
)
from badge_kernel.models.condition import (
    AndCondition,
    Condition,
    NotCondition,
    NumericStateCondition,
    OrCondition,
    ScreenCondition,
    StateCondition,
    SunCondition,
    TimeCondition,
    UserCondition,
)
from badge_kernel.models.device import DeviceAction, DeviceAlert, DeviceInfo
from badge_kernel.models.engine import EngineConfig
from badge_kernel.models.state import HassContext, LocaleContext, StateObject, UserInfo

__all__ = [
    "AndCondition",
    "BadgeRender",
    "BadgeStats",
    "Condition",
    "DerivedEntity",
    "DeviceAction",
    "DeviceAlert",
    "DeviceInfo",
    "EngineConfig",
    "EntityFilterBadgeConfig",
    "EntityFilterEntityConfig",
    "HassContext",
    "LocaleContext",
    "NotCondition",
    "NumericStateCondition",
    "OrCondition",
    "ScreenCondition",
    "StateCondition",
    "StateFilter",
    "StateObject",
    "SunCondition",
    "TimeCondition",
    "UserCondition",
    "UserInfo",
]
