"""Runtime configuration (feature flags and layout defaults)."""

from .settings import (
    FEATURE_FLAGS,
    get_all_flags,
    get_layout_defaults,
    is_enabled,
    set_flag,
)

__all__ = [
    "FEATURE_FLAGS",
    "get_all_flags",
    "get_layout_defaults",
    "is_enabled",
    "set_flag",
]
