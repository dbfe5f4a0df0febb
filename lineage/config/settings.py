"""
Configuration and Feature Flags for the Lineage Engine

Flags and layout defaults are controlled via environment variables so a
deployment can tune behaviour without code changes.

Usage:
    from lineage.config.settings import is_enabled, get_layout_defaults

    if is_enabled('check_tree_scope'):
        # Reject edges between members of different lineage trees
        ...

    options = get_layout_defaults()

Environment Variables:
    LINEAGE_CHECK_TREE_SCOPE=true/false - Reject cross-tree attach/move
    LINEAGE_LAYOUT_DIRECTION=TB/LR      - Layered drawing orientation
    LINEAGE_NODE_SEP=<float>            - Spacing between members in a rank
    LINEAGE_RANK_SEP=<float>            - Spacing between generations
    LINEAGE_CROSSING_PASSES=<int>       - Crossing minimization sweep budget
"""

import os
from typing import Any, Dict


# Feature flags with environment variable overrides
FEATURE_FLAGS: Dict[str, bool] = {
    # Members carrying different tree_id values may not be linked
    'check_tree_scope': os.getenv('LINEAGE_CHECK_TREE_SCOPE', 'true').lower() == 'true',
}

VALID_DIRECTIONS = ("TB", "LR")


def is_enabled(flag: str) -> bool:
    """
    Check if a feature flag is enabled.

    Args:
        flag: Feature flag name (e.g., 'check_tree_scope')

    Returns:
        True if flag is enabled, False otherwise

    Raises:
        KeyError: If flag name is not recognized

    Example:
        >>> is_enabled('check_tree_scope')
        True  # Default

        >>> # After: export LINEAGE_CHECK_TREE_SCOPE=false
        >>> is_enabled('check_tree_scope')
        False
    """
    if flag not in FEATURE_FLAGS:
        available = ', '.join(FEATURE_FLAGS.keys())
        raise KeyError(
            f"Unknown feature flag: '{flag}'. "
            f"Available flags: {available}"
        )

    return FEATURE_FLAGS[flag]


def get_all_flags() -> Dict[str, bool]:
    """
    Get all feature flags and their current state.

    Returns:
        Dictionary of flag names to boolean values
    """
    return FEATURE_FLAGS.copy()


def set_flag(flag: str, enabled: bool) -> None:
    """
    Programmatically set a feature flag (for testing only).

    Args:
        flag: Feature flag name
        enabled: True to enable, False to disable

    Warning:
        This is for testing only. In production, use environment variables.
    """
    if flag not in FEATURE_FLAGS:
        available = ', '.join(FEATURE_FLAGS.keys())
        raise KeyError(
            f"Unknown feature flag: '{flag}'. "
            f"Available flags: {available}"
        )

    FEATURE_FLAGS[flag] = enabled


def _env_number(name: str, default: float, cast=float) -> Any:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = cast(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got '{raw}'") from None
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")
    return value


def get_layout_defaults() -> Dict[str, Any]:
    """
    Read layout overrides from the environment.

    Only variables that are set appear in the result, so the returned
    dictionary can be merged over an engine's built-in options.

    Returns:
        Dictionary of layout option overrides

    Raises:
        ValueError: If a variable holds an unusable value
    """
    overrides: Dict[str, Any] = {}

    direction = os.getenv('LINEAGE_LAYOUT_DIRECTION')
    if direction:
        direction = direction.upper()
        if direction not in VALID_DIRECTIONS:
            raise ValueError(
                f"LINEAGE_LAYOUT_DIRECTION must be one of {VALID_DIRECTIONS}, got '{direction}'"
            )
        overrides["rankdir"] = direction

    if os.getenv('LINEAGE_NODE_SEP'):
        overrides["nodesep"] = _env_number('LINEAGE_NODE_SEP', 60.0)
    if os.getenv('LINEAGE_RANK_SEP'):
        overrides["ranksep"] = _env_number('LINEAGE_RANK_SEP', 120.0)
    if os.getenv('LINEAGE_CROSSING_PASSES'):
        overrides["crossing_passes"] = _env_number('LINEAGE_CROSSING_PASSES', 24, cast=int)

    return overrides
