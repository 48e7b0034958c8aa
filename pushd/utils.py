"""Small helpers shared by the config layer."""

from __future__ import annotations

import os
import re

_ENV_REF = re.compile(r"\$\{([^}]+)\}")


def _substitute(match: re.Match[str]) -> str:
    return os.environ.get(match.group(1), match.group(0))


def expand_env_vars(value: object) -> object:
    """Substitute ``${NAME}`` references in every string of a parsed YAML tree.

    References to unset variables stay verbatim so a missing secret shows up
    as-is in validation errors instead of silently becoming empty.
    """
    if isinstance(value, str):
        return _ENV_REF.sub(_substitute, value)
    if isinstance(value, dict):
        return {key: expand_env_vars(item) for key, item in value.items()}
    if isinstance(value, list):
        return [expand_env_vars(item) for item in value]
    return value
