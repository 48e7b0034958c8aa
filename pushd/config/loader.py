from pathlib import Path
from typing import Type, TypeVar

import yaml
from instrukt_ai_logging import get_logger
from pydantic import BaseModel

from pushd.config.schema import GlobalConfig
from pushd.utils import expand_env_vars

logger = get_logger(__name__)

T = TypeVar("T", bound=BaseModel)


def _warn_unknown_keys(model: BaseModel, path: str, config_path: Path) -> None:
    """Recursively warn about unknown keys in a model and its nested models."""
    if model.model_extra:
        logger.warning("Unknown keys in %s at %s: %s", path, config_path, list(model.model_extra.keys()))

    for field_name, field_value in model.__dict__.items():
        if isinstance(field_value, BaseModel):
            _warn_unknown_keys(field_value, f"{path}.{field_name}", config_path)


def load_config(path: Path, model_class: Type[T]) -> T:
    """Load and validate configuration from a YAML file.

    A missing file yields the model defaults. Read errors propagate so that a
    hot reload can keep the last good configuration.

    Args:
        path: Path to the pushd.yml file.
        model_class: The Pydantic model class to use for validation.

    Returns:
        The validated configuration model.
    """
    if not path.exists():
        return model_class()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    expanded = expand_env_vars(raw)
    model = model_class.model_validate(expanded)
    _warn_unknown_keys(model, "root", path)
    return model


def load_global_config(path: Path) -> GlobalConfig:
    return load_config(path, GlobalConfig)
