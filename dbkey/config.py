"""Layered configuration of a conversion run.

The packaged ``default.yaml`` is updated with one or more user configs, later configs overwrite
earlier values. Only keys present in the defaults can be set and lists are always overwritten completely.
"""

import logging
import os
from collections import UserDict

import yaml

from dbkey.exceptions import KeyAddedConfigError, TypeMismatchConfigError

logger = logging.getLogger()

DEFAULT = "default"
USER_DEFINED = "user defined"

DEFAULT_CONFIG_PATH = os.path.join(
    os.path.dirname(__file__), "constants", "default.yaml"
)


class Config(UserDict):
    """Read-only dict of conversion settings, changed only through `update`."""

    def __init__(self, data: dict = None, name: str = DEFAULT) -> None:
        # UserDict.__init__ would route through the overwritten update()
        self.data = {**data} if data is not None else {}
        self.name = name

    def from_yaml(self, path: str) -> None:
        with open(path) as f:
            self.data = yaml.safe_load(f) or {}

    def __setitem__(self, key, item):
        raise NotImplementedError("Use update() to change the config.")

    def __delitem__(self, key):
        raise NotImplementedError("Use update() to change the config.")

    def update(self, configs: list["Config"]) -> None:
        """Update the config with other configs, the last one wins.

        Raises
        ------
        KeyAddedConfigError
            If a config sets a key that is not present in this one.

        TypeMismatchConfigError
            If a value does not have the type of the value it replaces.
        """
        for config in configs:
            logger.info(f"Updating config with '{config.name}'")
            _update(self.data, config.data, config.name)


def load_config(user_config_path: str | None = None) -> Config:
    """Load the default configuration and layer an optional user yaml file on top.

    Parameters
    ----------
    user_config_path : str, optional
        Path to a yaml file containing a subset of the default keys.

    Returns
    -------
    Config
        The merged configuration.
    """
    logger.info(f"loading default config from {DEFAULT_CONFIG_PATH}")
    config = Config(name=DEFAULT)
    config.from_yaml(DEFAULT_CONFIG_PATH)

    if user_config_path is not None:
        user_config = Config(name=USER_DEFINED)
        user_config.from_yaml(user_config_path)
        config.update([user_config])

    return config


def _update(
    target_config: dict,
    update_config: dict,
    config_name: str,
    parent_keys: str = "",
) -> None:
    """Recursively update `target_config` in place with the values of `update_config`.

    Nested sections are merged key by key. A default of None accepts any type,
    ints and floats may replace each other and ``"true"``/``"false"`` strings are read as booleans.
    """
    for key, update_value in update_config.items():
        full_key = f"{parent_keys}.{key}" if parent_keys else key

        if key not in target_config:
            raise KeyAddedConfigError(full_key, update_value, config_name)

        target_value = target_config[key]

        if isinstance(update_value, str) and update_value.lower() in ("true", "false"):
            update_value = update_value.lower() == "true"

        if (
            target_value is not None
            and update_value is not None
            and type(target_value) != type(update_value)
            and not (
                isinstance(target_value, int | float)
                and isinstance(update_value, int | float)
            )
        ):
            raise TypeMismatchConfigError(
                full_key,
                update_value,
                config_name,
                f"{type(update_value)} != {type(target_value)}",
            )

        if isinstance(target_value, dict) and isinstance(update_value, dict):
            _update(target_value, update_value, config_name, parent_keys=full_key)
        else:
            target_config[key] = update_value
