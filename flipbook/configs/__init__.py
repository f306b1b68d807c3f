import os.path as osp

import yaml

from flipbook.utils.logger import logger


here = osp.dirname(osp.abspath(__file__))

DEFAULT_USER_CONFIG = osp.join(osp.expanduser("~"), ".flipbookrc")
DEFAULT_CATALOG = osp.join(here, "books.yaml")

_STRATEGIES = ("lazy", "eager")


def update_dict(target_dict, new_dict, validate_item=None):
    for key, value in new_dict.items():
        if validate_item:
            validate_item(key, value)
        if key not in target_dict:
            logger.warning("Skipping unexpected key in config: {}".format(key))
            continue
        if isinstance(target_dict[key], dict) and isinstance(value, dict):
            update_dict(target_dict[key], value, validate_item=validate_item)
        else:
            target_dict[key] = value


# -----------------------------------------------------------------------------


def get_default_config():
    config_file = osp.join(here, "viewer.yaml")
    with open(config_file) as f:
        config = yaml.safe_load(f)
    return config


def validate_config_item(key, value):
    if key == "strategy" and value not in _STRATEGIES:
        raise ValueError(
            "Unexpected value for config key 'strategy': {}".format(value)
        )
    if key == "aspect_ratio" and (value is None or float(value) <= 0):
        raise ValueError(
            "Unexpected value for config key 'aspect_ratio': {}".format(value)
        )
    if key in ("decode_timeout_s", "fetch_timeout_s") and float(value) <= 0:
        raise ValueError(
            "Timeouts must be positive, got {}={}".format(key, value)
        )


def _load_yaml_source(config_file_or_yaml):
    """Accept either a YAML mapping string or a path to a YAML file."""
    config_from_yaml = yaml.safe_load(config_file_or_yaml)
    if isinstance(config_from_yaml, dict):
        return config_from_yaml
    path = osp.expanduser(str(config_file_or_yaml))
    if not osp.isfile(path):
        if path != DEFAULT_USER_CONFIG:
            logger.warning("Config file not found: {}".format(path))
        return {}
    with open(path) as f:
        logger.info("Loading config file from: {}".format(path))
        loaded = yaml.safe_load(f)
    return loaded if isinstance(loaded, dict) else {}


def get_config(config_file_or_yaml=None, config_from_args=None):
    # 1. default config
    config = get_default_config()

    # 2. specified as file or yaml
    if config_file_or_yaml is not None:
        update_dict(
            config,
            _load_yaml_source(config_file_or_yaml),
            validate_item=validate_config_item,
        )

    # 3. command line arguments
    if config_from_args is not None:
        update_dict(
            config, config_from_args, validate_item=validate_config_item
        )

    return config
