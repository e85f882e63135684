"""
Configuration Loader.

Responsible for reading the config.yaml file and applying the
SPARK_DEVICE_ID / SPARK_TOKEN environment overrides.
"""
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

logger = logging.getLogger(__name__)

ENV_OVERRIDES = {
    "SPARK_DEVICE_ID": "device_id",
    "SPARK_TOKEN": "token",
}


def load_config(config_path: str = "config.yaml", environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """
    Loads the YAML configuration file, then overlays credentials found in the environment.
    """
    config = _read_yaml(Path(config_path))

    env = os.environ if environ is None else environ
    # An empty "spark:" section loads as None
    spark_conf = config.get("spark") or {}
    config["spark"] = spark_conf
    for variable, key in ENV_OVERRIDES.items():
        if env.get(variable):
            spark_conf[key] = env[variable]
            logger.debug(f"spark.{key} taken from ${variable}")

    return config


def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        logger.warning(f"Config file not found at {path}. Using defaults.")
        return {}

    try:
        with open(path, 'r') as f:
            config = yaml.safe_load(f) or {}
            logger.info(f"Loaded configuration from {path}")
            return config
    except Exception as e:
        logger.error(f"Failed to parse config file: {e}")
        raise
