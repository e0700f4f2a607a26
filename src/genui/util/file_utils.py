import json
import os
from pathlib import Path
from typing import Any, Dict, Union

import yaml


def ensure_dir(file_path):
    """
    Check if the parent directory of the given file path exists, if not, create it.

    Args:
    file_path (str): The path of the file.

    Returns:
    dir_path (str): The directory path.
    """
    dir_path = os.path.dirname(str(file_path))
    if dir_path and not os.path.exists(dir_path):
        os.makedirs(dir_path, exist_ok=True)
    return dir_path


def from_json_or_yaml(filepath: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a configuration mapping from a JSON or YAML file.

    The format is picked from the file extension (.json, .yaml, .yml).

    Args:
    filepath (str | Path): The configuration file.

    Returns:
    dict: The parsed configuration. An empty file gives an empty dict.
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    suffix = path.suffix.lower()
    with open(path, "r", encoding="utf-8") as f:
        if suffix == ".json":
            data = json.load(f)
        elif suffix in (".yaml", ".yml"):
            data = yaml.safe_load(f)
        else:
            raise ValueError(f"Unsupported config format '{suffix}' for {path}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping at the top level")
    return data
