# logger.py
import logging
import logging.config
from pathlib import Path

from genui.util.file_utils import ensure_dir, from_json_or_yaml

DEFAULT_LOGGER_CONFIG = Path(__file__).resolve().parent.parent / "configs" / "logger_config.yaml"


def setup_logging(
    config_file_path=None,
    log_file_path=None,
    verbose=False,
):
    """
    Loads logging config from 'config_file_path' (YAML or JSON) and sets up logging.
    Falls back to the packaged logger_config.yaml when no path is given.
    Optionally override file handler's filename, and set root logger to DEBUG if 'verbose'.
    """
    config = from_json_or_yaml(config_file_path or DEFAULT_LOGGER_CONFIG)

    handlers = config.get("handlers", {})
    if log_file_path and "file_handler" in handlers:
        handlers["file_handler"]["filename"] = str(log_file_path)
    if "file_handler" in handlers:
        ensure_dir(handlers["file_handler"].get("filename", ""))

    logging.config.dictConfig(config)

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.getLogger("genui").setLevel(logging.DEBUG)

    return logging.getLogger(__name__)
