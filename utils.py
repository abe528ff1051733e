# utils.py
"""
Utility functions for the isotope mixture framework.

This module provides helper functions, such as logging setup and
configuration loading, that are used across different parts of the
application but do not belong to a specific domain like the test
chamber or the mixture controller.
"""
import logging
import logging.handlers
import json
import math
import os
from typing import Dict, Any

# --- Data Contracts ---
#
# setup_logging(config: Dict[str, Any]) -> None:
#   - Inputs:
#     - config: A dictionary containing a "logging" key with "level",
#       "format", and "log_file" sub-keys. A null "log_file" disables
#       the file handler.
#   - Outputs: None
#   - Side Effects: Replaces the root logger's handlers with a console
#     handler and, when a log file is named, a rotating file handler in
#     a directory created on demand.
#
# load_config(path: str) -> Dict[str, Any]:
#   - Raises FileNotFoundError or json.JSONDecodeError after logging them.
#
# round_symmetric(value: float) -> int:
#   - Rounds half away from zero, so 0.5 -> 1 and -0.5 -> -1.

def setup_logging(config: Dict[str, Any]) -> None:
    """
    Points the root logger at the console and, optionally, a log file.

    The "logging" section of `config` picks the level and format. Its
    "log_file" entry names a rotating log file; null or an empty string
    keeps output on the console only.
    """
    log_config = config.get('logging', {})
    level_name = log_config.get('level', 'INFO').upper()
    formatter = logging.Formatter(
        log_config.get('format', '%(asctime)s - %(levelname)s - %(message)s')
    )
    log_file_path = log_config.get('log_file', 'logs/mixtures.log')

    handlers = [logging.StreamHandler()]
    if log_file_path:
        log_dir = os.path.dirname(log_file_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        # 1MB per file, five old files kept.
        handlers.append(logging.handlers.RotatingFileHandler(
            log_file_path, maxBytes=1024*1024, backupCount=5
        ))

    root = logging.getLogger()
    root.setLevel(level_name)
    # Repeated calls replace the handlers instead of stacking duplicates.
    for old_handler in list(root.handlers):
        root.removeHandler(old_handler)
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    destination = f"console and {log_file_path}" if log_file_path else "console only"
    logging.info(f"Logging to {destination} at {level_name}.")

def load_config(path: str) -> Dict[str, Any]:
    """Reads the JSON settings file for a mixture session."""
    logging.debug(f"Reading mixture settings from {path}.")
    try:
        with open(path, 'r') as settings_file:
            settings = json.load(settings_file)
    except FileNotFoundError:
        logging.error(f"No settings file at {path}.")
        raise
    except json.JSONDecodeError as e:
        logging.error(f"Settings file {path} is not valid JSON (line {e.lineno}, column {e.colno}).")
        raise
    logging.debug(f"Read {len(settings)} settings sections from {path}.")
    return settings

def round_symmetric(value: float) -> int:
    """Rounds to the nearest integer, with halves rounded away from zero."""
    rounded = math.floor(abs(value) + 0.5)
    return int(rounded if value >= 0 else -rounded)
