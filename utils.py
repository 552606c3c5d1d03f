"""
utils.py

Copyright 2024 Eduardo Horta Santos <GitHub: Eduardo-HortaS>

This program is free software; you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation; either version 3 of the License, or
(at your option) any later version.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
GNU General Public License for more details.

You should have received a copy of the GNU General Public License
along with this program; if not, write to the Free Software
Foundation, Inc., 51 Franklin Street, Fifth Floor, Boston,
MA 02110-1301, USA.

This script contains utility functions shared by select_records.py and its modules.

"""

import logging
import os
from datetime import datetime
from typing import Any, Callable, List, Literal, Optional

from errors import ConfigError, ExpressionError
from expr_parser import Expr

Scope = Literal["main", "input"]
LogLevel = Literal["debug", "info", "warning", "error", "critical"]

# Analyses InterProScan may report in the source column of its GFF3 output
SOURCE_NAMES = [
    "MobiDBLite",
    "Gene3D",
    "FunFam",
    "ProSitePatterns",
    "PANTHER",
    "CDD",
    "Pfam",
    "SUPERFAMILY",
    "ProSiteProfiles",
    "PRINTS",
    "PIRSF",
    "TIGRFAM",
    "NCBIfam",
    "HAMAP",
    "SMART",
    "Coils",
    "PIRSR",
    "SFLD",
    "AntiFam",
]

def get_logger(log_path: str, scope: Scope = 'main', identifier: str = None,
               level: LogLevel = 'debug') -> tuple[logging.Logger, str]:
    """
    Creates and configures a logger that writes to a timestamped log file.

    Parameters:
    log_path (str): The base path for the log file.
    scope (str): The scope of the logger, either 'main' or 'input'. Defaults to 'main'.
    identifier (str, optional): An optional identifier to include in the log file name. Defaults to None.
    level (str): Lowest level written to the file. Defaults to 'debug'.

    Returns:
    tuple[logging.Logger, str]: A tuple containing the configured logger and the final log file path.
    """
    log_dir = os.path.dirname(log_path)
    base_name = os.path.basename(log_path)
    base_stem, base_ext = os.path.splitext(base_name)

    # Reuse a timestamp already present at the END of the filename
    timestamp = None
    parts = base_stem.split("_")
    if len(parts) >= 3:
        candidate_date, candidate_time = parts[-2], parts[-1]
        if (len(candidate_date) == 6 and candidate_date.isdigit() and
            len(candidate_time) == 4 and candidate_time.isdigit()):
            timestamp = f"{candidate_date}_{candidate_time}"
            base_stem = "_".join(parts[:-2])

    if not timestamp:
        timestamp = datetime.now().strftime("%y%m%d_%H%M")

    if scope == "input" and identifier:
        clean_id = str(identifier).replace("|", "-").replace(" ", "_")[:64]
        filename = f"{base_stem}_{timestamp}_{clean_id}{base_ext}"
    else:
        filename = f"{base_stem}_{timestamp}{base_ext}"

    final_log = os.path.join(log_dir, filename)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
    logger = logging.getLogger(f"{scope}_{identifier}" if identifier else "main")
    if not logger.handlers:
        handler = logging.FileHandler(final_log)
        handler.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s - %(message)s"))
        logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper()))

    return logger, final_log

def get_multi_logger(loggers: List[logging.Logger]) -> Callable[[LogLevel, str, Any], None]:
    """Helper to write same message to multiple loggers.

    Args:
        loggers: List of logger instances to write to

    Returns:
        Function that takes:
            - level: Must be one of "debug", "info", "warning", "error", "critical"
            - message: Format string
            - args: Values for format string

    Example:
        >>> log = get_multi_logger([input_logger, main_logger])
        >>> log("info", "Selected %d records", len(records))
    """
    def log(level: LogLevel, message: str, *args: Any) -> None:
        for logger in loggers:
            getattr(logger, level)(message, *args)
    return log

def validate_source_expr(source_expr: Optional[Expr]) -> None:
    """Rejects a source expression that no InterProScan analysis name can satisfy.

    Each domain has a single source, so the expression must match {name} for
    at least one name of SOURCE_NAMES. A typo such as "pfam" or an impossible
    "Pfam & SMART" is caught before the input is read.
    """
    if source_expr is None:
        return
    if not any(source_expr.matches([name]) for name in SOURCE_NAMES):
        raise ConfigError(
            f"Invalid source expr. Please select from [{' '.join(SOURCE_NAMES)}]")

def parse_length_bound(value: Any, option: str) -> Optional[int]:
    """Converts a --min-length/--max-length value to a non-negative int, None stays None."""
    if value is None or value == "":
        return None
    try:
        bound = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{option} must be an integer, got {value!r}") from e
    if bound < 0:
        raise ConfigError(f"{option} must not be negative, got {bound}")
    return bound

def compile_expr(text: Optional[str], option: str) -> Optional[Expr]:
    """Parses an option's expression text, keeping the option name in the error."""
    if text is None:
        return None
    try:
        return Expr.from_string(text)
    except ExpressionError as e:
        raise type(e)(f"Invalid {option}: {e}") from e
