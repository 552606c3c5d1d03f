import logging
import sys
import os
from unittest.mock import MagicMock
# Add the parent directory to the sys.path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from utils import (
    get_logger,
    get_multi_logger,
    validate_source_expr,
    parse_length_bound,
    compile_expr,
    SOURCE_NAMES
)
from expr_parser import Expr
from errors import ConfigError, ParseError

import pytest

###T get_logger

def test_get_logger_timestamped_file(tmp_path):
    """Log file name gets a yymmdd_HHMM timestamp before the extension"""
    log_path = tmp_path / "logs" / "select_records.log"
    logger, final_log = get_logger(str(log_path), scope="main", level="info")

    assert isinstance(logger, logging.Logger)
    assert os.path.dirname(final_log) == str(tmp_path / "logs")
    stem = os.path.splitext(os.path.basename(final_log))[0]
    parts = stem.split("_")
    assert parts[:2] == ["select", "records"]
    assert len(parts[-2]) == 6 and parts[-2].isdigit()
    assert len(parts[-1]) == 4 and parts[-1].isdigit()
    assert logger.level == logging.INFO

def test_get_logger_reuses_existing_timestamp(tmp_path):
    log_path = tmp_path / "select_records_240101_1200.log"
    _, final_log = get_logger(str(log_path), scope="input", identifier="proteome.gff3", level="debug")
    assert os.path.basename(final_log) == "select_records_240101_1200_proteome.gff3.log"

def test_get_logger_cleans_identifier(tmp_path):
    log_path = tmp_path / "run_240101_1200.log"
    logger, final_log = get_logger(str(log_path), scope="input", identifier="my file|1", level="warning")
    assert os.path.basename(final_log) == "run_240101_1200_my_file-1.log"
    assert logger.name == "input_my file|1"

###T get_multi_logger

def test_get_multi_logger_writes_to_all():
    first, second = MagicMock(), MagicMock()
    log = get_multi_logger([first, second])
    log("error", "Failed on %s", "gene1")
    first.error.assert_called_once_with("Failed on %s", "gene1")
    second.error.assert_called_once_with("Failed on %s", "gene1")

###T validate_source_expr

def test_validate_source_expr_none():
    assert validate_source_expr(None) is None

@pytest.mark.parametrize("text", ["Pfam", "Pfam | SMART", "!Coils", "!Pfam", "PANTHER$1"])
def test_validate_source_expr_accepts_known_sources(text):
    validate_source_expr(Expr.from_string(text))

@pytest.mark.parametrize("text", ["pfam", "Unknown", "Gene3D & CDD", "Pfam$2"])
def test_validate_source_expr_rejects_unsatisfiable(text):
    with pytest.raises(ConfigError, match="Invalid source expr"):
        validate_source_expr(Expr.from_string(text))

def test_source_names_are_unique():
    assert len(SOURCE_NAMES) == len(set(SOURCE_NAMES))
    assert "Pfam" in SOURCE_NAMES

###T parse_length_bound

def test_parse_length_bound_values():
    assert parse_length_bound(None, "min length") is None
    assert parse_length_bound("", "min length") is None
    assert parse_length_bound("150", "min length") == 150
    assert parse_length_bound(0, "max length") == 0

@pytest.mark.parametrize("value", ["abc", "1.5", -3])
def test_parse_length_bound_invalid(value):
    with pytest.raises(ConfigError):
        parse_length_bound(value, "max length")

###T compile_expr

def test_compile_expr():
    assert compile_expr(None, "id expr") is None
    assert compile_expr("a | b", "id expr") == Expr.from_string("a,b")

def test_compile_expr_names_the_option():
    with pytest.raises(ParseError, match="Invalid domain expr: double negation"):
        compile_expr("!!PF00001", "domain expr")
