"""
select_records.py

Copyright 2025 Eduardo Horta Santos <GitHub: Eduardo-HortaS>

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

Selects sequence records from an InterProScan GFF3 output (plain or .gz)
using boolean expressions and prints them as an ID list, a table or TSV.

Expressions combine names with & (and), | or , (or), ! (not) and brackets,
"name$N" requires exactly N occurrences. For example:
    --id-expr "AT1G01010.1 , AT1G01020.1"  two transcripts, ids must not contain operator characters
    --domain-expr "PF00069 & !PF07714"      sequences with a kinase domain but no tyrosine kinase one
    --domain-expr "PF00400$7"               sequences with exactly seven WD40 repeats
    --source-expr "Pfam | SMART"            report only Pfam and SMART matches

Options may also come from an INI file (-cF), command-line values win:

    [Input]
    input = proteome.gff3.gz
    comment = #
    finish_line = ##FASTA
    [Filters]
    id_expr =
    domain_expr = PF00069
    source_expr = Pfam
    min_length = 100
    max_length = 2000
    [Output]
    outformat = tsv
    output = selected.tsv
    [Logging]
    log = logs/select_records.log
    log_level = info

Functions:
    1 - load_config - Reads options from an INI file.
    2 - parse_arguments - Merges command-line options over config and defaults.
    3 - render_ids / render_table / render_tsv - Output formats.
    4 - write_output - Writes to a file or stdout.
    5 - main - Runs the selection.
"""

import os
import sys
import argparse
from configparser import ConfigParser
from typing import Callable, Dict, List
import pandas as pd
from decorators import measure_time, measure_time_and_memory
from errors import ConfigError, IprSelectError
from gff_reader import DEFAULT_COMMENT, DEFAULT_FINISH_LINE, read_records
from records import TABLE_HEADER, GeneRecord
from utils import compile_expr, get_logger, get_multi_logger, parse_length_bound, validate_source_expr

OUTPUT_FORMATS = ["id", "all", "tsv"]
LOG_LEVELS = ["debug", "info", "warning", "error"]

DEFAULTS = {
    "input": None,
    "comment": DEFAULT_COMMENT,
    "finish_line": DEFAULT_FINISH_LINE,
    "id_expr": None,
    "domain_expr": None,
    "source_expr": None,
    "min_length": None,
    "max_length": None,
    "outformat": "id",
    "output": None,
    "log": "logs/select_records.log",
    "log_level": "warning",
    "profile": False,
}

# (section, key) for every option an INI file may set
CONFIG_KEYS = {
    "input": "Input",
    "comment": "Input",
    "finish_line": "Input",
    "id_expr": "Filters",
    "domain_expr": "Filters",
    "source_expr": "Filters",
    "min_length": "Filters",
    "max_length": "Filters",
    "outformat": "Output",
    "output": "Output",
    "log": "Logging",
    "log_level": "Logging",
}

def load_config(config_file=None) -> Dict:
    """Load options from an INI file, returning only the keys it sets."""
    config = ConfigParser(interpolation=None)
    if not config_file:
        return {}
    if not os.path.exists(config_file):
        raise ConfigError(f"Config file not found: {config_file}")
    config.read(config_file, encoding="utf-8")

    options = {}
    for key, section in CONFIG_KEYS.items():
        value = config.get(section, key, fallback=None)
        if value is not None and value.strip() != "":
            options[key] = value.strip()
    if config.has_option("Logging", "profile"):
        options["profile"] = config.getboolean("Logging", "profile")
    return options

def parse_arguments(argv: List[str] = None) -> argparse.Namespace:
    """Parse command-line arguments, merged over the INI config and the defaults."""
    parser = argparse.ArgumentParser(description=
    "Selects records from an InterProScan GFF3 output by sequence id, \
    domain names, source database and sequence length.")
    parser.add_argument("-cF", "--config", help="Path to config.ini file",
                        required=False, type=str, default=None)
    # Required, but checked for after merging with the config file
    parser.add_argument("-i", "--input", help="Input GFF3 file generated by InterProScan, may be gzipped",
                        required=False, type=str, default=None)
    parser.add_argument("-oF", "--outformat", choices=OUTPUT_FORMATS,
                        help="Output format: id (default), all (table) or tsv",
                        required=False, default=None)
    parser.add_argument("-o", "--output", help="Output file path, stdout if absent",
                        required=False, type=str, default=None)
    parser.add_argument("-iE", "--id-expr", help="To select records by transcript (or gene) ID",
                        required=False, type=str, default=None)
    parser.add_argument("-dE", "--domain-expr", help="To select records by domain ID",
                        required=False, type=str, default=None)
    parser.add_argument("-sE", "--source-expr", help="Filter output by source name",
                        required=False, type=str, default=None)
    parser.add_argument("-c", "--comment", help="Comment character, default '#'",
                        required=False, type=str, default=None)
    parser.add_argument("-fL", "--finish-line",
                        help="Reading stops at the line starting with this text, default '##FASTA'",
                        required=False, type=str, default=None)
    parser.add_argument("-mL", "--min-length", help="Minimum sequence length (inclusive)",
                        required=False, type=int, default=None)
    parser.add_argument("-xL", "--max-length", help="Maximum sequence length (inclusive)",
                        required=False, type=int, default=None)
    parser.add_argument("-p", "--profile", action="store_true",
                        help="Log time and memory used by the read pass",
                        required=False)
    parser.add_argument("-l", "--log", help="Log path",
                        required=False, type=str, default=None)
    parser.add_argument("-lL", "--log-level", choices=LOG_LEVELS, help="Log level, default warning",
                        required=False, default=None)
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        parser.error(str(e))

    # Command line wins over config, config wins over defaults
    options = dict(DEFAULTS)
    options.update(config)
    for key, value in vars(args).items():
        if key == "config":
            continue
        if value is not None and value is not False:
            options[key] = value

    if not options["input"]:
        parser.error("Missing required parameter: input")
    if options["outformat"] not in OUTPUT_FORMATS:
        parser.error(f"Invalid outformat {options['outformat']!r}, choose from {', '.join(OUTPUT_FORMATS)}")
    if options["log_level"] not in LOG_LEVELS:
        parser.error(f"Invalid log level {options['log_level']!r}, choose from {', '.join(LOG_LEVELS)}")
    if len(options["comment"]) != 1:
        parser.error(f"Comment must be a single character, got {options['comment']!r}")
    if not options["finish_line"]:
        parser.error("Finish line must not be empty")
    try:
        options["min_length"] = parse_length_bound(options["min_length"], "min length")
        options["max_length"] = parse_length_bound(options["max_length"], "max length")
    except ConfigError as e:
        parser.error(str(e))

    return argparse.Namespace(**options)

def render_ids(records: List[GeneRecord]) -> str:
    return "\n".join(record.id for record in records)

def render_table(records: List[GeneRecord]) -> str:
    """Aligned table with one row per sequence followed by its domains."""
    rows = [row for record in records for row in record.to_table_rows()]
    if not rows:
        return "  ".join(TABLE_HEADER)
    table = pd.DataFrame(rows, columns=TABLE_HEADER)
    return table.to_string(index=False)

def render_tsv(records: List[GeneRecord]) -> str:
    return "\n".join(record.to_tsv_record() for record in records)

RENDERERS: Dict[str, Callable[[List[GeneRecord]], str]] = {
    "id": render_ids,
    "all": render_table,
    "tsv": render_tsv,
}

def write_output(text: str, output_path: str = None) -> None:
    """Writes text followed by a newline to output_path, or stdout when absent.
    An empty selection still creates (or truncates) output_path."""
    line = text + "\n" if text else ""
    if output_path:
        out_dir = os.path.dirname(output_path)
        if out_dir:
            os.makedirs(out_dir, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as out:
            out.write(line)
    else:
        sys.stdout.write(line)

def main(argv: List[str] = None):
    """Main function, initializes this script"""
    args = parse_arguments(argv)
    main_logger, _ = get_logger(args.log, scope="main", level=args.log_level)
    input_logger, _ = get_logger(args.log, scope="input",
                                 identifier=os.path.basename(args.input), level=args.log_level)
    log_to_both = get_multi_logger([main_logger, input_logger])
    log_to_both("debug", "SELECT_RECORDS --- MAIN --- Running with arguments: %s", args)

    try:
        id_expr = compile_expr(args.id_expr, "id expr")
        domain_expr = compile_expr(args.domain_expr, "domain expr")
        source_expr = compile_expr(args.source_expr, "source expr")
        validate_source_expr(source_expr)

        wrap = measure_time_and_memory if args.profile else measure_time
        records = wrap(read_records, input_logger)(
            args.input,
            comment=args.comment,
            finish_line=args.finish_line,
            id_expr=id_expr,
            domain_expr=domain_expr,
            source_expr=source_expr,
            min_length=args.min_length,
            max_length=args.max_length,
            logger=input_logger,
        )
    except IprSelectError as e:
        log_to_both("error", "SELECT_RECORDS --- MAIN --- %s", e)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    log_to_both("info", "SELECT_RECORDS --- MAIN --- Selected %d records from %s", len(records), args.input)

    try:
        write_output(RENDERERS[args.outformat](records), args.output)
    except OSError as e:
        log_to_both("error", "SELECT_RECORDS --- MAIN --- Failed to write output to %s: %s", args.output, e)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

if __name__ == '__main__':
    main()
