"""
gff_reader.py

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

Reads an InterProScan GFF3 output (plain or gzipped) in a single pass and
groups its lines into GeneRecords, applying the selection filters on the way.

Column reference (tab-separated, 9 columns):
    [0] sequence id   [1] source ("." for the sequence line itself)
    [3] start         [4] end
    [8] ";"-separated key=value attributes, "Name" and "signature_desc" are kept
https://interproscan-docs.readthedocs.io/en/latest/OutputFormats.html#gff3

Order of the pass:
1. Stop at the finish line (the "##FASTA" directive by default).
2. Skip comment lines and blank lines.
3. Parse the line, a malformed line aborts the whole read.
4. Skip lines whose sequence id fails the id expression.
5. Sequence lines create a GeneRecord unless its length falls outside the
bounds, the first sequence line seen for an id wins.
6. Domain lines are appended to their GeneRecord, or dropped when no
sequence line for that id was accepted before them.
After the pass, records failing the domain expression are dropped and the
remaining ones keep only the domains whose source matches the source expression.
"""

import gzip
import logging
import os
from typing import Dict, Iterable, List, Optional, TextIO, Tuple

from errors import InputFileError, LineFormatError
from expr_parser import Expr
from records import DEFAULT_DOMAIN_DESC, DEFAULT_DOMAIN_NAME, DomainRecord, GeneRecord

DEFAULT_COMMENT = "#"
DEFAULT_FINISH_LINE = "##FASTA"
N_COLUMNS = 9


def is_compressed(path: str) -> bool:
    return os.path.splitext(path)[1] == ".gz"


def open_with_gz(path: str) -> TextIO:
    """Opens path for reading text, through gzip when it ends with ".gz"."""
    try:
        if is_compressed(path):
            return gzip.open(path, "rt", encoding="utf-8")
        return open(path, "r", encoding="utf-8")
    except OSError as e:
        raise InputFileError(f"Failed to open input file {path}: {e}") from e


def parse_position(value: str, column: str, line: str) -> int:
    if not (value.isascii() and value.isdigit()):
        raise LineFormatError(f"invalid {column} position '{value}'", line=line)
    return int(value)


def parse_attributes(attributes: str) -> Tuple[str, str]:
    """Extracts (Name, signature_desc) from the attributes column.
    Pairs that are not exactly key=value are ignored."""
    domain_name = DEFAULT_DOMAIN_NAME
    domain_desc = DEFAULT_DOMAIN_DESC
    for attr in attributes.split(";"):
        pair = attr.split("=")
        if len(pair) != 2:
            continue
        key, value = pair
        if key == "Name":
            domain_name = value
        elif key == "signature_desc":
            domain_desc = value
    return domain_name, domain_desc


def parse_line(line: str) -> Tuple[str, DomainRecord]:
    """Parses one GFF3 feature line into (sequence id, DomainRecord).

    The returned record is the sequence line itself when its source is ".".
    Raises LineFormatError when the line does not have 9 columns or its
    positions are not unsigned integers.
    """
    line = line.strip()
    columns = line.split("\t")
    if len(columns) != N_COLUMNS:
        raise LineFormatError(
            f"expected {N_COLUMNS} tab-separated columns, found {len(columns)}: {line}", line=line)

    gene_id = columns[0]
    source = columns[1]
    start = parse_position(columns[3], "start", line)
    end = parse_position(columns[4], "end", line)
    domain_name, domain_desc = parse_attributes(columns[8])

    return gene_id, DomainRecord(source, start, end, domain_name, domain_desc)


class InterproGffReader:
    """Groups the lines of an InterProScan GFF3 stream into GeneRecords.

    Args:
        lines: Any iterable of text lines, typically an open file handle
        comment: Lines starting with this character are skipped
        finish_line: Reading stops at the first line starting with this text
        id_expr: Expression evaluated against {sequence id} for every line
        domain_expr: Expression evaluated against the domain names of each record
        source_expr: Expression evaluated against {source} of each domain
        min_length: Sequences shorter than this are not kept
        max_length: Sequences longer than this are not kept
        logger: Logger for per-line decisions, module logger by default
    """

    def __init__(
        self,
        lines: Iterable[str],
        comment: str = DEFAULT_COMMENT,
        finish_line: str = DEFAULT_FINISH_LINE,
        id_expr: Optional[Expr] = None,
        domain_expr: Optional[Expr] = None,
        source_expr: Optional[Expr] = None,
        min_length: Optional[int] = None,
        max_length: Optional[int] = None,
        logger: logging.Logger = None) -> None:
        self.lines = lines
        self.comment = comment
        self.finish_line = finish_line
        self.id_expr = id_expr
        self.domain_expr = domain_expr
        self.source_expr = source_expr
        self.min_length = min_length
        self.max_length = max_length
        self.logger = logger or logging.getLogger(__name__)

    def is_within_bounds(self, gene_record: GeneRecord) -> bool:
        if self.max_length is not None and gene_record.length > self.max_length:
            return False
        if self.min_length is not None and gene_record.length < self.min_length:
            return False
        return True

    def accumulate(self) -> Dict[str, GeneRecord]:
        """Single pass over the lines, returns records keyed by sequence id in first-seen order."""
        records_map: Dict[str, GeneRecord] = {}

        for line_number, raw_line in enumerate(self.lines, start=1):
            line = raw_line.rstrip("\r\n")
            if line.startswith(self.finish_line):
                self.logger.debug("GFF_READER --- ACCUMULATE --- Finish line reached at line %d", line_number)
                break
            if line.startswith(self.comment):
                continue
            if len(line) == 1 or not line.strip():
                continue

            try:
                gene_id, domain = parse_line(line)
            except LineFormatError as e:
                raise LineFormatError(str(e), line_number=line_number, line=line) from e

            if self.id_expr is not None and not self.id_expr.matches([gene_id]):
                continue

            if domain.is_gene():
                try:
                    gene_record = GeneRecord.from_span(gene_id, domain.start, domain.end)
                except LineFormatError as e:
                    raise LineFormatError(str(e), line_number=line_number, line=line) from e
                if not self.is_within_bounds(gene_record):
                    self.logger.debug(
                        "GFF_READER --- ACCUMULATE --- Skipping %s, length %d outside bounds",
                        gene_id, gene_record.length)
                    continue
                if gene_id in records_map:
                    self.logger.debug(
                        "GFF_READER --- ACCUMULATE --- Duplicate sequence line for %s at line %d ignored",
                        gene_id, line_number)
                    continue
                records_map[gene_id] = gene_record
            elif gene_id in records_map:
                records_map[gene_id].push_domain(domain)
            else:
                self.logger.debug(
                    "GFF_READER --- ACCUMULATE --- Dropping %s domain at line %d, no sequence line for %s",
                    domain.source, line_number, gene_id)

        return records_map

    def finish(self) -> List[GeneRecord]:
        """Reads everything and returns the selected records, domains pruned by source."""
        records_map = self.accumulate()
        records = []
        for gene_record in records_map.values():
            if self.domain_expr is not None and not self.domain_expr.matches_domains(gene_record):
                continue
            records.append(gene_record.filter_by_source_expr(self.source_expr))

        self.logger.info(
            "GFF_READER --- FINISH --- Kept %d of %d sequence records", len(records), len(records_map))
        return records


def read_records(path: str, **options) -> List[GeneRecord]:
    """Opens path (plain or .gz) and returns the records selected by the given
    InterproGffReader options."""
    with open_with_gz(path) as handle:
        try:
            return InterproGffReader(handle, **options).finish()
        except (OSError, EOFError, UnicodeDecodeError) as e:
            raise InputFileError(f"Failed to read input file {path}: {e}") from e
