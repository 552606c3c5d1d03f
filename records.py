"""
records.py

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

Record classes built from an InterProScan GFF3 file.

A GeneRecord is one annotated sequence (a line whose source column is ".")
and owns the DomainRecords (one per signature match) found on that sequence,
in input order.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterator, List, Optional

from errors import LineFormatError

if TYPE_CHECKING:
    from expr_parser import Expr

GENE_SOURCE = "."
DEFAULT_DOMAIN_NAME = "No Name"
DEFAULT_DOMAIN_DESC = "No Description"
TABLE_HEADER = ["id", "source", "term_id", "term_desc", "start", "end"]


@dataclass
class DomainRecord:
    source: str
    start: int
    end: int
    domain_name: str = DEFAULT_DOMAIN_NAME
    domain_desc: str = DEFAULT_DOMAIN_DESC

    def is_gene(self) -> bool:
        """True for the line defining the sequence itself, which carries its span."""
        return self.source == GENE_SOURCE

    def __str__(self) -> str:
        return f"{self.start}-{self.end} {self.domain_name} {self.domain_desc}"


@dataclass
class GeneRecord:
    id: str
    length: int
    domains: List[DomainRecord] = field(default_factory=list)

    @classmethod
    def from_span(cls, gene_id: str, start: int, end: int) -> "GeneRecord":
        """Builds a record whose length is end - start + 1. A reversed span is rejected."""
        if end < start:
            raise LineFormatError(f"sequence {gene_id} ends ({end}) before it starts ({start})")
        return cls(id=gene_id, length=end - start + 1)

    def push_domain(self, domain: DomainRecord) -> None:
        self.domains.append(domain)

    def iter_domains(self) -> Iterator[DomainRecord]:
        return iter(self.domains)

    def filter_by_source_expr(self, source_expr: Optional["Expr"]) -> "GeneRecord":
        """Returns a copy keeping only the domains whose source matches source_expr.
        With no expression the record itself is returned."""
        if source_expr is None:
            return self
        domains = [domain for domain in self.domains if source_expr.matches([domain.source])]
        return GeneRecord(id=self.id, length=self.length, domains=domains)

    def to_table_rows(self) -> List[List[str]]:
        """Rows for the tabular view, first row describes the sequence itself."""
        rows = [[self.id, GENE_SOURCE, GENE_SOURCE, GENE_SOURCE, "0", str(self.length)]]
        for domain in self.domains:
            rows.append([
                self.id,
                domain.source,
                domain.domain_name,
                domain.domain_desc,
                str(domain.start),
                str(domain.end),
            ])
        return rows

    def to_tsv_record(self) -> str:
        # gene_id source term_id term_desc start end
        return "\n".join("\t".join(row) for row in self.to_table_rows())

    def __str__(self) -> str:
        header = f"--- id: {self.id}, length {self.length} ---"
        domains = "\n".join(str(domain) for domain in self.domains)
        return f"{header}\n{domains}"
