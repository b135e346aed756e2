"""
Column mapper.

Resolves raw, multi-lingual spreadsheet headers to canonical field ids
using a statically declared alias table (see config.column_mapping).
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping, Optional
import structlog

from utils.text_utils import normalize_header

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ColumnMapping:
    """
    Header → field mapping for one import file.

    Keys are the raw headers as they appear in the file. Built once per
    file and discarded after the import; never persisted.
    """
    mapping: Mapping[str, str] = field(default_factory=dict)
    unmapped: tuple[str, ...] = ()

    def field_for(self, header: str) -> Optional[str]:
        """Field id for a raw header, or None if unmapped."""
        return self.mapping.get(header)

    @property
    def fields(self) -> set[str]:
        """Canonical fields covered by at least one header."""
        return set(self.mapping.values())

    def to_dict(self) -> dict:
        return {
            "mapping": dict(self.mapping),
            "unmapped": list(self.unmapped),
        }


def resolve_header(header: str, alias_table: Mapping[str, str]) -> Optional[str]:
    """
    Resolve one header to a canonical field.

    Order:
        1. Exact lookup of the normalized header
        2. Case-insensitive exact lookup
        3. Case-insensitive containment either way, first alias in
           declaration order wins

    Args:
        header: Raw header text
        alias_table: Alias label → field id

    Returns:
        Field id, or None if nothing matches
    """
    normalized = normalize_header(header)
    if not normalized:
        return None

    if normalized in alias_table:
        return alias_table[normalized]

    lowered = normalized.lower()
    for alias, field_id in alias_table.items():
        if normalize_header(alias).lower() == lowered:
            return field_id

    for alias, field_id in alias_table.items():
        alias_lower = normalize_header(alias).lower()
        if not alias_lower:
            continue
        if alias_lower in lowered or lowered in alias_lower:
            return field_id

    return None


def build_mapping(
    headers: Iterable[str],
    alias_table: Mapping[str, str],
) -> ColumnMapping:
    """
    Build the column mapping for one file.

    Several headers may resolve to the same field (e.g. "Количество" and
    "Кол-во"); the coercer applies them in header order, so the last one
    wins within a row.

    Args:
        headers: Raw headers from the first row of the file
        alias_table: Alias label → field id

    Returns:
        ColumnMapping with the resolved headers and unmapped diagnostics
    """
    mapping: dict[str, str] = {}
    unmapped: list[str] = []

    for header in headers:
        field_id = resolve_header(header, alias_table)
        if field_id is None:
            unmapped.append(header)
        else:
            mapping[header] = field_id

    logger.debug(
        "column_mapping_built",
        mapped=len(mapping),
        unmapped=unmapped
    )

    return ColumnMapping(
        mapping=MappingProxyType(mapping),
        unmapped=tuple(unmapped)
    )
