"""Genetic code tables.

This module builds the lookup structures used for scanning and translation
from a genetic code definition:

- Forward codon -> residue and residue -> codons maps
- The same maps for the reverse complement strand
- Start codon sets for both strands
- Resolution of degenerate (IUPAC) codons

A degenerate codon resolves to a residue only if every concrete codon it
expands to encodes that residue; otherwise it resolves to ``X``. It counts
as a start codon only if every expansion is a start codon.

Tables are immutable. Built-in NCBI tables are constructed on first use and
cached for the lifetime of the process.

Example:
    >>> from frameforge.core.tables import get_table
    >>> table = get_table(1)
    >>> table.translate_codon("ATG")
    'M'
    >>> table.translate_codon("CAT", strand=-1)
    'M'
    >>> table.translate_codon("GCN")
    'A'
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping

import attrs
import numpy as np

from frameforge.data import GENETIC_CODES, ncbi_codons
from frameforge.utils.regions import validate_strand
from frameforge.utils.sequences import (
    AMINO_ACIDS,
    BASES,
    N_WINDOW_CODES,
    UNKNOWN,
    codon_code,
    expand_codon,
    iupac_codons,
    reverse_complement,
)

logger = logging.getLogger(__name__)

# =============================================================================
# Exceptions
# =============================================================================


class UnknownTableIdError(KeyError):
    """Raised when a genetic code id is not registered."""

    pass


# =============================================================================
# Constants
# =============================================================================

# The 64 concrete codons in index order (AAA = 0, TTT = 63)
CODONS: tuple[str, ...] = tuple(a + b + c for a in BASES for b in BASES for c in BASES)

# Special residue key for start codons in residue -> codon maps
START = "start"

DEFAULT_TABLE_ID = 1


# =============================================================================
# Helpers
# =============================================================================


def _check_residues(instance: GeneticCodeTable, attribute: attrs.Attribute, value: str) -> None:
    if len(value) != 64:
        raise ValueError(f"A genetic code needs 64 residues, got {len(value)}")
    invalid = set(value) - set(AMINO_ACIDS)
    if invalid:
        raise ValueError(f"Invalid residues in genetic code: {''.join(sorted(invalid))}")


def _check_starts(instance: GeneticCodeTable, attribute: attrs.Attribute, value: frozenset) -> None:
    invalid = value - set(CODONS)
    if invalid:
        raise ValueError(f"Start codons must be concrete codons: {sorted(invalid)}")


def _invert(mapping: Mapping[str, str], starts: frozenset[str]) -> dict[str, tuple[str, ...]]:
    """Build residue -> sorted codons, with start codons under START."""
    inverted: dict[str, list[str]] = {}
    for codon, residue in mapping.items():
        inverted.setdefault(residue, []).append(codon)
    result = {residue: tuple(sorted(codons)) for residue, codons in inverted.items()}
    result[START] = tuple(sorted(starts))
    return result


def _resolve(mapping: Mapping[str, str], starts: frozenset[str]) -> tuple[np.ndarray, np.ndarray]:
    """Resolve every IUPAC codon against a concrete codon map.

    Returns:
        Tuple of (residue per window code, start flag per window code).
    """
    resolved = np.full(N_WINDOW_CODES, UNKNOWN, dtype="<U1")
    start_mask = np.zeros(N_WINDOW_CODES, dtype=bool)

    for codon in iupac_codons():
        expansions = expand_codon(codon)
        residues = {mapping[concrete] for concrete in expansions}
        code = codon_code(codon)
        if len(residues) == 1:
            resolved[code] = residues.pop()
        start_mask[code] = all(concrete in starts for concrete in expansions)

    return resolved, start_mask


# =============================================================================
# GeneticCodeTable
# =============================================================================


@attrs.frozen
class GeneticCodeTable:
    """An immutable genetic code with derived lookup structures.

    Derived structures are indexed by strand: element 0 holds the forward
    strand and element 1 the reverse complement strand.

    Attributes:
        table_id: Numeric table id (NCBI numbering for built-in tables).
        name: Human-readable table name.
        residues: 64 residues indexed by concrete codon (AAA first).
        start_codons: Forward strand start codons.
        codon_to_residue: Concrete codon -> residue, per strand.
        residue_to_codons: Residue (or ``"start"``) -> codons, per strand.
        strand_starts: Start codons, per strand.
    """

    table_id: int
    name: str
    residues: str = attrs.field(validator=_check_residues)
    start_codons: frozenset[str] = attrs.field(converter=frozenset, validator=_check_starts)

    codon_to_residue: tuple[dict[str, str], dict[str, str]] = attrs.field(
        init=False, repr=False, eq=False
    )
    residue_to_codons: tuple[dict[str, tuple[str, ...]], dict[str, tuple[str, ...]]] = (
        attrs.field(init=False, repr=False, eq=False)
    )
    strand_starts: tuple[frozenset[str], frozenset[str]] = attrs.field(
        init=False, repr=False, eq=False
    )
    _resolved: tuple[np.ndarray, np.ndarray] = attrs.field(init=False, repr=False, eq=False)
    _start_masks: tuple[np.ndarray, np.ndarray] = attrs.field(init=False, repr=False, eq=False)

    def __attrs_post_init__(self) -> None:
        forward = dict(zip(CODONS, self.residues))
        reverse = {reverse_complement(codon): residue for codon, residue in forward.items()}
        reverse_starts = frozenset(reverse_complement(codon) for codon in self.start_codons)

        forward_resolved, forward_mask = _resolve(forward, self.start_codons)
        reverse_resolved, reverse_mask = _resolve(reverse, reverse_starts)

        object.__setattr__(self, "codon_to_residue", (forward, reverse))
        object.__setattr__(
            self,
            "residue_to_codons",
            (_invert(forward, self.start_codons), _invert(reverse, reverse_starts)),
        )
        object.__setattr__(self, "strand_starts", (self.start_codons, reverse_starts))
        object.__setattr__(self, "_resolved", (forward_resolved, reverse_resolved))
        object.__setattr__(self, "_start_masks", (forward_mask, reverse_mask))

    @staticmethod
    def _rc(strand: int) -> int:
        return 0 if validate_strand(strand, allow_both=False) == 1 else 1

    @property
    def stop_codons(self) -> tuple[str, ...]:
        """Forward strand stop codons."""
        return self.residue_to_codons[0].get("*", ())

    def codons(self, residue: str, strand: int = 1) -> list[str]:
        """Concrete codons encoding a residue, or start codons for ``"start"``.

        Returns:
            A new list; empty if the table never encodes the residue.
        """
        key = residue if residue == START else residue.upper()
        return list(self.residue_to_codons[self._rc(strand)].get(key, ()))

    def translate_codon(self, codon: str, strand: int = 1) -> str:
        """Translate a single (possibly degenerate) codon.

        On the - strand the codon is read as it appears on the + strand,
        i.e. ``CAT`` on strand -1 is the reverse complement of ``ATG``.

        Returns:
            The residue, or ``X`` if the codon is ambiguous or malformed.
        """
        if len(codon) != 3:
            return UNKNOWN
        return str(self._resolved[self._rc(strand)][codon_code(codon.upper())])

    def is_start(self, codon: str, strand: int = 1) -> bool:
        """Whether every expansion of a codon is a start codon."""
        if len(codon) != 3:
            return False
        return bool(self._start_masks[self._rc(strand)][codon_code(codon.upper())])

    def residues_for(self, codon: str, strand: int = 1) -> frozenset[str]:
        """All residues a (possibly degenerate) codon may encode."""
        mapping = self.codon_to_residue[self._rc(strand)]
        return frozenset(mapping[concrete] for concrete in expand_codon(codon.upper()))

    def residue_lookup(self, strand: int = 1) -> np.ndarray:
        """Residue per window code (see ``encode_windows``). Do not modify."""
        return self._resolved[self._rc(strand)]

    def start_lookup(self, strand: int = 1) -> np.ndarray:
        """Start flag per window code. Do not modify."""
        return self._start_masks[self._rc(strand)]


# =============================================================================
# Construction
# =============================================================================


def custom_table(
    residues: str,
    starts: str,
    table_id: int = 0,
    name: str = "Custom",
) -> GeneticCodeTable:
    """Build a table from NCBI-style strings.

    Args:
        residues: 64 residues in NCBI (TCAG) codon order (``ncbieaa``).
        starts: 64 flags in the same order; ``M`` marks a start codon
            (``sncbieaa``).
        table_id: Id for the new table.
        name: Name for the new table.

    Raises:
        ValueError: If either string is malformed.
    """
    if len(starts) != 64:
        raise ValueError(f"Start annotation needs 64 flags, got {len(starts)}")
    if len(residues) != 64:
        raise ValueError(f"A genetic code needs 64 residues, got {len(residues)}")

    order = ncbi_codons()
    mapping = dict(zip(order, residues.upper()))
    start_codons = [codon for codon, flag in zip(order, starts.upper()) if flag == "M"]
    return table_from_mapping(mapping, start_codons, table_id=table_id, name=name)


def table_from_mapping(
    mapping: Mapping[str, str],
    starts: Iterable[str] = ("ATG",),
    table_id: int = 0,
    name: str = "Custom",
) -> GeneticCodeTable:
    """Build a table from a codon -> residue mapping.

    Args:
        mapping: Residue for each of the 64 concrete codons (DNA or RNA).
        starts: Start codons.
        table_id: Id for the new table.
        name: Name for the new table.

    Raises:
        ValueError: If the mapping doesn't cover all 64 codons.
    """
    normalized = {
        codon.upper().replace("U", "T"): residue.upper() for codon, residue in mapping.items()
    }
    missing = [codon for codon in CODONS if codon not in normalized]
    if missing:
        raise ValueError(f"Genetic code is missing {len(missing)} codons, e.g. {missing[:3]}")

    return GeneticCodeTable(
        table_id=table_id,
        name=name,
        residues="".join(normalized[codon] for codon in CODONS),
        start_codons=frozenset(codon.upper().replace("U", "T") for codon in starts),
    )


def build_table(table_id: int) -> GeneticCodeTable:
    """Build a built-in NCBI table without consulting the cache.

    Raises:
        UnknownTableIdError: If the id is not a built-in table.
    """
    if table_id not in GENETIC_CODES:
        raise UnknownTableIdError(f"Unknown genetic code table: {table_id}")

    definition = GENETIC_CODES[table_id]
    table = custom_table(definition.residues, definition.starts, table_id, definition.name)
    logger.debug(f"Built genetic code table {table_id} ({definition.name})")
    return table


# =============================================================================
# Registry
# =============================================================================

_TABLE_CACHE: dict[int, GeneticCodeTable] = {}
_TABLE_LOCK = threading.Lock()


def get_table(table_id: int = DEFAULT_TABLE_ID) -> GeneticCodeTable:
    """Get a table by id, building and caching built-in tables on first use.

    Tables are fully built before being published, so concurrent readers
    never see a partial table. Custom tables are found once registered
    with ``register_table``.

    Raises:
        UnknownTableIdError: If the id is neither built-in nor registered.
    """
    table = _TABLE_CACHE.get(table_id)
    if table is not None:
        return table

    with _TABLE_LOCK:
        table = _TABLE_CACHE.get(table_id)
        if table is None:
            table = build_table(table_id)
            _TABLE_CACHE[table_id] = table
    return table


def register_table(table: GeneticCodeTable) -> GeneticCodeTable:
    """Publish a custom table so ``get_table`` can find it by id.

    Registering an identical table twice is a no-op.

    Raises:
        ValueError: If the id belongs to a built-in table or to a different
            registered table.
    """
    with _TABLE_LOCK:
        existing = _TABLE_CACHE.get(table.table_id)
        if existing is not None and existing == table:
            return existing
        if table.table_id in GENETIC_CODES or existing is not None:
            raise ValueError(f"Genetic code table id {table.table_id} is already in use")
        _TABLE_CACHE[table.table_id] = table

    logger.info(f"Registered custom genetic code table {table.table_id} ({table.name})")
    return table


def available_tables() -> list[tuple[int, str]]:
    """List built-in and registered tables as (id, name) pairs, ordered by id."""
    names = {table_id: definition.name for table_id, definition in GENETIC_CODES.items()}
    names.update({table_id: table.name for table_id, table in list(_TABLE_CACHE.items())})
    return sorted(names.items())
