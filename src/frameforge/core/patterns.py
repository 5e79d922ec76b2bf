"""Memoized codon matchers.

A matcher answers "does the codon at this position encode residue R on
strand S?" for every window of a sequence at once. Matchers are built
lazily from a genetic code table and cached per (table id, residue,
strand). The cache only grows; a matcher is fully built before it is
published, so readers never need the lock.

Besides residues, three special keys are accepted:

    start:  Start codons
    lower:  The codon at the lower end of a CDS on the given strand
            (start on the + strand, stop on the - strand)
    upper:  The codon at the upper end of a CDS on the given strand
            (stop on the + strand, start on the - strand)

Matching is overlap-safe: every position is tested, so overlapping codons
such as ``TAGTAA`` -> ``TAG`` at 0 and ``TAA`` at 3 and nothing in between
are never skipped.

Example:
    >>> from frameforge.core.patterns import PatternCache
    >>> from frameforge.core.tables import get_table
    >>> cache = PatternCache()
    >>> stop = cache.matcher(get_table(1), "*")
    >>> stop.matches("TAR")
    True
"""

from __future__ import annotations

import logging
import threading

import attrs
import numpy as np

from frameforge.core.tables import START, GeneticCodeTable, UnknownTableIdError, get_table
from frameforge.utils.regions import validate_strand
from frameforge.utils.sequences import AMINO_ACIDS, codon_code, encode_windows, iupac_codons

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

LOWER = "lower"
UPPER = "upper"

SPECIAL_KEYS = (START, LOWER, UPPER)


# =============================================================================
# Helpers
# =============================================================================


def resolve_residue(residue: str, strand: int = 1) -> str:
    """Resolve a residue or special key to the residue actually matched.

    ``lower`` and ``upper`` are strand relative; ``start`` is kept as is
    and residues are uppercased.

    Raises:
        ValueError: If residue is not an amino acid or special key.
        InvalidStrandError: If strand is not 1 or -1.
    """
    strand = validate_strand(strand, allow_both=False)
    if residue == LOWER:
        return START if strand == 1 else "*"
    if residue == UPPER:
        return "*" if strand == 1 else START
    if residue == START:
        return START
    if len(residue) != 1 or residue.upper() not in AMINO_ACIDS:
        raise ValueError(
            f"Residue must be an amino acid or one of {', '.join(SPECIAL_KEYS)}, got {residue!r}"
        )
    return residue.upper()


# =============================================================================
# CodonMatcher
# =============================================================================


@attrs.frozen
class CodonMatcher:
    """Matches the codons of one residue on one strand.

    Codons are written as they appear on the + strand; on the - strand a
    matcher for ``M`` matches ``CAT``.

    Attributes:
        residue: Residue (or ``"start"``) matched.
        strand: 1 or -1.
        codons: Every codon matched, including unambiguous degenerate ones.
        lookup: Boolean flag per window code.
    """

    residue: str
    strand: int
    codons: frozenset[str] = attrs.field(repr=False)
    lookup: np.ndarray = attrs.field(repr=False, eq=False)

    def matches(self, codon: str) -> bool:
        """Whether a single codon matches."""
        return len(codon) == 3 and bool(self.lookup[codon_code(codon.upper())])

    def hits(self, windows: np.ndarray) -> np.ndarray:
        """Boolean match flag for each encoded window."""
        return self.lookup[windows]

    def positions(self, windows: np.ndarray, lower: int = 0, upper: int | None = None) -> np.ndarray:
        """Positions of matching codons lying entirely within [lower, upper).

        Args:
            windows: Encoded windows from ``encode_windows``.
            lower: Lowest position to report.
            upper: Sequence bound; codons must end at or before it.

        Returns:
            Sorted array of 0-based codon start positions.
        """
        if upper is None:
            upper = len(windows) + 2
        stop = max(lower, upper - 2)
        return np.flatnonzero(self.lookup[windows[lower:stop]]) + lower


def build_matcher(table: GeneticCodeTable, residue: str, strand: int = 1) -> CodonMatcher:
    """Build an uncached matcher for a residue or special key."""
    key = resolve_residue(residue, strand)
    if key == START:
        lookup = table.start_lookup(strand).copy()
    else:
        lookup = table.residue_lookup(strand) == key
    lookup.flags.writeable = False

    codons = frozenset(codon for codon in iupac_codons() if lookup[codon_code(codon)])
    return CodonMatcher(residue=key, strand=strand, codons=codons, lookup=lookup)


# =============================================================================
# PatternCache
# =============================================================================


class PatternCache:
    """Append-only cache of codon matchers.

    Keys are (table id, residue, strand) with special keys resolved, so
    ``lower`` on the + strand shares its matcher with ``start``. A cache
    must not be shared between different tables that reuse an id.

    Example:
        >>> cache = PatternCache()
        >>> cache.matcher(table, "lower", strand=-1).residue
        '*'
    """

    def __init__(self) -> None:
        self._matchers: dict[tuple[int, str, int], CodonMatcher] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._matchers)

    def __contains__(self, key: tuple[int, str, int]) -> bool:
        return key in self._matchers

    def matcher(self, table: GeneticCodeTable, residue: str, strand: int = 1) -> CodonMatcher:
        """Get the matcher for a residue or special key, building it once.

        Raises:
            ValueError: If residue is not valid.
            InvalidStrandError: If strand is not 1 or -1.
        """
        key = (table.table_id, resolve_residue(residue, strand), int(strand))
        matcher = self._matchers.get(key)
        if matcher is not None:
            return matcher

        with self._lock:
            matcher = self._matchers.get(key)
            if matcher is None:
                matcher = build_matcher(table, residue, strand)
                self._matchers[key] = matcher
                logger.debug(
                    f"Cached matcher for {key[1]!r} on strand {strand:+d} "
                    f"(table {table.table_id}, {len(matcher.codons)} codons)"
                )
        return matcher

    def codons(self, table: GeneticCodeTable, residue: str, strand: int = 1) -> list[str]:
        """Concrete codons for a residue or special key (a new list)."""
        return table.codons(resolve_residue(residue, strand), strand)

    def find(
        self,
        table: GeneticCodeTable,
        sequence: str,
        residue: str,
        strand: int = 1,
    ) -> list[int]:
        """Find every (overlapping) position of a residue's codons.

        Args:
            table: Genetic code table.
            sequence: Cleaned nucleotide sequence.
            residue: Residue or special key.
            strand: 1 or -1.

        Returns:
            0-based codon start positions, in order.
        """
        windows = encode_windows(sequence)
        return self.matcher(table, residue, strand).positions(windows).tolist()


# Shared cache for the built-in and registered tables
DEFAULT_CACHE = PatternCache()


def cache_for(table: GeneticCodeTable) -> PatternCache:
    """Default matcher cache for a table.

    Matchers are keyed by table id, so only the table registered under
    that id (or one equal to it) may use the shared cache. Any other table,
    such as an unregistered custom table with the default id 0, gets a new
    cache of its own.
    """
    try:
        registered = get_table(table.table_id)
    except UnknownTableIdError:
        return PatternCache()
    return DEFAULT_CACHE if registered == table else PatternCache()
