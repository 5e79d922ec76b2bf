"""Stranded sequence regions and coordinate conversion.

This module provides the Region value type returned by ORF/CDS searches
and consumed by translation, together with conversions between coordinate
conventions.

Coordinate conventions:
    - Internal storage: 0-based half-open [lower, upper) (interbase)
    - 5'/3' coordinates: 1-based inclusive, end5 > end3 on the - strand
    - Strand: 1 (+), -1 (-), 0 (strandless or both, search scope only)

Example:
    >>> from frameforge.utils.regions import from_e53, to_e53
    >>> region = from_e53(52, 143)
    >>> region.lower, region.upper, region.strand
    (51, 143, 1)
    >>> to_e53(region._replace(strand=-1))
    (143, 52)
"""

from __future__ import annotations

import re
from typing import NamedTuple

from frameforge.utils.sequences import reverse_complement

# =============================================================================
# Exceptions
# =============================================================================


class InvalidCoordinatesError(ValueError):
    """Raised when region bounds are negative, inverted or out of range."""

    pass


class InvalidStrandError(ValueError):
    """Raised when a strand is not one of -1, 0 or 1."""

    pass


# =============================================================================
# Constants
# =============================================================================

VALID_STRANDS = (-1, 0, 1)

# Strand -> symbol used in string output
STRAND_SYMBOLS = {1: "+", -1: "-", 0: "."}

# Default padding for integers in formatted output
DEFAULT_WIDTH = 6


# =============================================================================
# Validation
# =============================================================================


def validate_strand(strand: int, allow_both: bool = True) -> int:
    """Validate a strand value.

    Args:
        strand: Strand to check.
        allow_both: Whether 0 is acceptable.

    Returns:
        The strand as an int.

    Raises:
        InvalidStrandError: If strand is not valid.
    """
    allowed = VALID_STRANDS if allow_both else (-1, 1)
    if isinstance(strand, bool) or strand not in allowed:
        raise InvalidStrandError(
            f"Strand must be one of {', '.join(str(s) for s in allowed)}, got {strand!r}"
        )
    return int(strand)


# =============================================================================
# Region
# =============================================================================


class Region(NamedTuple):
    """A stranded region with 0-based half-open coordinates.

    Attributes:
        lower: Lower bound (0-based, inclusive).
        upper: Upper bound (0-based, exclusive).
        strand: 1, -1, or 0 for strandless.
        source: Optional identifier of the sequence the region lies on.
    """

    lower: int
    upper: int
    strand: int = 0
    source: str | None = None

    def __str__(self) -> str:
        """Return ``source:end5-end3`` if sourced, else the bracket form."""
        if self.source is not None:
            return region_to_str(self, method="region")
        return region_to_str(self, method="lus", width=0)

    @property
    def length(self) -> int:
        """Region length in bases."""
        return self.upper - self.lower

    @property
    def phase(self) -> int:
        """Length modulo 3, the offset used for partial locations."""
        return self.length % 3

    @property
    def end5(self) -> int:
        """1-based 5' end."""
        return self.upper if self.strand == -1 else self.lower + 1

    @property
    def end3(self) -> int:
        """1-based 3' end."""
        return self.lower + 1 if self.strand == -1 else self.upper

    def contains(self, position: int) -> bool:
        """Check if a 0-based position lies within this region."""
        return self.lower <= position < self.upper

    def _same_source(self, other: Region) -> bool:
        return self.source is None or other.source is None or self.source == other.source

    def overlaps(self, other: Region) -> bool:
        """Check if this region overlaps another.

        Regions on different sources never overlap. Strand is ignored.
        """
        if not self._same_source(other):
            return False
        return self.lower < other.upper and other.lower < self.upper

    def contains_region(self, other: Region) -> bool:
        """Check if this region fully contains another."""
        if not self._same_source(other):
            return False
        return self.lower <= other.lower and other.upper <= self.upper

    def intersection(self, other: Region) -> Region | None:
        """Return the overlap of two regions.

        The strand is kept when both regions agree and dropped to 0
        otherwise.

        Returns:
            The intersecting region, or None if the regions don't overlap.
        """
        if not self.overlaps(other):
            return None
        strand = self.strand if self.strand == other.strand else 0
        return Region(
            max(self.lower, other.lower),
            min(self.upper, other.upper),
            strand,
            self.source if self.source is not None else other.source,
        )

    def extend(self, lower_by: int, upper_by: int | None = None) -> Region:
        """Return a copy grown (or shrunk, for negative offsets) at each end.

        Args:
            lower_by: Bases to move the lower bound down.
            upper_by: Bases to move the upper bound up. Defaults to lower_by.

        Raises:
            InvalidCoordinatesError: If the result would be invalid.
        """
        if upper_by is None:
            upper_by = lower_by
        return from_lus(self.lower - lower_by, self.upper + upper_by, self.strand, self.source)

    def extract(self, sequence: str) -> str:
        """Extract the region's bases, reverse complemented on the - strand.

        Raises:
            InvalidCoordinatesError: If the region extends past the sequence.
        """
        validate_region(self, len(sequence))
        subsequence = sequence[self.lower : self.upper]
        if self.strand == -1:
            return reverse_complement(subsequence)
        return subsequence


# =============================================================================
# Constructors
# =============================================================================


def from_lus(
    lower: int,
    upper: int,
    strand: int = 0,
    source: str | None = None,
) -> Region:
    """Create a region from lower, upper and strand.

    Raises:
        InvalidCoordinatesError: If lower is negative or upper < lower.
        InvalidStrandError: If strand is invalid.
    """
    if lower < 0:
        raise InvalidCoordinatesError(f"Lower bound cannot be negative: {lower}")
    if upper < lower:
        raise InvalidCoordinatesError(f"Upper bound ({upper}) is less than lower bound ({lower})")
    return Region(int(lower), int(upper), validate_strand(strand), source)


def from_ul(upper: int, length: int, strand: int = 0, source: str | None = None) -> Region:
    """Create a region from its upper bound and length.

    Handy when a scanner reports the end of a match, e.g. a run of gaps.
    """
    return from_lus(upper - length, upper, strand, source)


def from_e53(end5: int, end3: int, source: str | None = None) -> Region:
    """Create a region from 1-based 5' and 3' ends.

    The strand is inferred from the order of the ends. When both ends are
    equal the result is a single base with strand 0.

    Args:
        end5: 1-based 5' end.
        end3: 1-based 3' end.
        source: Optional sequence identifier.

    Raises:
        InvalidCoordinatesError: If either end is less than 1.
    """
    if end5 < 1 or end3 < 1:
        raise InvalidCoordinatesError(f"5'/3' ends must be >= 1, got {end5}, {end3}")
    if end5 < end3:
        return Region(end5 - 1, end3, 1, source)
    if end3 < end5:
        return Region(end3 - 1, end5, -1, source)
    return Region(end5 - 1, end5, 0, source)


def to_e53(region: Region) -> tuple[int, int]:
    """Convert a region to 1-based (end5, end3).

    Strandless regions are reported in + orientation.
    """
    return region.end5, region.end3


# Handles: chr1:1000-2000, chr1:2000..1000, 100-200
_REGION_PATTERN = re.compile(r"^(?:(.+):)?(\d+)[-.]\.?(\d+)$")


def parse_region(region_str: str) -> Region:
    """Parse ``[source:]end5-end3`` into a Region.

    Ends are 1-based inclusive; listing the larger end first selects the
    - strand.

    Raises:
        InvalidCoordinatesError: If the string is malformed.

    Example:
        >>> parse_region("chr1:200-101")
        Region(lower=100, upper=200, strand=-1, source='chr1')
    """
    match = _REGION_PATTERN.match(region_str.strip())
    if not match:
        raise InvalidCoordinatesError(
            f"Invalid region format: '{region_str}'. "
            "Expected format: source:end5-end3 (e.g., chr1:100-400)"
        )
    return from_e53(int(match.group(2)), int(match.group(3)), match.group(1))


def validate_region(region: Region, length: int) -> None:
    """Check a region against the length of its sequence.

    Raises:
        InvalidCoordinatesError: If the region is inverted or out of range.
        InvalidStrandError: If the strand is invalid.
    """
    validate_strand(region.strand)
    if region.lower < 0:
        raise InvalidCoordinatesError(f"Lower bound cannot be negative: {region.lower}")
    if region.upper < region.lower:
        raise InvalidCoordinatesError(
            f"Upper bound ({region.upper}) is less than lower bound ({region.lower})"
        )
    if region.upper > length:
        raise InvalidCoordinatesError(
            f"Region upper bound ({region.upper}) exceeds sequence length ({length})"
        )


# =============================================================================
# Formatting
# =============================================================================


def region_to_str(region: Region, method: str = "lus", width: int = DEFAULT_WIDTH) -> str:
    """Format a region.

    Args:
        region: Region to format.
        method: ``lus`` for ``[ lower upper strand ]``, ``53`` for
            ``<5' end5 end3 3'>``, or ``region`` for ``source:end5-end3``.
        width: Padding for integers in the ``lus`` and ``53`` forms.

    Raises:
        ValueError: If method is unknown.

    Example:
        >>> region_to_str(Region(3, 9, 1), width=0)
        '[ 3 9 + ]'
    """
    width = max(width, 1)
    if method == "lus":
        bounds = f"{region.lower:<{width}d} {region.upper:>{width}d}"
        return f"[ {bounds} {STRAND_SYMBOLS.get(region.strand, '?')} ]"
    if method == "53":
        return f"<5' {region.end5:<{width}d} {region.end3:>{width}d} 3'>"
    if method == "region":
        prefix = f"{region.source}:" if region.source is not None else ""
        return f"{prefix}{region.end5}-{region.end3}"
    raise ValueError(f"Unknown region format: {method!r}")
