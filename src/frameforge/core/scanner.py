"""ORF and CDS search.

This module scans nucleotide sequences for the longest open reading frame
(stop to stop) or coding sequence (start to stop) on one or both strands.

All searches share one structure. For each strand, the positions of the
relevant codons are found with the cached matchers and visited left to
right. An array of three "open" lower bounds, one per frame relative to
the scan's lower bound, tracks where the current candidate in each frame
began. Whenever a closing codon is seen, the candidate
[lowers[frame], position) is compared to the best region so far. After the
last match, the three frames are closed against the scan's upper bound so
that regions running off the end are considered too.

Ties keep the region found first: the - strand is searched before the +
strand, and within a strand regions are visited left to right.

Example:
    >>> from frameforge.core.scanner import SearchConfig, get_cds, get_orf
    >>> from frameforge.core.tables import get_table
    >>> get_cds(get_table(1), "ATGAAATAG", SearchConfig(strand=1))
    Region(lower=0, upper=9, strand=1, source=None)
"""

from __future__ import annotations

import logging

import attrs
import numpy as np

from frameforge.core.patterns import PatternCache, cache_for
from frameforge.core.tables import GeneticCodeTable
from frameforge.utils.regions import InvalidCoordinatesError, Region, validate_strand
from frameforge.utils.sequences import clean_dna, encode_windows

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

DEFAULT_STRAND = 0
DEFAULT_STRICT = 1
STRICT_LEVELS = (0, 1, 2)


# =============================================================================
# Configuration
# =============================================================================


def _check_strand(instance: SearchConfig, attribute: attrs.Attribute, value: int) -> None:
    validate_strand(value)


def _check_bound(instance: SearchConfig, attribute: attrs.Attribute, value: int | None) -> None:
    if value is not None and value < 0:
        raise InvalidCoordinatesError(f"{attribute.name} cannot be negative: {value}")


def _check_strict(instance: SearchConfig, attribute: attrs.Attribute, value: int) -> None:
    if value not in STRICT_LEVELS:
        raise ValueError(f"strict must be 0, 1 or 2, got {value!r}")


@attrs.frozen
class SearchConfig:
    """Options for ORF/CDS searches.

    Attributes:
        strand: 1, -1, or 0 to search both strands.
        lower: Lower bound of the scan (0-based).
        upper: Upper bound of the scan (exclusive). None means the end of
            the sequence.
        strict: CDS strictness (ignored by ORF searches):
            0 - every frame is open at the start of the scan on both strands;
            regions may run off either end.
            1 - + strand regions need a real start codon but may run off
            the upper end without a stop; - strand regions need a real
            start but may run off the lower end without a stop.
            2 - both a start and a stop must be inside the scan.
        sanitized: The sequence is already cleaned; skip cleaning.
    """

    strand: int = attrs.field(default=DEFAULT_STRAND, validator=_check_strand)
    lower: int = attrs.field(default=0, validator=_check_bound)
    upper: int | None = attrs.field(default=None, validator=_check_bound)
    strict: int = attrs.field(default=DEFAULT_STRICT, validator=_check_strict)
    sanitized: bool = False

    def strands(self) -> tuple[int, ...]:
        """Strands to scan, in search order."""
        return (-1, 1) if self.strand == 0 else (self.strand,)

    def bounds(self, length: int) -> tuple[int, int]:
        """Resolve the scan bounds for a sequence of the given length.

        Raises:
            InvalidCoordinatesError: If the bounds are outside the sequence
                or inverted.
        """
        upper = length if self.upper is None else self.upper
        if self.lower > length:
            raise InvalidCoordinatesError(
                f"Lower bound ({self.lower}) exceeds sequence length ({length})"
            )
        if upper > length:
            raise InvalidCoordinatesError(
                f"Upper bound ({upper}) exceeds sequence length ({length})"
            )
        if upper < self.lower:
            raise InvalidCoordinatesError(
                f"Upper bound ({upper}) is less than lower bound ({self.lower})"
            )
        return self.lower, upper


# =============================================================================
# Helpers
# =============================================================================


@attrs.define
class _Longest:
    """Longest region seen so far; the first one found wins ties."""

    length: int
    strand: int = 0
    lower: int = 0
    upper: int = 0

    def offer(self, strand: int, lower: int, upper: int) -> None:
        if upper - lower > self.length:
            self.length = upper - lower
            self.strand = strand
            self.lower = lower
            self.upper = upper

    def region(self) -> Region | None:
        if self.strand == 0 or self.length <= 0:
            return None
        return Region(self.lower, self.upper, self.strand)


def _prepare(sequence: str, config: SearchConfig) -> str:
    return sequence if config.sanitized else clean_dna(sequence)


def _close_orf(longest: _Longest, strand: int, lowers: list[int], upper: int, offset: int) -> None:
    frame = (upper - offset) % 3
    longest.offer(strand, lowers[frame], upper)
    lowers[frame] = upper


def _close_cds(
    longest: _Longest,
    strand: int,
    lowers: list[int | None],
    upper: int,
    offset: int,
) -> None:
    frame = (upper - offset) % 3
    lower = lowers[frame]
    if lower is None:
        return

    longest.offer(strand, lower, upper)

    # A + strand CDS needs a fresh start after each stop
    if strand == 1:
        lowers[frame] = None


# =============================================================================
# Searches
# =============================================================================


def get_orf(
    table: GeneticCodeTable,
    sequence: str,
    config: SearchConfig | None = None,
    cache: PatternCache | None = None,
) -> Region | None:
    """Find the longest stop-to-stop region.

    Regions include their closing stop codon (the upper one on the +
    strand, the lower one on the - strand). Regions touching the ends of
    the scan are cut at the last complete codon, so the length is always
    a multiple of 3:

         0 1 2 3 4 5 6 7 8 9 10
          A C G T A G T T T A
                    *****
            <--------------->      -> Region(1, 10, 1)

    Args:
        table: Genetic code table.
        sequence: Nucleotide sequence.
        config: Search options; ``strict`` is ignored.
        cache: Matcher cache. Defaults to the shared cache for
            registered tables.

    Returns:
        The longest ORF, or None if the scan is shorter than one codon.

    Raises:
        InvalidCoordinatesError: If the bounds don't fit the sequence.
    """
    if config is None:
        config = SearchConfig()
    if cache is None:
        cache = cache_for(table)

    sequence = _prepare(sequence, config)
    lower, upper = config.bounds(len(sequence))
    windows = encode_windows(sequence)

    longest = _Longest(length=0, lower=lower, upper=lower)

    for strand in config.strands():
        lowers = [lower + frame for frame in range(3)]
        stops = cache.matcher(table, "*", strand).positions(windows, lower, upper)

        # The stop codon is part of the ORF at its 3' end
        width = 3 if strand == 1 else 0
        for position in stops.tolist():
            _close_orf(longest, strand, lowers, position + width, lower)

        for i in range(3):
            _close_orf(longest, strand, lowers, upper - i, lower)

    region = longest.region()
    logger.debug(f"Longest ORF in [{lower}, {upper}) on strand(s) {config.strands()}: {region}")
    return region


def get_cds(
    table: GeneticCodeTable,
    sequence: str,
    config: SearchConfig | None = None,
    cache: PatternCache | None = None,
) -> Region | None:
    """Find the longest start-to-stop coding region.

    Internal start codons do not restart a + strand CDS, so the region
    begins at the first start after the previous in-frame stop. On the -
    strand the scan meets the stop before the start, so each stop opens a
    candidate and each start closes it.

         0 1 2 3 4 5 6 7 8 9 10
          A T G A A A T A A G
          >>>>>       *****
          <--------------->        -> Region(0, 9, 1)

    Args:
        table: Genetic code table.
        sequence: Nucleotide sequence.
        config: Search options, including ``strict``.
        cache: Matcher cache. Defaults to the shared cache for
            registered tables.

    Returns:
        The longest CDS, or None if no CDS satisfies the strictness level.

    Raises:
        InvalidCoordinatesError: If the bounds don't fit the sequence.
    """
    if config is None:
        config = SearchConfig()
    if cache is None:
        cache = cache_for(table)

    sequence = _prepare(sequence, config)
    lower, upper = config.bounds(len(sequence))
    windows = encode_windows(sequence)[lower : max(lower, upper - 2)]

    longest = _Longest(length=-1)

    for strand in config.strands():
        lower_hits = cache.matcher(table, "lower", strand).hits(windows)
        upper_hits = cache.matcher(table, "upper", strand).hits(windows)

        # Frames open at the scan's lower bound: the + strand only assumes a
        # start when strict is 0; the - strand assumes a stop unless strict is 2
        if strand == 1:
            seeded = config.strict == 0
        else:
            seeded = config.strict != 2
        lowers: list[int | None] = [lower + frame if seeded else None for frame in range(3)]

        for offset in np.flatnonzero(lower_hits | upper_hits).tolist():
            position = lower + offset
            frame = offset % 3

            if lower_hits[offset]:
                # - strand: a stop always restarts the candidate.
                # + strand: internal starts are ignored.
                if strand == -1 or lowers[frame] is None:
                    lowers[frame] = position
            else:
                _close_cds(longest, strand, lowers, position + 3, lower)

        # Regions running off the upper end lack a stop (+) or a start (-)
        if config.strict == 2 or (strand == -1 and config.strict != 0):
            continue

        for i in range(3):
            _close_cds(longest, strand, lowers, upper - i, lower)

    region = longest.region()
    logger.debug(
        f"Longest CDS in [{lower}, {upper}) on strand(s) {config.strands()} "
        f"(strict={config.strict}): {region}"
    )
    return region


def nonstop(
    table: GeneticCodeTable,
    sequence: str,
    config: SearchConfig | None = None,
    cache: PatternCache | None = None,
) -> list[int]:
    """List the frames of a sequence that contain no stop codon.

    Frames are labelled 1, 2, 3 on the + strand (reading from offset 0, 1
    or 2) and -1, -2, -3 on the - strand (offsets from the upper end).
    The whole sequence is read; ``lower``, ``upper`` and ``strict`` are
    ignored.

         3   ---->
         2  ----->
         1 ------>
           -------
        -1 <------
        -2 <-----
        -3 <----

    Returns:
        Frame labels without stops, + strand first.

    Example:
        >>> nonstop(get_table(1), "TACGTTGGTTAAGTT")
        [2, 3, -1, -3]
    """
    if config is None:
        config = SearchConfig()
    if cache is None:
        cache = cache_for(table)

    sequence = _prepare(sequence, config)
    length = len(sequence)
    windows = encode_windows(sequence)

    strands = (1, -1) if config.strand == 0 else (config.strand,)
    frames: list[int] = []

    for strand in strands:
        stops = cache.matcher(table, "*", strand).positions(windows)

        # Distance of each stop from the start of its strand
        distances = stops if strand == 1 else length - stops - 3

        for frame in range(3):
            in_frame = (distances >= frame) & ((distances - frame) % 3 == 0)
            if not in_frame.any():
                frames.append((frame + 1) * strand)

    logger.debug(f"Stop-free frames: {frames}")
    return frames


def find(
    table: GeneticCodeTable,
    sequence: str,
    residue: str,
    strand: int = 1,
    sanitized: bool = False,
    cache: PatternCache | None = None,
) -> list[int]:
    """Find every position where a residue's codons occur.

    Args:
        table: Genetic code table.
        sequence: Nucleotide sequence.
        residue: Residue, or ``start``/``lower``/``upper``.
        strand: 1 or -1.
        sanitized: The sequence is already cleaned.
        cache: Matcher cache. Defaults to the shared cache for
            registered tables.

    Returns:
        0-based codon start positions, overlapping matches included.
    """
    if cache is None:
        cache = cache_for(table)
    if not sanitized:
        sequence = clean_dna(sequence)
    return cache.find(table, sequence, residue, strand)
