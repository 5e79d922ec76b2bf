"""FASTA input for translation.

Sequences are read through pyfaidx for indexed random access, so a single
record or region can be translated without loading the whole file. Every
sequence handed out is cleaned (uppercase, U -> T, invalid symbols
dropped or rejected) and ready for the scanners with ``sanitized=True``.

Example:
    >>> from frameforge.io.fasta import SequenceReader
    >>> with SequenceReader("transcripts.fa") as reader:
    ...     for name, sequence in reader.iter_records():
    ...         print(name, len(sequence))
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pyfaidx

from frameforge.utils.regions import Region, validate_region
from frameforge.utils.sequences import clean_dna, reverse_complement

logger = logging.getLogger(__name__)


# =============================================================================
# Main Reader Class
# =============================================================================


class SequenceReader:
    """Indexed FASTA access using pyfaidx.

    Attributes:
        path: Path to the FASTA file.
        strict: Reject unknown symbols instead of dropping them.

    Example:
        >>> reader = SequenceReader("transcripts.fa")
        >>> reader.lengths["tx1"]
        1500
        >>> reader.get_sequence("tx1", 0, 300, strand=-1)[:6]
        'TTACAT'
    """

    def __init__(self, fasta_path: Path | str, strict: bool = False) -> None:
        """Open a FASTA file, creating its .fai index if needed.

        Args:
            fasta_path: Path to FASTA file.
            strict: Reject unknown symbols instead of dropping them.

        Raises:
            FileNotFoundError: If FASTA file doesn't exist.
        """
        self.path = Path(fasta_path)
        if not self.path.exists():
            raise FileNotFoundError(f"FASTA file not found: {self.path}")

        self.strict = strict
        self._fasta: pyfaidx.Fasta | None = pyfaidx.Fasta(
            str(self.path),
            sequence_always_upper=True,
            rebuild=False,
        )
        self._names = list(self._fasta.keys())
        self._lengths = {name: len(self._fasta[name]) for name in self._names}

        logger.info(f"Opened FASTA: {self.path.name}, {len(self._names)} records")

    def __enter__(self) -> SequenceReader:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the FASTA file."""
        if self._fasta is not None:
            self._fasta.close()
            self._fasta = None

    def _check_open(self) -> pyfaidx.Fasta:
        if self._fasta is None:
            raise RuntimeError("FASTA file not opened")
        return self._fasta

    @property
    def names(self) -> list[str]:
        """Record names in file order."""
        return self._names.copy()

    @property
    def lengths(self) -> dict[str, int]:
        """Return {name: length} mapping of the raw records."""
        return self._lengths.copy()

    def __contains__(self, name: str) -> bool:
        return name in self._lengths

    def __len__(self) -> int:
        return len(self._names)

    def get_length(self, name: str) -> int:
        """Raw length of a record.

        Raises:
            KeyError: If the record is not in the file.
        """
        if name not in self._lengths:
            raise KeyError(f"Unknown record: {name}")
        return self._lengths[name]

    def get_sequence(
        self,
        name: str,
        lower: int = 0,
        upper: int | None = None,
        strand: int = 1,
    ) -> str:
        """Get the cleaned sequence of [lower, upper) of a record.

        Coordinates refer to the raw record. The - strand returns the
        reverse complement.

        Args:
            name: Record name.
            lower: Lower bound (0-based).
            upper: Upper bound (exclusive); None for the record end.
            strand: 1, -1 or 0 (treated as +).

        Returns:
            Cleaned sequence.

        Raises:
            KeyError: If the record is not in the file.
            InvalidCoordinatesError: If the bounds don't fit the record.
            InvalidSequenceSymbolError: If strict and the record holds an
                unknown symbol.
        """
        fasta = self._check_open()
        length = self.get_length(name)
        if upper is None:
            upper = length
        validate_region(Region(lower, upper, strand, name), length)

        sequence = clean_dna(str(fasta[name][lower:upper]), strict=self.strict)
        if strand == -1:
            sequence = reverse_complement(sequence)
        return sequence

    def get_region(self, region: Region) -> str:
        """Get the cleaned sequence of a region; ``source`` names the record.

        Raises:
            ValueError: If the region has no source.
        """
        if region.source is None:
            raise ValueError(f"Region has no source record: {region}")
        return self.get_sequence(region.source, region.lower, region.upper, region.strand)

    def iter_records(self) -> Iterator[tuple[str, str]]:
        """Iterate over all records.

        Yields:
            Tuples of (name, cleaned sequence).
        """
        for name in self._names:
            yield name, self.get_sequence(name)


# =============================================================================
# Convenience Functions
# =============================================================================


def read_sequence_text(path: Path | str, strict: bool = False) -> str:
    """Read a whole file of sequence text as one cleaned sequence.

    Header lines are dropped, so a single-record FASTA file or a bare
    sequence file both work. Multi-record files are concatenated.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        InvalidSequenceSymbolError: If strict and an unknown symbol is found.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Sequence file not found: {path}")
    return clean_dna(path.read_text(), strict=strict)
