"""Translation of nucleotide sequences.

The Translator binds a genetic code table and a matcher cache and is the
main entry point of FrameForge. It translates sequences and regions, and
exposes the ORF/CDS searches of :mod:`frameforge.core.scanner` for its
table.

Translation reads whole codons from the 5' end of the requested range,
using the reverse complement table on the - strand. Degenerate codons are
translated when every expansion agrees and become ``X`` otherwise. Unless
the range is marked ``partial5``, a start codon at the 5' end is rendered
as ``M`` even when it encodes another residue internally.

Example:
    >>> from frameforge.core.translator import Translator
    >>> translator = Translator(1)
    >>> seq = "CTGATATCATGCATGCCATTCTCGACCGCTATGCGCCTCCTGTTCCTCGTGGGCCCAAAA"
    >>> translator.translate(seq)
    'MISCMPFSTAMRLLFLVGPK'
    >>> translator.translate(seq, partial5=True)
    'LISCMPFSTAMRLLFLVGPK'
    >>> orf = translator.get_orf(seq)
    >>> protein = translator.translate_range(seq, orf)
"""

from __future__ import annotations

import logging
from typing import Any

import numpy as np

from frameforge.core import scanner
from frameforge.core.patterns import CodonMatcher, PatternCache, cache_for
from frameforge.core.scanner import SearchConfig
from frameforge.core.tables import DEFAULT_TABLE_ID, GeneticCodeTable, custom_table, get_table
from frameforge.utils.regions import Region, validate_region, validate_strand
from frameforge.utils.sequences import STOP, clean_dna, encode_windows

logger = logging.getLogger(__name__)

# Frame labels in six-frame order
FRAME_LABELS = (1, 2, 3, -1, -2, -3)


class Translator:
    """Translate and scan sequences with one genetic code.

    Attributes:
        table: The genetic code table.
        cache: Matcher cache used by searches.

    Example:
        >>> translator = Translator(11)
        >>> translator.get_cds("ATGAAATAG", strand=1)
        Region(lower=0, upper=9, strand=1, source=None)
    """

    def __init__(
        self,
        table: int | GeneticCodeTable = DEFAULT_TABLE_ID,
        cache: PatternCache | None = None,
    ) -> None:
        """Initialize the translator.

        Args:
            table: Table id, or a table instance.
            cache: Matcher cache. Defaults to the shared cache for registered
                tables and to a private cache for any other table.

        Raises:
            UnknownTableIdError: If the table id is not registered.
        """
        self.table = table if isinstance(table, GeneticCodeTable) else get_table(table)
        self.cache = cache if cache is not None else cache_for(self.table)

        logger.debug(f"Translator using table {self.table.table_id} ({self.table.name})")

    @classmethod
    def custom(
        cls,
        residues: str,
        starts: str,
        table_id: int = 0,
        name: str = "Custom",
    ) -> Translator:
        """Create a translator for NCBI-style residue and start strings."""
        return cls(custom_table(residues, starts, table_id=table_id, name=name))

    def __repr__(self) -> str:
        return f"Translator(table_id={self.table.table_id}, name={self.table.name!r})"

    @property
    def table_id(self) -> int:
        """Id of the genetic code table."""
        return self.table.table_id

    # =========================================================================
    # Codons and matchers
    # =========================================================================

    def codons(self, residue: str, strand: int = 1) -> list[str]:
        """Concrete codons for a residue, or for ``start``/``lower``/``upper``."""
        return self.cache.codons(self.table, residue, strand)

    def matcher(self, residue: str, strand: int = 1) -> CodonMatcher:
        """Cached matcher for a residue, or for ``start``/``lower``/``upper``."""
        return self.cache.matcher(self.table, residue, strand)

    def find(self, sequence: str, residue: str, strand: int = 1, sanitized: bool = False) -> list[int]:
        """Positions of a residue's codons in a sequence."""
        return scanner.find(self.table, sequence, residue, strand, sanitized, self.cache)

    # =========================================================================
    # Translation
    # =========================================================================

    def translate_codon(self, codon: str, strand: int = 1, start: bool = False) -> str:
        """Translate one codon.

        Args:
            codon: Three nucleotides as read on the + strand.
            strand: 1 or -1.
            start: Render an unambiguous start codon as ``M``.
        """
        if start and self.table.is_start(codon, strand):
            return "M"
        return self.table.translate_codon(codon, strand)

    def translate(
        self,
        sequence: str,
        strand: int = 1,
        lower: int = 0,
        upper: int | None = None,
        partial5: bool = False,
        to_stop: bool = False,
        sanitized: bool = False,
    ) -> str:
        """Translate the codons in [lower, upper) of one strand.

        Codons are read from the 5' end: upward from ``lower`` on the +
        strand, downward from ``upper`` on the - strand. A trailing partial
        codon is ignored. Strand 0 reads the + strand.

        Args:
            sequence: Nucleotide sequence.
            strand: 1, -1 or 0.
            lower: Lower bound (0-based).
            upper: Upper bound (exclusive); None for the sequence end.
            partial5: The range lacks its true 5' end, so the first codon
                is translated literally rather than as a start.
            to_stop: Stop before the first stop codon.
            sanitized: The sequence is already cleaned.

        Returns:
            Amino acid sequence; ambiguous codons become ``X``.

        Raises:
            InvalidCoordinatesError: If the range doesn't fit the sequence.
            InvalidStrandError: If the strand is invalid.
        """
        if not sanitized:
            sequence = clean_dna(sequence)
        if upper is None:
            upper = len(sequence)
        strand = validate_strand(strand)
        validate_region(Region(lower, upper, strand), len(sequence))

        windows = encode_windows(sequence)
        read_strand = -1 if strand == -1 else 1
        if read_strand == -1:
            positions = np.arange(upper - 3, lower - 1, -3)
        else:
            positions = np.arange(lower, upper - 2, 3)

        codes = windows[positions]
        residues = self.table.residue_lookup(read_strand)[codes].tolist()

        if residues and not partial5 and self.table.start_lookup(read_strand)[codes[0]]:
            residues[0] = "M"

        protein = "".join(residues)
        if to_stop:
            protein = protein.split(STOP, 1)[0]
        return protein

    def translate_range(
        self,
        sequence: str,
        region: Region,
        partial5: bool = False,
        to_stop: bool = False,
        sanitized: bool = False,
    ) -> str:
        """Translate a region, typically one returned by a search.

        Raises:
            InvalidCoordinatesError: If the region doesn't fit the sequence.
        """
        return self.translate(
            sequence,
            strand=region.strand,
            lower=region.lower,
            upper=region.upper,
            partial5=partial5,
            to_stop=to_stop,
            sanitized=sanitized,
        )

    def translate6(
        self,
        sequence: str,
        partial5: bool = False,
        sanitized: bool = False,
    ) -> dict[int, str]:
        """Translate all six frames.

        Returns:
            Protein per frame label (1, 2, 3, -1, -2, -3), numbered as in
            :func:`frameforge.core.scanner.nonstop`.
        """
        if not sanitized:
            sequence = clean_dna(sequence)
        length = len(sequence)

        proteins: dict[int, str] = {}
        for label in FRAME_LABELS:
            offset = min(abs(label) - 1, length)
            if label > 0:
                proteins[label] = self.translate(
                    sequence, 1, lower=offset, partial5=partial5, sanitized=True
                )
            else:
                proteins[label] = self.translate(
                    sequence, -1, upper=length - offset, partial5=partial5, sanitized=True
                )
        return proteins

    # =========================================================================
    # Searches
    # =========================================================================

    @staticmethod
    def _config(config: SearchConfig | None, options: dict[str, Any]) -> SearchConfig:
        if config is None:
            return SearchConfig(**options)
        if options:
            raise TypeError("Pass either a SearchConfig or keyword options, not both")
        return config

    def get_orf(self, sequence: str, config: SearchConfig | None = None, **options: Any) -> Region | None:
        """Longest stop-to-stop region. See :func:`frameforge.core.scanner.get_orf`.

        Options are the fields of :class:`SearchConfig`.
        """
        return scanner.get_orf(self.table, sequence, self._config(config, options), self.cache)

    def get_cds(self, sequence: str, config: SearchConfig | None = None, **options: Any) -> Region | None:
        """Longest start-to-stop region. See :func:`frameforge.core.scanner.get_cds`."""
        return scanner.get_cds(self.table, sequence, self._config(config, options), self.cache)

    def nonstop(self, sequence: str, config: SearchConfig | None = None, **options: Any) -> list[int]:
        """Frames without stop codons. See :func:`frameforge.core.scanner.nonstop`."""
        return scanner.nonstop(self.table, sequence, self._config(config, options), self.cache)
