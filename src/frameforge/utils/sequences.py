"""Nucleotide and amino acid alphabets.

This module holds the static symbol tables used throughout FrameForge
and the small set of functions that operate on raw sequence text:

- Nucleotide and IUPAC degenerate symbols
- Complement and reverse complement
- Sequence cleaning (FASTA headers, whitespace, U -> T)
- Amino acid symbols and three-letter abbreviations
- Window encoding used by the vectorized codon scanners

Example:
    >>> from frameforge.utils.sequences import clean_dna, reverse_complement
    >>> clean_dna(">mRNA\\nacu gau\\n")
    'ACTGAT'
    >>> reverse_complement("ATGR")
    'YCAT'
"""

from __future__ import annotations

import itertools
import logging
import re

import numpy as np

logger = logging.getLogger(__name__)

# =============================================================================
# Exceptions
# =============================================================================


class InvalidSequenceSymbolError(ValueError):
    """Raised when strict cleaning finds a symbol outside the IUPAC alphabet."""

    pass


# =============================================================================
# Nucleotide Constants
# =============================================================================

# Concrete bases in codon index order
BASES = "ACGT"

# Every symbol accepted in a nucleotide sequence (U is folded to T)
NUCLEOTIDES = "ABCDGHKMNRSTUVWY"

# IUPAC ambiguity codes
DEGENERATES = "BDHKMNRSVWY"

# Degenerate symbol -> concrete bases it stands for
DEGENERATE_MAP: dict[str, tuple[str, ...]] = {
    "A": ("A",),
    "C": ("C",),
    "G": ("G",),
    "T": ("T",),
    "N": ("A", "C", "G", "T"),
    "V": ("A", "C", "G"),
    "H": ("A", "C", "T"),
    "D": ("A", "G", "T"),
    "B": ("C", "G", "T"),
    "M": ("A", "C"),
    "R": ("A", "G"),
    "W": ("A", "T"),
    "S": ("C", "G"),
    "Y": ("C", "T"),
    "K": ("G", "T"),
}

COMPLEMENT_TABLE = str.maketrans(
    "ACGTUacgtuNnRYSWKMBDHVryswkmbdhv",
    "TGCAAtgcaaNnYRSWMKVHDByrswmkvhdb",
)

# =============================================================================
# Amino Acid Constants
# =============================================================================

# All one-letter residues, including stop, ambiguity codes, Sec and Pyl
AMINO_ACIDS = "*ABCDEFGHIJKLMNOPQRSTUVWXYZ"

# The 20 common residues, stop and unknown
STRICT_AMINO_ACIDS = "*ACDEFGHIKLMNPQRSTVWXY"

# Ambiguity codes and the residues they stand for
AMBIGUOUS_RESIDUES: dict[str, tuple[str, ...]] = {
    "B": ("D", "N"),
    "J": ("I", "L"),
    "Z": ("E", "Q"),
}

STOP = "*"
UNKNOWN = "X"

AA_ABBREVIATIONS = {
    "*": "Ter",
    "A": "Ala",
    "B": "Asx",
    "C": "Cys",
    "D": "Asp",
    "E": "Glu",
    "F": "Phe",
    "G": "Gly",
    "H": "His",
    "I": "Ile",
    "J": "Xle",
    "K": "Lys",
    "L": "Leu",
    "M": "Met",
    "N": "Asn",
    "O": "Pyl",
    "P": "Pro",
    "Q": "Gln",
    "R": "Arg",
    "S": "Ser",
    "T": "Thr",
    "U": "Sec",
    "V": "Val",
    "W": "Trp",
    "X": "Xaa",
    "Y": "Tyr",
    "Z": "Glx",
}

# =============================================================================
# Window Encoding
# =============================================================================

# Symbol order for window codes. Anything else encodes as INVALID_CODE.
CODE_SYMBOLS = "ACGTRYSWKMBDHVN"
INVALID_CODE = 15
N_WINDOW_CODES = 16**3

_SYMBOL_CODES = np.full(256, INVALID_CODE, dtype=np.uint16)
for _index, _symbol in enumerate(CODE_SYMBOLS):
    _SYMBOL_CODES[ord(_symbol)] = _index

_HEADER_PATTERN = re.compile(r"^>.*$", re.MULTILINE)
_WHITESPACE_PATTERN = re.compile(r"\s+")
_INVALID_PATTERN = re.compile(f"[^{NUCLEOTIDES}]+")


# =============================================================================
# Cleaning
# =============================================================================


def clean_dna(sequence: str, strict: bool = False) -> str:
    """Clean raw nucleotide text for scanning and translation.

    Lines starting with ``>`` are removed, all whitespace is stripped,
    symbols are uppercased and uracil is folded to thymine. Symbols outside
    the IUPAC nucleotide alphabet are dropped unless ``strict`` is set.
    Cleaning is idempotent.

    Args:
        sequence: Raw sequence text, optionally FASTA formatted.
        strict: Raise instead of dropping unknown symbols.

    Returns:
        Cleaned sequence.

    Raises:
        InvalidSequenceSymbolError: If strict and an unknown symbol is found.
    """
    text = _HEADER_PATTERN.sub("", sequence)
    text = _WHITESPACE_PATTERN.sub("", text).upper()

    invalid = _INVALID_PATTERN.findall(text)
    if invalid:
        symbols = sorted(set("".join(invalid)))
        if strict:
            raise InvalidSequenceSymbolError(
                f"Invalid nucleotide symbols in sequence: {''.join(symbols)}"
            )
        logger.debug(f"Dropping invalid symbols from sequence: {''.join(symbols)}")
        text = _INVALID_PATTERN.sub("", text)

    return text.replace("U", "T")


def is_valid_dna(sequence: str) -> bool:
    """Check if a sequence contains only IUPAC nucleotide symbols.

    Args:
        sequence: Sequence to check (case-insensitive).

    Returns:
        True if every symbol is a valid nucleotide.
    """
    return _INVALID_PATTERN.search(sequence.upper()) is None


def is_valid_protein(sequence: str, strict: bool = False) -> bool:
    """Check if a sequence contains only one-letter residues.

    Args:
        sequence: Protein sequence (case-insensitive).
        strict: Only accept the 20 common residues, stop and X.
    """
    alphabet = STRICT_AMINO_ACIDS if strict else AMINO_ACIDS
    return all(residue in alphabet for residue in sequence.upper())


def gc_content(sequence: str) -> float:
    """Fraction of G and C among the concrete bases of a sequence.

    Degenerate symbols are ignored. Returns 0.0 if there are no concrete
    bases.
    """
    sequence = sequence.upper()
    concrete = sum(sequence.count(base) for base in BASES)
    if concrete == 0:
        return 0.0
    return (sequence.count("G") + sequence.count("C")) / concrete


# =============================================================================
# Complement and Reverse Complement
# =============================================================================


def complement(sequence: str) -> str:
    """Get the complement of a nucleotide sequence.

    Handles IUPAC ambiguity codes and preserves case.

    Args:
        sequence: Nucleotide sequence string.

    Returns:
        Complement sequence.
    """
    return sequence.translate(COMPLEMENT_TABLE)


def reverse_complement(sequence: str) -> str:
    """Get the reverse complement of a nucleotide sequence.

    Args:
        sequence: Nucleotide sequence string.

    Returns:
        Reverse complement sequence.
    """
    return complement(sequence)[::-1]


# =============================================================================
# Degenerate Codons
# =============================================================================


def expand_codon(codon: str) -> list[str]:
    """Expand a possibly degenerate codon into its concrete codons.

    Args:
        codon: Three nucleotide symbols, uppercase.

    Returns:
        Concrete codons in ACGT order. Empty if any symbol is unknown.
    """
    try:
        choices = [DEGENERATE_MAP[base] for base in codon]
    except KeyError:
        return []
    return ["".join(bases) for bases in itertools.product(*choices)]


def iupac_codons() -> list[str]:
    """Return every codon over the 15 IUPAC nucleotide symbols."""
    return ["".join(c) for c in itertools.product(CODE_SYMBOLS, repeat=3)]


def codon_index(codon: str) -> int:
    """Index of a concrete codon over ACGT (AAA = 0, TTT = 63).

    Raises:
        ValueError: If the codon is not three concrete bases.
    """
    if len(codon) != 3 or any(base not in BASES for base in codon):
        raise ValueError(f"Not a concrete codon: {codon!r}")
    return BASES.index(codon[0]) * 16 + BASES.index(codon[1]) * 4 + BASES.index(codon[2])


def _symbol_code(base: str) -> int:
    point = ord(base)
    return int(_SYMBOL_CODES[point]) if point < len(_SYMBOL_CODES) else INVALID_CODE


def codon_code(codon: str) -> int:
    """Window code for a three-symbol codon."""
    first, second, third = (_symbol_code(base) for base in codon)
    return (first << 8) | (second << 4) | third


def encode_windows(sequence: str) -> np.ndarray:
    """Encode every three-symbol window of a sequence.

    Element ``i`` is the window code of ``sequence[i:i + 3]``. Windows
    containing a symbol outside :data:`CODE_SYMBOLS` get a code that no
    codon lookup matches.

    Args:
        sequence: Cleaned nucleotide sequence.

    Returns:
        Array of length ``max(0, len(sequence) - 2)``.
    """
    raw = np.frombuffer(sequence.encode("ascii", errors="replace"), dtype=np.uint8)
    symbols = _SYMBOL_CODES[raw]
    if len(symbols) < 3:
        return np.empty(0, dtype=np.uint16)
    return (symbols[:-2] << 8) | (symbols[1:-1] << 4) | symbols[2:]


# =============================================================================
# Amino Acids
# =============================================================================


def to_three_letter(protein: str, separator: str = "") -> str:
    """Convert a one-letter protein to three-letter abbreviations.

    Args:
        protein: One-letter residues.
        separator: String placed between abbreviations.

    Returns:
        Three-letter representation; unknown symbols become ``Xaa``.
    """
    return separator.join(AA_ABBREVIATIONS.get(aa, "Xaa") for aa in protein.upper())


# =============================================================================
# Test Data
# =============================================================================


def random_dna(length: int = 100, seed: int | None = None) -> str:
    """Generate a random concrete DNA sequence.

    Args:
        length: Number of nucleotides.
        seed: Seed for reproducible output.

    Returns:
        Random sequence over ACGT.
    """
    rng = np.random.default_rng(seed)
    return "".join(rng.choice(list(BASES), size=length))
