"""Pytest configuration and shared fixtures for FrameForge tests.

Fixtures are organized by category:

- Table fixtures: Genetic code tables and translators
- Sequence fixtures: Literal and generated sequences
- File fixtures: FASTA and configuration files written to tmp_path
"""

from pathlib import Path

import pytest

from frameforge.core.tables import GeneticCodeTable, get_table
from frameforge.core.translator import Translator
from frameforge.utils.sequences import random_dna

# Sequence whose translations in several modes are known
WORKED_EXAMPLE = "CTGATATCATGCATGCCATTCTCGACCGCTATGCGCCTCCTGTTCCTCGTGGGCCCAAAA"

# NCBI strings of the standard code
STANDARD_RESIDUES = "FFLLSSSSYY**CC*WLLLLPPPPHHQQRRRRIIIMTTTTNNKKSSRRVVVVAAAADDEEGGGG"
STANDARD_STARTS = "---M------**--*----M---------------M----------------------------"


# =============================================================================
# Table Fixtures
# =============================================================================


@pytest.fixture
def standard_table() -> GeneticCodeTable:
    """The standard genetic code (table 1)."""
    return get_table(1)


@pytest.fixture
def bacterial_table() -> GeneticCodeTable:
    """The bacterial/plastid genetic code (table 11)."""
    return get_table(11)


@pytest.fixture
def translator() -> Translator:
    """Translator for the standard code."""
    return Translator(1)


# =============================================================================
# Sequence Fixtures
# =============================================================================


@pytest.fixture
def worked_sequence() -> str:
    """60 nt sequence with known translations."""
    return WORKED_EXAMPLE


@pytest.fixture
def random_sequences() -> list[str]:
    """Reproducible random sequences of varied length, including short ones."""
    lengths = [0, 1, 2, 3, 4, 5, 10, 31, 64, 99, 150, 301, 500]
    return [random_dna(length, seed=seed) for seed, length in enumerate(lengths)]


# =============================================================================
# File Fixtures
# =============================================================================


def _write_fasta(path: Path, records: dict[str, str], width: int = 60) -> Path:
    with open(path, "w") as f:
        for name, seq in records.items():
            f.write(f">{name}\n")
            for i in range(0, len(seq), width):
                f.write(seq[i : i + width] + "\n")
    return path


@pytest.fixture
def fasta_records() -> dict[str, str]:
    """Records written by the synthetic_fasta fixture."""
    return {
        "tx1": random_dna(300, seed=42),
        "tx2": "ATGAAATAG",
        "rna1": "augaaauag",
        "worked": WORKED_EXAMPLE,
    }


@pytest.fixture
def synthetic_fasta(tmp_path: Path, fasta_records: dict[str, str]) -> Path:
    """Create a small multi-record FASTA file."""
    return _write_fasta(tmp_path / "transcripts.fa", fasta_records)


@pytest.fixture
def dirty_fasta(tmp_path: Path) -> Path:
    """Create a FASTA file with a symbol outside the nucleotide alphabet."""
    return _write_fasta(tmp_path / "dirty.fa", {"bad": "ATG-AAATAG"})


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Create a TOML configuration selecting table 11 and a custom table."""
    path = tmp_path / "frameforge.toml"
    path.write_text(
        f"""\
[translation]
table_id = 11
strand = 1
strict = 2

[logging]
verbosity = 0
use_rich = false

[[tables]]
table_id = 9001
name = "Test variant"
residues = "{STANDARD_RESIDUES}"
starts = "{STANDARD_STARTS}"
"""
    )
    return path
