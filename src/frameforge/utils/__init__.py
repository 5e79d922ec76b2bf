"""Utility functions for FrameForge.

- Nucleotide and amino acid alphabets, sequence cleaning
- Regions and coordinate conversion
- Logging configuration

Example:
    >>> from frameforge.utils.regions import parse_region
    >>> region = parse_region("chr1:300-1")
"""

from frameforge.utils.regions import (
    InvalidCoordinatesError,
    InvalidStrandError,
    Region,
    from_e53,
    parse_region,
    region_to_str,
    to_e53,
    validate_region,
)
from frameforge.utils.sequences import (
    InvalidSequenceSymbolError,
    clean_dna,
    reverse_complement,
)

__all__ = [
    "InvalidCoordinatesError",
    "InvalidSequenceSymbolError",
    "InvalidStrandError",
    "Region",
    "clean_dna",
    "from_e53",
    "parse_region",
    "region_to_str",
    "reverse_complement",
    "to_e53",
    "validate_region",
]
