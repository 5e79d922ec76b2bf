"""Core translation logic for FrameForge.

- Genetic code tables and degenerate codon resolution
- Cached codon matchers
- ORF/CDS search
- Translation

Example:
    >>> from frameforge.core.translator import Translator
    >>> from frameforge.core.scanner import SearchConfig
"""

from frameforge.core.patterns import DEFAULT_CACHE, CodonMatcher, PatternCache, cache_for
from frameforge.core.scanner import SearchConfig, find, get_cds, get_orf, nonstop
from frameforge.core.tables import (
    GeneticCodeTable,
    UnknownTableIdError,
    available_tables,
    custom_table,
    get_table,
    register_table,
    table_from_mapping,
)
from frameforge.core.translator import Translator

__all__: list[str] = [
    # Tables
    "GeneticCodeTable",
    "UnknownTableIdError",
    "available_tables",
    "custom_table",
    "get_table",
    "register_table",
    "table_from_mapping",
    # Matchers
    "CodonMatcher",
    "DEFAULT_CACHE",
    "PatternCache",
    "cache_for",
    # Searches
    "SearchConfig",
    "find",
    "get_cds",
    "get_orf",
    "nonstop",
    # Translation
    "Translator",
]
