"""FrameForge: reading frame search and translation for nucleotide sequences.

FrameForge finds the longest open reading frames and coding sequences of
DNA/RNA sequences and translates them, using any of the NCBI genetic code
tables or a custom one. IUPAC degenerate bases, both strands and 5'-partial
frames are supported.

Example:
    >>> import frameforge
    >>> translator = frameforge.Translator(1)
    >>> translator.get_cds("ATGAAATAG", strand=1)
    Region(lower=0, upper=9, strand=1, source=None)

Modules:
    core: Genetic code tables, codon matchers, searches and translation
    io: FASTA input
    utils: Alphabets, regions and logging
    config: Configuration loading
    cli: Command-line interface
"""

__version__ = "0.1.0"

from frameforge.core.scanner import SearchConfig
from frameforge.core.tables import GeneticCodeTable, UnknownTableIdError, get_table
from frameforge.core.translator import Translator
from frameforge.utils.regions import InvalidCoordinatesError, InvalidStrandError, Region

__all__ = [
    "__version__",
    "GeneticCodeTable",
    "InvalidCoordinatesError",
    "InvalidStrandError",
    "Region",
    "SearchConfig",
    "Translator",
    "UnknownTableIdError",
    "get_table",
]
