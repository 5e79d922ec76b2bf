"""Configuration management for FrameForge.

Settings come from defaults, an optional TOML file and command-line
options (the CLI overrides file values). A configuration file looks like:

    [translation]
    table_id = 11
    strand = 1
    strict = 2
    partial5 = false
    strict_symbols = true

    [logging]
    verbosity = 2
    log_file = "frameforge.log"

    [[tables]]
    table_id = 101
    name = "Lab variant"
    residues = "FFLLSSSSYY**CC*WLLLLPPPPHHQQRRRRIIIMTTTTNNKKSSRRVVVVAAAADDEEGGGG"
    starts = "---M------**--*----M---------------M----------------------------"

Example:
    >>> from frameforge.config import Config
    >>> config = Config.load("frameforge.toml")
    >>> config.translation.table_id
    11
"""

import logging
import tomllib
from pathlib import Path
from typing import Any

import attrs

from frameforge.core.scanner import STRICT_LEVELS, SearchConfig
from frameforge.core.tables import (
    DEFAULT_TABLE_ID,
    GeneticCodeTable,
    custom_table,
    register_table,
)
from frameforge.utils.regions import validate_strand

logger = logging.getLogger(__name__)

# =============================================================================
# Default Configuration Values
# =============================================================================

DEFAULT_STRAND = 0
DEFAULT_STRICT = 1
DEFAULT_VERBOSITY = 1


# =============================================================================
# Validators
# =============================================================================


def _check_strand(instance: Any, attribute: attrs.Attribute, value: int) -> None:
    validate_strand(value)


def _check_strict(instance: Any, attribute: attrs.Attribute, value: int) -> None:
    if value not in STRICT_LEVELS:
        raise ValueError(f"strict must be 0, 1 or 2, got {value!r}")


def _check_table_id(instance: Any, attribute: attrs.Attribute, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{attribute.name} must be a non-negative integer, got {value!r}")


# =============================================================================
# Configuration Classes
# =============================================================================


@attrs.define
class TranslationConfig:
    """Configuration for translation and searches.

    Attributes:
        table_id: Genetic code table id.
        strand: Strand to search (1, -1, or 0 for both).
        strict: CDS strictness level (0, 1 or 2).
        partial5: Translate the first codon literally.
        strict_symbols: Reject unknown sequence symbols instead of dropping them.
    """

    table_id: int = attrs.field(default=DEFAULT_TABLE_ID, validator=_check_table_id)
    strand: int = attrs.field(default=DEFAULT_STRAND, validator=_check_strand)
    strict: int = attrs.field(default=DEFAULT_STRICT, validator=_check_strict)
    partial5: bool = False
    strict_symbols: bool = False

    def search_config(self, **overrides: Any) -> SearchConfig:
        """Build a SearchConfig from these settings.

        Args:
            **overrides: SearchConfig fields that replace the configured
                values (e.g. lower, upper, sanitized).
        """
        options: dict[str, Any] = {"strand": self.strand, "strict": self.strict}
        options.update(overrides)
        return SearchConfig(**options)


@attrs.define
class LoggingConfig:
    """Configuration for logging.

    Attributes:
        verbosity: 0=warning, 1=info, 2=debug.
        log_file: Optional log file path.
        use_rich: Use rich console output.
    """

    verbosity: int = DEFAULT_VERBOSITY
    log_file: str | None = None
    use_rich: bool = True


@attrs.define
class TableConfig:
    """A custom genetic code table in NCBI string form.

    Attributes:
        table_id: Id the table is registered under; must not collide with a
            built-in table.
        residues: 64 residues in NCBI (TCAG) codon order.
        starts: 64 start flags in NCBI codon order (``M`` marks a start).
        name: Table name.
    """

    table_id: int = attrs.field(validator=_check_table_id)
    residues: str
    starts: str
    name: str = "Custom"

    def build(self) -> GeneticCodeTable:
        """Build the table.

        Raises:
            ValueError: If the residue or start strings are malformed.
        """
        return custom_table(self.residues, self.starts, table_id=self.table_id, name=self.name)


@attrs.define
class Config:
    """Main configuration container for FrameForge.

    Attributes:
        translation: Translation and search settings.
        logging: Logging settings.
        tables: Custom genetic code tables.
    """

    translation: TranslationConfig = attrs.Factory(TranslationConfig)
    logging: LoggingConfig = attrs.Factory(LoggingConfig)
    tables: list[TableConfig] = attrs.Factory(list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """Create a configuration from a parsed mapping.

        Raises:
            ValueError: If a section or key is unknown or a value is invalid.
        """
        unknown = set(data) - {"translation", "logging", "tables"}
        if unknown:
            raise ValueError(f"Unknown configuration sections: {', '.join(sorted(unknown))}")

        tables = data.get("tables", [])
        if not isinstance(tables, list):
            raise ValueError("'tables' must be an array of tables")

        try:
            return cls(
                translation=TranslationConfig(**data.get("translation", {})),
                logging=LoggingConfig(**data.get("logging", {})),
                tables=[TableConfig(**entry) for entry in tables],
            )
        except TypeError as e:
            raise ValueError(f"Invalid configuration: {e}") from e

    @classmethod
    def load(cls, path: Path | str | None = None) -> "Config":
        """Load configuration from a TOML file.

        Args:
            path: Path to configuration file. If None, returns the default
                configuration.

        Returns:
            Loaded configuration object.

        Raises:
            FileNotFoundError: If configuration file doesn't exist.
            ValueError: If configuration file is invalid.
        """
        if path is None:
            return cls()

        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML in {path}: {e}") from e

        config = cls.from_dict(data)
        logger.debug(f"Loaded configuration from {path}")
        return config

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary.

        Returns:
            Dictionary representation of configuration.
        """
        return attrs.asdict(self)

    def register_tables(self) -> list[GeneticCodeTable]:
        """Build the custom tables and register them for lookup by id.

        Returns:
            The registered tables, in configuration order.

        Raises:
            ValueError: If a table is malformed or its id is taken.
        """
        return [register_table(entry.build()) for entry in self.tables]
