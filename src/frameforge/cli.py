"""Command-line interface for FrameForge.

Commands:
    tables: List the available genetic code tables
    translate: Translate sequences (one frame, a region, or all six frames)
    orf: Find the longest open reading frame of each sequence
    cds: Find the longest coding sequence of each sequence
    nonstop: List the frames of each sequence without stop codons

Sequences come from ``--sequence`` or a FASTA file (every record, or the
ones named with ``--record``). Results are written to stdout as
tab-separated lines; messages and errors go to stderr.

Example:
    $ frameforge tables
    $ frameforge translate -s ATGGCCTAA
    $ frameforge translate transcripts.fa --record tx1 --region 301-1
    $ frameforge orf transcripts.fa --strand 1 --translate
    $ frameforge -c frameforge.toml cds genome.fa --record chr2 --strict 2
"""

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from frameforge import __version__
from frameforge.config import Config
from frameforge.core.tables import UnknownTableIdError, available_tables, get_table
from frameforge.core.translator import Translator
from frameforge.io.fasta import SequenceReader
from frameforge.utils.logging import ProgressLogger, Timer, setup_logging
from frameforge.utils.regions import (
    InvalidCoordinatesError,
    InvalidStrandError,
    Region,
    parse_region,
    to_e53,
    validate_strand,
)
from frameforge.utils.sequences import (
    InvalidSequenceSymbolError,
    clean_dna,
    to_three_letter,
)

logger = logging.getLogger(__name__)

# Tables go to stdout, messages and errors to stderr
console = Console()
err_console = Console(stderr=True)

# Errors reported as a one-line message rather than a traceback
USER_ERRORS = (
    InvalidCoordinatesError,
    InvalidStrandError,
    InvalidSequenceSymbolError,
    UnknownTableIdError,
    FileNotFoundError,
    KeyError,
    ValueError,
)

# Record name used for --sequence input
SEQUENCE_NAME = "sequence"


# =============================================================================
# Helpers
# =============================================================================


def _error_message(error: Exception) -> str:
    # KeyError quotes its message
    if isinstance(error, KeyError) and error.args:
        return str(error.args[0])
    return str(error)


def _fail(error: Exception) -> None:
    err_console.print(f"[red]Error:[/red] {_error_message(error)}")
    raise SystemExit(1)


def _check_strand(ctx: click.Context, param: click.Parameter, value: int | None) -> int | None:
    if value is None:
        return None
    try:
        return validate_strand(value)
    except InvalidStrandError as e:
        raise click.BadParameter(str(e)) from e


def _load_records(
    fasta: Path | None,
    sequence: str | None,
    records: tuple[str, ...],
    strict: bool,
) -> list[tuple[str, str]]:
    """Collect (name, cleaned sequence) pairs from the command inputs."""
    if sequence is not None and fasta is not None:
        raise click.UsageError("Use either --sequence or a FASTA file, not both.")
    if sequence is not None:
        return [(SEQUENCE_NAME, clean_dna(sequence, strict=strict))]
    if fasta is None:
        raise click.UsageError("Provide --sequence or a FASTA file.")

    with SequenceReader(fasta, strict=strict) as reader:
        if records:
            return [(name, reader.get_sequence(name)) for name in records]
        return list(reader.iter_records())


def _translator(ctx: click.Context, table_id: int | None) -> Translator:
    config: Config = ctx.obj["config"]
    return Translator(config.translation.table_id if table_id is None else table_id)


def input_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by every command that reads sequences."""
    func = click.argument(
        "fasta",
        required=False,
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
    )(func)
    func = click.option(
        "-s",
        "--sequence",
        type=str,
        help="Nucleotide sequence to process instead of a FASTA file.",
    )(func)
    func = click.option(
        "-r",
        "--record",
        "records",
        multiple=True,
        help="FASTA record to process. Repeat for several; default is all.",
    )(func)
    func = click.option(
        "-t",
        "--table",
        "table_id",
        type=int,
        default=None,
        help="Genetic code table id [default: from config, else 1].",
    )(func)
    func = click.option(
        "--strict-symbols/--lenient-symbols",
        default=None,
        help="Reject unknown sequence symbols instead of dropping them.",
    )(func)
    return func


def search_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by the ORF and CDS searches."""
    func = click.option(
        "--strand",
        type=int,
        default=None,
        callback=_check_strand,
        help="Strand to search: 1, -1, or 0 for both [default: from config, else 0].",
    )(func)
    func = click.option(
        "--lower",
        type=click.IntRange(min=0),
        default=0,
        show_default=True,
        help="Lower bound of the search (0-based).",
    )(func)
    func = click.option(
        "--upper",
        type=click.IntRange(min=0),
        default=None,
        help="Upper bound of the search (exclusive) [default: sequence end].",
    )(func)
    return func


def _strict_symbols(ctx: click.Context, value: bool | None) -> bool:
    config: Config = ctx.obj["config"]
    return config.translation.strict_symbols if value is None else value


def _write_region(name: str, region: Region, protein: str | None) -> None:
    end5, end3 = to_e53(region)
    fields = [name, region.lower, region.upper, region.strand, end5, end3, region.length]
    if protein is not None:
        fields.append(protein)
    click.echo("\t".join(str(field) for field in fields))


# =============================================================================
# Main group
# =============================================================================


@click.group()
@click.version_option(version=__version__, prog_name="frameforge")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output.")
@click.option("-q", "--quiet", is_flag=True, help="Suppress non-error output.")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="TOML configuration file.",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool, quiet: bool, config_path: Path | None) -> None:
    """FrameForge: find reading frames and translate nucleotide sequences.

    Supports the NCBI genetic code tables, IUPAC degenerate bases and both
    strands.
    """
    ctx.ensure_object(dict)

    try:
        config = Config.load(config_path)
    except (FileNotFoundError, ValueError) as e:
        _fail(e)

    if verbose:
        verbosity = 2
    elif quiet:
        verbosity = 0
    else:
        verbosity = config.logging.verbosity
    setup_logging(verbosity, config.logging.log_file, config.logging.use_rich)

    try:
        config.register_tables()
    except ValueError as e:
        _fail(e)

    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config"] = config


# =============================================================================
# tables command
# =============================================================================


@main.command("tables")
def tables_cmd() -> None:
    """List the available genetic code tables.

    Example:
        frameforge tables
    """
    table = Table(title="Genetic code tables")
    table.add_column("Id", justify="right")
    table.add_column("Name")
    table.add_column("Start codons")

    for table_id, name in available_tables():
        starts = get_table(table_id).start_codons
        table.add_row(str(table_id), name, " ".join(sorted(starts)))

    console.print(table)


# =============================================================================
# translate command
# =============================================================================


@main.command("translate")
@input_options
@click.option(
    "--strand",
    type=click.Choice(["1", "-1"]),
    default="1",
    show_default=True,
    help="Strand to translate.",
)
@click.option(
    "--region",
    "region_str",
    type=str,
    default=None,
    help="Region to translate as 1-based 'end5-end3' (optionally 'record:end5-end3'); "
    "end5 > end3 means the - strand.",
)
@click.option(
    "--partial5/--no-partial5",
    default=None,
    help="Translate the first codon literally instead of as a start.",
)
@click.option("--to-stop", is_flag=True, help="Stop translating at the first stop codon.")
@click.option("--six-frame", is_flag=True, help="Translate all six frames.")
@click.option("--three-letter", is_flag=True, help="Write three-letter residue codes.")
@click.pass_context
def translate_cmd(
    ctx: click.Context,
    fasta: Path | None,
    sequence: str | None,
    records: tuple[str, ...],
    table_id: int | None,
    strict_symbols: bool | None,
    strand: str,
    region_str: str | None,
    partial5: bool | None,
    to_stop: bool,
    six_frame: bool,
    three_letter: bool,
) -> None:
    """Translate sequences into protein.

    Writes 'name<TAB>protein', or 'name<TAB>frame<TAB>protein' with
    --six-frame.

    Example:
        frameforge translate -s ATGGCCTAA
        frameforge translate genome.fa --region chr1:1001-1300
    """
    config: Config = ctx.obj["config"]
    if partial5 is None:
        partial5 = config.translation.partial5

    def render(protein: str) -> str:
        return to_three_letter(protein, separator="-") if three_letter else protein

    try:
        region = parse_region(region_str) if region_str is not None else None
        if region is not None and region.source is not None and not records:
            records = (region.source,)

        translator = _translator(ctx, table_id)
        inputs = _load_records(fasta, sequence, records, _strict_symbols(ctx, strict_symbols))

        for name, seq in inputs:
            if six_frame:
                frames = translator.translate6(seq, partial5=partial5, sanitized=True)
                for label, protein in frames.items():
                    click.echo(f"{name}\t{label}\t{render(protein)}")
            elif region is not None:
                protein = translator.translate_range(
                    seq, region, partial5=partial5, to_stop=to_stop, sanitized=True
                )
                click.echo(f"{name}\t{render(protein)}")
            else:
                protein = translator.translate(
                    seq, int(strand), partial5=partial5, to_stop=to_stop, sanitized=True
                )
                click.echo(f"{name}\t{render(protein)}")
    except USER_ERRORS as e:
        _fail(e)


# =============================================================================
# orf / cds commands
# =============================================================================


def _run_search(
    ctx: click.Context,
    kind: str,
    fasta: Path | None,
    sequence: str | None,
    records: tuple[str, ...],
    table_id: int | None,
    strict_symbols: bool | None,
    strand: int | None,
    lower: int,
    upper: int | None,
    strict: int | None,
    translate: bool,
) -> None:
    config: Config = ctx.obj["config"]
    overrides: dict[str, Any] = {"lower": lower, "upper": upper, "sanitized": True}
    if strand is not None:
        overrides["strand"] = strand
    if strict is not None:
        overrides["strict"] = strict

    try:
        search = config.translation.search_config(**overrides)
        translator = _translator(ctx, table_id)
        inputs = _load_records(fasta, sequence, records, _strict_symbols(ctx, strict_symbols))

        progress = ProgressLogger(logger, total=len(inputs), description=f"{kind.upper()} search")
        with Timer(f"{kind.upper()} search over {len(inputs)} sequence(s)", logger):
            for name, seq in inputs:
                if kind == "orf":
                    region = translator.get_orf(seq, search)
                else:
                    region = translator.get_cds(seq, search)

                if region is None:
                    logger.warning(f"No {kind.upper()} found in {name}")
                else:
                    protein = None
                    if translate:
                        # ORFs have no start codon, so translate them literally
                        protein = translator.translate_range(
                            seq, region, partial5=kind == "orf", sanitized=True
                        )
                    _write_region(name, region, protein)
                progress.update()
    except USER_ERRORS as e:
        _fail(e)


@main.command("orf")
@input_options
@search_options
@click.option("--translate", is_flag=True, help="Append the translated ORF.")
@click.pass_context
def orf_cmd(
    ctx: click.Context,
    fasta: Path | None,
    sequence: str | None,
    records: tuple[str, ...],
    table_id: int | None,
    strict_symbols: bool | None,
    strand: int | None,
    lower: int,
    upper: int | None,
    translate: bool,
) -> None:
    """Find the longest stop-to-stop open reading frame.

    Writes 'name, lower, upper, strand, end5, end3, length' as TSV, plus
    the protein with --translate.

    Example:
        frameforge orf -s TAGAAATAG --strand 1
    """
    _run_search(
        ctx, "orf", fasta, sequence, records, table_id, strict_symbols,
        strand, lower, upper, None, translate,
    )


@main.command("cds")
@input_options
@search_options
@click.option(
    "--strict",
    type=click.IntRange(0, 2),
    default=None,
    help="0: frames may run off both ends; 1: a start is required; "
    "2: a start and a stop are required [default: from config, else 1].",
)
@click.option("--translate", is_flag=True, help="Append the translated CDS.")
@click.pass_context
def cds_cmd(
    ctx: click.Context,
    fasta: Path | None,
    sequence: str | None,
    records: tuple[str, ...],
    table_id: int | None,
    strict_symbols: bool | None,
    strand: int | None,
    lower: int,
    upper: int | None,
    strict: int | None,
    translate: bool,
) -> None:
    """Find the longest start-to-stop coding sequence.

    Writes 'name, lower, upper, strand, end5, end3, length' as TSV, plus
    the protein with --translate.

    Example:
        frameforge cds -s ATGAAATAG --strand 1 --translate
    """
    _run_search(
        ctx, "cds", fasta, sequence, records, table_id, strict_symbols,
        strand, lower, upper, strict, translate,
    )


# =============================================================================
# nonstop command
# =============================================================================


@main.command("nonstop")
@input_options
@click.option(
    "--strand",
    type=int,
    default=0,
    show_default=True,
    callback=_check_strand,
    help="Strand to check: 1, -1, or 0 for both.",
)
@click.pass_context
def nonstop_cmd(
    ctx: click.Context,
    fasta: Path | None,
    sequence: str | None,
    records: tuple[str, ...],
    table_id: int | None,
    strict_symbols: bool | None,
    strand: int,
) -> None:
    """List the frames without stop codons.

    Writes 'name<TAB>frames', frames comma separated (1, 2, 3 on the +
    strand and -1, -2, -3 on the - strand).

    Example:
        frameforge nonstop -s TACGTTGGTTAAGTT
    """
    try:
        translator = _translator(ctx, table_id)
        inputs = _load_records(fasta, sequence, records, _strict_symbols(ctx, strict_symbols))
        for name, seq in inputs:
            frames = translator.nonstop(seq, strand=strand, sanitized=True)
            click.echo(f"{name}\t{','.join(str(frame) for frame in frames)}")
    except USER_ERRORS as e:
        _fail(e)


if __name__ == "__main__":
    main()
