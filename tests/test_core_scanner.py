"""Unit tests for frameforge.core.scanner module.

Tests cover:
- SearchConfig validation
- Longest ORF search, tie-breaking and bounds
- Longest CDS search at each strictness level
- Stop-free frames
- Unregistered custom tables
"""

import pytest

from frameforge.core.patterns import PatternCache
from frameforge.core.scanner import SearchConfig, find, get_cds, get_orf, nonstop
from frameforge.core.tables import GeneticCodeTable, custom_table
from frameforge.utils.regions import InvalidCoordinatesError, InvalidStrandError, Region
from frameforge.utils.sequences import reverse_complement

from conftest import STANDARD_RESIDUES, STANDARD_STARTS

# + strand start at 2, no stop on either strand
OPEN_START = "GGATGGGGGGGG"


# =============================================================================
# SearchConfig
# =============================================================================


class TestSearchConfig:
    """Tests for SearchConfig."""

    def test_defaults(self) -> None:
        """Both strands, strict 1, whole sequence."""
        config = SearchConfig()
        assert config.strand == 0
        assert config.lower == 0
        assert config.upper is None
        assert config.strict == 1
        assert config.sanitized is False

    def test_strands(self) -> None:
        """Both strands are searched - strand first."""
        assert SearchConfig().strands() == (-1, 1)
        assert SearchConfig(strand=1).strands() == (1,)
        assert SearchConfig(strand=-1).strands() == (-1,)

    def test_invalid_strand(self) -> None:
        """Strand outside -1, 0, 1."""
        with pytest.raises(InvalidStrandError):
            SearchConfig(strand=2)

    def test_invalid_strict(self) -> None:
        """Strict outside 0, 1, 2."""
        with pytest.raises(ValueError, match="strict must be"):
            SearchConfig(strict=3)

    def test_negative_bound(self) -> None:
        """Negative bounds."""
        with pytest.raises(InvalidCoordinatesError, match="cannot be negative"):
            SearchConfig(lower=-1)

    def test_bounds(self) -> None:
        """Upper defaults to the sequence length."""
        assert SearchConfig().bounds(10) == (0, 10)
        assert SearchConfig(lower=2, upper=8).bounds(10) == (2, 8)

    def test_bounds_out_of_range(self) -> None:
        """Bounds past the sequence raise."""
        with pytest.raises(InvalidCoordinatesError, match="exceeds sequence length"):
            SearchConfig(upper=11).bounds(10)
        with pytest.raises(InvalidCoordinatesError, match="exceeds sequence length"):
            SearchConfig(lower=11).bounds(10)

    def test_bounds_inverted(self) -> None:
        """Upper below lower raises."""
        with pytest.raises(InvalidCoordinatesError, match="less than lower bound"):
            SearchConfig(lower=6, upper=3).bounds(10)

    def test_frozen(self) -> None:
        """Configs are immutable."""
        with pytest.raises(AttributeError):
            SearchConfig().strand = 1


# =============================================================================
# get_orf
# =============================================================================


class TestGetOrf:
    """Tests for get_orf."""

    def test_forward(self, standard_table: GeneticCodeTable) -> None:
        """Longest stop-to-stop region on the + strand includes the stop."""
        assert get_orf(standard_table, "TAGAAATAG", SearchConfig(strand=1)) == Region(3, 9, 1)

    def test_both_strands(self, standard_table: GeneticCodeTable) -> None:
        """The stop-free - strand wins with the full sequence."""
        assert get_orf(standard_table, "TAGAAATAG") == Region(0, 9, -1)

    def test_runs_off_end(self, standard_table: GeneticCodeTable) -> None:
        """Regions may run off the upper end, cut to whole codons."""
        assert get_orf(standard_table, "ACGTAGTTTA", SearchConfig(strand=1)) == Region(1, 10, 1)

    def test_reverse_includes_stop(self, standard_table: GeneticCodeTable) -> None:
        """On the - strand the stop sits at the lower end of the region."""
        seq = reverse_complement("TAGAAATAG")
        assert get_orf(standard_table, seq, SearchConfig(strand=-1)) == Region(0, 6, -1)

    def test_lower_bound(self, standard_table: GeneticCodeTable) -> None:
        """Frames are relative to the lower bound."""
        config = SearchConfig(strand=1, lower=3)
        assert get_orf(standard_table, "TAGAAATAG", config) == Region(3, 9, 1)

    def test_upper_bound(self, standard_table: GeneticCodeTable) -> None:
        """Matches must end inside the scan."""
        config = SearchConfig(strand=1, upper=8)
        region = get_orf(standard_table, "TAGAAATAG", config)
        assert region is not None
        assert region.upper <= 8
        assert region.length % 3 == 0

    def test_tie_keeps_first(self, standard_table: GeneticCodeTable) -> None:
        """Equal lengths keep the region found first."""
        # All three frames yield 9 nt regions; the frame ending at the upper
        # bound is closed first
        region = get_orf(standard_table, "CCCCCCCCCCC", SearchConfig(strand=1))
        assert region == Region(2, 11, 1)

    def test_short_sequence(self, standard_table: GeneticCodeTable) -> None:
        """Fewer than three bases gives None."""
        assert get_orf(standard_table, "") is None
        assert get_orf(standard_table, "AT") is None

    def test_cleans_input(self, standard_table: GeneticCodeTable) -> None:
        """Raw text is cleaned unless sanitized."""
        assert get_orf(standard_table, ">x\nuag aaa uag\n", SearchConfig(strand=1)) == Region(
            3, 9, 1
        )

    def test_out_of_range(self, standard_table: GeneticCodeTable) -> None:
        """Upper bound past the sequence."""
        with pytest.raises(InvalidCoordinatesError):
            get_orf(standard_table, "ATGAAA", SearchConfig(upper=7))

    def test_length_multiple_of_three(
        self, standard_table: GeneticCodeTable, random_sequences: list[str]
    ) -> None:
        """ORF lengths are always whole codons."""
        for seq in random_sequences:
            for strand in (-1, 0, 1):
                region = get_orf(standard_table, seq, SearchConfig(strand=strand))
                if len(seq) < 3:
                    assert region is None
                    continue
                assert region is not None
                assert region.lower <= region.upper <= len(seq)
                assert region.length % 3 == 0
                assert region.strand in (-1, 1)

    def test_custom_cache(self, standard_table: GeneticCodeTable) -> None:
        """An empty caller-owned cache is used and filled."""
        cache = PatternCache()
        get_orf(standard_table, "TAGAAATAG", SearchConfig(strand=1), cache)
        assert len(cache) == 1


# =============================================================================
# get_cds
# =============================================================================


class TestGetCds:
    """Tests for get_cds."""

    def test_start_to_stop(self, standard_table: GeneticCodeTable) -> None:
        """Region from start codon through stop codon."""
        assert get_cds(standard_table, "ATGAAATAG", SearchConfig(strand=1)) == Region(0, 9, 1)

    def test_default_config(self, standard_table: GeneticCodeTable) -> None:
        """Both strands with strict 1."""
        assert get_cds(standard_table, "ATGAAATAG") == Region(0, 9, 1)

    def test_internal_start_ignored(self, standard_table: GeneticCodeTable) -> None:
        """A second in-frame start doesn't restart the CDS."""
        assert get_cds(standard_table, "ATGATGTAA", SearchConfig(strand=1)) == Region(0, 9, 1)

    def test_reverse(self, standard_table: GeneticCodeTable) -> None:
        """- strand CDS of the reverse complement."""
        seq = reverse_complement("ATGAAATAG")
        assert get_cds(standard_table, seq, SearchConfig(strand=-1, strict=2)) == Region(0, 9, -1)

    def test_short_sequence(self, standard_table: GeneticCodeTable) -> None:
        """Fewer than three bases gives None at every strictness."""
        for strict in (0, 1, 2):
            assert get_cds(standard_table, "AT", SearchConfig(strict=strict)) is None

    def test_no_start(self, standard_table: GeneticCodeTable) -> None:
        """Without a start there is no + strand CDS at strict 1."""
        assert get_cds(standard_table, "CCCCCCCCC", SearchConfig(strand=1)) is None


class TestGetCdsStrictness:
    """Pins each strictness level against literal sequences."""

    def test_forward_strict0(self, standard_table: GeneticCodeTable) -> None:
        """Strict 0 opens every frame at the lower bound."""
        config = SearchConfig(strand=1, strict=0)
        assert get_cds(standard_table, OPEN_START, config) == Region(0, 12, 1)

    def test_forward_strict1(self, standard_table: GeneticCodeTable) -> None:
        """Strict 1 needs a start but may run off the upper end."""
        config = SearchConfig(strand=1, strict=1)
        assert get_cds(standard_table, OPEN_START, config) == Region(2, 11, 1)

    def test_forward_strict2(self, standard_table: GeneticCodeTable) -> None:
        """Strict 2 needs a stop inside the scan."""
        config = SearchConfig(strand=1, strict=2)
        assert get_cds(standard_table, OPEN_START, config) is None

    def test_reverse_strict0(self, standard_table: GeneticCodeTable) -> None:
        """Strict 0 on the - strand also runs off the upper end."""
        config = SearchConfig(strand=-1, strict=0)
        assert get_cds(standard_table, reverse_complement(OPEN_START), config) == Region(0, 12, -1)

    def test_reverse_strict1(self, standard_table: GeneticCodeTable) -> None:
        """Strict 1 on the - strand may run off the lower end without a stop."""
        config = SearchConfig(strand=-1, strict=1)
        assert get_cds(standard_table, reverse_complement(OPEN_START), config) == Region(1, 10, -1)

    def test_reverse_strict2(self, standard_table: GeneticCodeTable) -> None:
        """Strict 2 on the - strand needs the stop."""
        config = SearchConfig(strand=-1, strict=2)
        assert get_cds(standard_table, reverse_complement(OPEN_START), config) is None

    def test_strict2_complete(self, standard_table: GeneticCodeTable) -> None:
        """A complete CDS passes strict 2."""
        config = SearchConfig(strand=1, strict=2)
        assert get_cds(standard_table, "ATGAAATAG", config) == Region(0, 9, 1)

    def test_lengths(self, standard_table: GeneticCodeTable, random_sequences: list[str]) -> None:
        """CDS lengths are whole codons at every level."""
        for seq in random_sequences:
            for strict in (0, 1, 2):
                region = get_cds(standard_table, seq, SearchConfig(strict=strict))
                if region is not None:
                    assert region.length % 3 == 0
                    assert region.upper <= len(seq)


# =============================================================================
# nonstop and find
# =============================================================================


class TestNonstop:
    """Tests for nonstop."""

    def test_example(self, standard_table: GeneticCodeTable) -> None:
        """Frames 2, 3, -1 and -3 are stop free."""
        assert nonstop(standard_table, "TACGTTGGTTAAGTT") == [2, 3, -1, -3]

    def test_single_strand(self, standard_table: GeneticCodeTable) -> None:
        """Restricting the strand."""
        assert nonstop(standard_table, "TACGTTGGTTAAGTT", SearchConfig(strand=1)) == [2, 3]
        assert nonstop(standard_table, "TACGTTGGTTAAGTT", SearchConfig(strand=-1)) == [-1, -3]

    def test_no_stops(self, standard_table: GeneticCodeTable) -> None:
        """A stop-free sequence lists every frame."""
        assert nonstop(standard_table, "CCCCCC") == [1, 2, 3, -1, -2, -3]

    def test_empty(self, standard_table: GeneticCodeTable) -> None:
        """Empty sequences have no stops in any frame."""
        assert nonstop(standard_table, "") == [1, 2, 3, -1, -2, -3]


class TestFind:
    """Tests for find."""

    def test_find(self, standard_table: GeneticCodeTable) -> None:
        """Positions of stop codons."""
        assert find(standard_table, "TAGTAA", "*") == [0, 3]

    def test_find_reverse(self, standard_table: GeneticCodeTable) -> None:
        """Positions of - strand methionine codons."""
        assert find(standard_table, "ACATCAT", "M", strand=-1) == [1, 4]

    def test_find_special_key(self, standard_table: GeneticCodeTable) -> None:
        """lower on the + strand finds starts."""
        assert find(standard_table, "ATGCTG", "lower") == [0, 3]

    def test_find_reverse_uses_residue(self, standard_table: GeneticCodeTable) -> None:
        """- strand stops of the standard code."""
        assert find(standard_table, "TTACTA", "*", strand=-1) == [0, 3]


class TestUnregisteredTables:
    """Searches with custom tables that share the default id."""

    def test_find_keeps_tables_apart(self) -> None:
        """Two id-0 tables each get their own matchers."""
        standard = custom_table(STANDARD_RESIDUES, STANDARD_STARTS)
        variant = custom_table(STANDARD_RESIDUES.replace("W", "*"), STANDARD_STARTS)
        assert standard.table_id == variant.table_id == 0

        assert find(standard, "TGGTGG", "*") == []
        assert find(variant, "TGGTGG", "*") == [0, 3]
        assert find(standard, "TGGTGG", "W") == [0, 3]

    def test_searches_keep_tables_apart(self) -> None:
        """ORF and stop-free frame searches see each table's stops."""
        standard = custom_table(STANDARD_RESIDUES, STANDARD_STARTS)
        variant = custom_table(STANDARD_RESIDUES.replace("W", "*"), STANDARD_STARTS)
        config = SearchConfig(strand=1)

        assert nonstop(standard, "TGGTGG", config) == [1, 2, 3]
        assert nonstop(variant, "TGGTGG", config) == [2, 3]
        assert get_orf(standard, "TGGAAA", config) == Region(0, 6, 1)
        assert get_orf(variant, "TGGAAA", config) == Region(0, 3, 1)
