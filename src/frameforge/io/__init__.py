"""Input handlers for FrameForge.

Example:
    >>> from frameforge.io.fasta import SequenceReader
    >>> reader = SequenceReader("transcripts.fa")
"""

from frameforge.io.fasta import SequenceReader, read_sequence_text

__all__: list[str] = [
    "SequenceReader",
    "read_sequence_text",
]
