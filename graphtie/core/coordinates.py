"""
Graphtie v0.1.0

Genomic coordinate projection along a node path.

Consecutive nodes of a k-mer derived graph overlap by ``k - 1`` bases, so
each node advances the genomic cursor by its length minus that overlap.
With ``k = 0`` no overlap is assumed and lengths simply concatenate.
"""

from typing import Dict, Sequence, Tuple

from .data_structures import IndexNotReached, MissingNode


def kmer_overlap(k: int) -> int:
    """
    Bases shared by two adjacent nodes for k-mer size ``k``.

    Example:
        >>> kmer_overlap(31)
        30
        >>> kmer_overlap(0)
        0
    """
    return max(k - 1, 0)


def project_coordinates(
    node_path: Sequence[int],
    from_index: int,
    to_index: int,
    sequences: Dict[int, str],
    k: int = 0
) -> Tuple[int, int]:
    """
    Convert two path positions into 1-based, inclusive genomic offsets.

    Args:
        node_path: Ordered node ids of the path
        from_index: Position whose first base gives the start
        to_index: Position whose last base gives the stop (inclusive)
        sequences: Node id -> sequence mapping
        k: K-mer size of the graph (0 = no overlap)

    Returns:
        (start, stop) genomic positions

    Raises:
        IndexNotReached: If ``to_index`` is never hit while walking the path,
            or lies before ``from_index``
        MissingNode: If a node up to ``to_index`` has no sequence
    """
    if from_index < 0 or to_index < from_index:
        raise IndexNotReached(to_index, len(node_path))

    overlap = kmer_overlap(k)
    cursor = 1
    start = None

    for i, node_id in enumerate(node_path):
        sequence = sequences.get(node_id)
        if sequence is None:
            raise MissingNode(node_id)

        if i == from_index:
            start = cursor
        if i == to_index:
            return start, cursor + len(sequence) - 1

        cursor += len(sequence) - overlap

    raise IndexNotReached(to_index, len(node_path))
