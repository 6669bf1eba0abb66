# site_diff/crawler/matcher.py
"""Pairing of successor links between the two sites."""
from __future__ import annotations

from typing import AbstractSet, List, Sequence

from site_diff.crawler.models import AlignmentPair, LinkPartition
from site_diff.crawler.urls import is_similar_path


def partition_links(
    links_a: Sequence[str],
    links_b: Sequence[str],
    visited_a: AbstractSet[str],
    visited_b: AbstractSet[str],
) -> LinkPartition:
    """
    Split two link lists into common pairs and links unique to each side.

    Each unvisited A-link is paired with the first unvisited, still unpaired
    B-link that has a similar path. The match is greedy and depends on link
    order: with repeated paths the first candidate wins even when a later
    pairing would fit better.
    """
    candidates_b: List[str] = [link for link in links_b if link not in visited_b]
    taken_b: set[str] = set()
    partition = LinkPartition()

    for link_a in links_a:
        if link_a in visited_a:
            continue
        match = next(
            (b for b in candidates_b if b not in taken_b and is_similar_path(link_a, b)),
            None,
        )
        if match is None:
            partition.unique_a.append(link_a)
            continue
        taken_b.add(match)
        partition.common.append(AlignmentPair(link_a, match))

    partition.unique_b = [b for b in candidates_b if b not in taken_b]
    return partition
