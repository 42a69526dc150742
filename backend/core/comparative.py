"""
comparative.py — One entity's value next to its peer group's aggregate.

The peer group includes the entity itself by default ("class average
including self"), matching how class averages are computed elsewhere.
Pass ``include_self=False`` for an exclusive comparison.
"""

from dataclasses import dataclass
from typing import Optional

import pandas as pd

from core import stats


@dataclass(frozen=True)
class Comparison:
    entity_value: Optional[float]
    peer_average: Optional[float]
    peer_count: int


def compare_to_peers(
    frame: pd.DataFrame,
    entity_id: str,
    value: str,
    key: str = "studentId",
    include_self: bool = True,
) -> Comparison:
    """
    ``frame`` holds one row per peer (entity included). A missing entity row
    still yields the peer aggregate; an empty peer group yields
    ``peer_average=None`` and ``peer_count=0``.
    """
    if frame.empty:
        return Comparison(entity_value=None, peer_average=None, peer_count=0)

    own_rows = frame[frame[key] == entity_id]
    own_values = [v for v in own_rows[value].tolist() if stats.count([v])]
    entity_value = float(own_values[0]) if own_values else None

    peers = frame if include_self else frame[frame[key] != entity_id]
    peer_values = peers[value].tolist()
    return Comparison(
        entity_value=entity_value,
        peer_average=stats.mean(peer_values),
        peer_count=stats.count(peer_values),
    )
