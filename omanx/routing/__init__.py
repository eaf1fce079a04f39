"""
Routing Package - Decide which lane answers a message.

- LaneClassifier: keyword router between the governed `scholar` lane
  and the unconstrained `local` lane

Example:
    >>> from omanx.routing import classify_lane, Lane
    >>> classify_lane("good brunch spot in Fishtown")
    <Lane.LOCAL: 'local'>
"""
from omanx.routing.lane_classifier import (
    GOVERNED_KEYWORDS,
    LOCAL_LIFE_KEYWORDS,
    Lane,
    LaneClassifier,
    classify_lane,
)

__all__ = [
    "GOVERNED_KEYWORDS",
    "LOCAL_LIFE_KEYWORDS",
    "Lane",
    "LaneClassifier",
    "classify_lane",
]
