"""
Lane Classifier - Route a message to the scholar or local lane.

Two fixed keyword sets are matched as plain, case-insensitive substrings:
- governed topics: immigration, legal, medical/emergency, funding and
  housing-contract terms. Any hit routes to `scholar`.
- local life: food, venues, neighbourhoods, recommendations. Hits route to
  `local` only when no governed keyword is present.

Anything else is answered in the `scholar` lane. Substring matching is
deliberately loose ("please" contains "lease"), which can only ever push a
message towards the governed lane.
"""
from enum import Enum
from typing import Iterable, Optional


class Lane(str, Enum):
    """Routing lanes."""
    SCHOLAR = "scholar"  # Governed, knowledge-grounded answers
    LOCAL = "local"      # Unconstrained lifestyle guidance


GOVERNED_KEYWORDS = (
    "i-20",
    "ds-2019",
    "sevis",
    "dso",
    "visa",
    "immigration",
    "status",
    "work authorization",
    "opt",
    "cpt",
    "legal",
    "police",
    "emergency",
    "911",
    "insurance",
    "medical",
    "hospital",
    "scholarship",
    "ministry",
    "funding",
    "reimbursement",
    "housing contract",
    "lease",
)

LOCAL_LIFE_KEYWORDS = (
    "restaurant",
    "restaurants",
    "food",
    "eat",
    "nearby",
    "near me",
    "cafe",
    "coffee",
    "pizza",
    "bar",
    "brunch",
    "gym",
    "grocery",
    "supermarket",
    "laundry",
    "philly",
    "philadelphia",
    "spring garden",
    "center city",
    "rittenhouse",
    "fishtown",
    "old city",
    "university city",
    "things to do",
    "recommend",
    "recommendation",
)


class LaneClassifier:
    """
    Classifies chat messages into routing lanes.

    Example:
        >>> classifier = LaneClassifier()
        >>> classifier.classify("best pizza near the embassy for my visa")
        <Lane.SCHOLAR: 'scholar'>
    """

    def __init__(
        self,
        governed_keywords: Iterable[str] = GOVERNED_KEYWORDS,
        local_keywords: Iterable[str] = LOCAL_LIFE_KEYWORDS,
    ):
        self.governed_keywords = tuple(k.lower() for k in governed_keywords)
        self.local_keywords = tuple(k.lower() for k in local_keywords)

    def classify(self, message: str) -> Lane:
        """
        Classify a message by lane.

        Args:
            message: Raw user message

        Returns:
            Lane.SCHOLAR if any governed keyword matches or nothing matches,
            Lane.LOCAL if only local-life keywords match
        """
        text = str(message or "").lower()

        if self.governed_match(text) is not None:
            return Lane.SCHOLAR

        if any(keyword in text for keyword in self.local_keywords):
            return Lane.LOCAL

        return Lane.SCHOLAR

    def governed_match(self, text: str) -> Optional[str]:
        """Return the first governed keyword found in lower-cased text."""
        for keyword in self.governed_keywords:
            if keyword in text:
                return keyword
        return None


_default_classifier = LaneClassifier()


def classify_lane(message: str) -> Lane:
    """Classify with the built-in keyword sets."""
    return _default_classifier.classify(message)
