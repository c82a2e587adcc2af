"""Placeholder location labels from free-text queries.

The label only lives until the backend answers with its own city/location,
so the rules favour something readable over something correct. Each strategy
is a pure ``(query) -> Optional[str]`` function; ``extract_location`` runs
them in order and keeps the first candidate that survives cleanup.
"""
import re
from typing import Callable, List, Optional

UNKNOWN_LOCATION = "Unknown Location"
UNTITLED_CHAT = "Untitled Chat"

MAX_LABEL_LENGTH = 40
MAX_FALLBACK_LENGTH = 50
MAX_TITLE_LENGTH = 50
MIN_CANDIDATE_LENGTH = 2
PLACE_NOUN_WINDOW = 20

# priority order, not specificity order
LOCATION_ANCHORS = [
    " near ",
    " in ",
    " at ",
    " around ",
    " from ",
    " to ",
    " by ",
    " close to ",
    " next to ",
]

FOOD_PATTERN = re.compile(
    r"\b(?:restaurants?|food|foods|eats|dining|cafes?|coffee(?: shops?)?|bars?|brunch|lunch|dinner|breakfast)\b\s+(.+)$",
    re.IGNORECASE,
)
ACTIVITIES_PATTERN = re.compile(
    r"\b(?:activities|attractions|sights|sightseeing|events|hikes?|museums?|nightlife)\b\s+(.+)$",
    re.IGNORECASE,
)
SHOW_ME_PATTERN = re.compile(
    r"\bshow me\s+(?:some\s+|the\s+)?(.+)$",
    re.IGNORECASE,
)

PLACE_NOUNS = [
    "downtown",
    "city",
    "town",
    "beach",
    "park",
    "square",
    "harbour",
    "harbor",
    "waterfront",
    "market",
    "district",
    "village",
    "island",
    "lake",
]

TRAILING_FILLERS = {
    "please",
    "today",
    "tonight",
    "tomorrow",
    "now",
    "asap",
    "thanks",
    "area",
    "and",
    "or",
    "with",
    "for",
    "the",
    "a",
    "an",
}

Strategy = Callable[[str], Optional[str]]


def anchor_candidate(query: str) -> Optional[str]:
    """Lowercased text after the last occurrence of the first anchor present"""
    lowered = query.lower()
    for anchor in LOCATION_ANCHORS:
        index = lowered.rfind(anchor)
        if index != -1:
            return lowered[index + len(anchor):]
    return None


def _pattern_strategy(pattern: re.Pattern) -> Strategy:
    def strategy(query: str) -> Optional[str]:
        match = pattern.search(query)
        return match.group(1) if match else None

    return strategy


food_candidate = _pattern_strategy(FOOD_PATTERN)
activities_candidate = _pattern_strategy(ACTIVITIES_PATTERN)
show_me_candidate = _pattern_strategy(SHOW_ME_PATTERN)


def place_noun_candidate(query: str) -> Optional[str]:
    """Window around whichever place noun appears earliest in the query"""
    found = (re.search(rf"\b{noun}\b", query, re.IGNORECASE) for noun in PLACE_NOUNS)
    matches = [m for m in found if m]
    if not matches:
        return None
    first = min(matches, key=lambda m: m.start())
    start = max(0, first.start() - PLACE_NOUN_WINDOW)
    end = min(len(query), first.end() + PLACE_NOUN_WINDOW)
    return query[start:end]


STRATEGIES: List[Strategy] = [
    anchor_candidate,
    food_candidate,
    activities_candidate,
    show_me_candidate,
    place_noun_candidate,
]


def strip_fillers(candidate: str) -> str:
    words = candidate.strip().rstrip(".,!?;:").split()
    while words and words[-1].lower().rstrip(".,!?;:") in TRAILING_FILLERS:
        words.pop()
    return " ".join(words)


def truncate_at_word(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    cut = text[:limit]
    boundary = cut.rfind(" ")
    if boundary > 0:
        cut = cut[:boundary]
    return cut.rstrip() + "..."


def title_case(text: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in text.split(" "))


def clean_candidate(candidate: Optional[str]) -> Optional[str]:
    if candidate is None:
        return None
    cleaned = strip_fillers(candidate)
    if len(cleaned) < MIN_CANDIDATE_LENGTH:
        return None
    return title_case(truncate_at_word(cleaned, MAX_LABEL_LENGTH))


def extract_location(query: str) -> str:
    """Best-effort place label for a search query"""
    text = query.strip()
    if not text:
        return UNKNOWN_LOCATION
    if len(text) <= 2:
        return query

    for strategy in STRATEGIES:
        label = clean_candidate(strategy(text))
        if label:
            return label

    if len(text) > MAX_FALLBACK_LENGTH:
        return text[:MAX_FALLBACK_LENGTH] + "..."
    return text


def generate_chat_title(query: str) -> str:
    """First 50 characters of the query with the first letter capitalised"""
    text = query.strip()
    if not text:
        return UNTITLED_CHAT
    if len(text) > MAX_TITLE_LENGTH:
        text = f"{text[:MAX_TITLE_LENGTH]}..."
    return text[0].upper() + text[1:]
