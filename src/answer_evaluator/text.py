"""Text processing and similarity primitives used by the answer evaluator.

Tokenization, stopword removal and stemming are tuned for mixed
German/English exam answers. Everything here is a pure function.
"""

import math
import re
from collections import Counter
from typing import Dict, Iterable, List, Sequence

import numpy as np

# -------------------------
# Stopwords (small selection)
# -------------------------
STOPWORDS_DE = frozenset([
    "der", "die", "das", "und", "oder", "aber", "ist", "sind", "war", "waren",
    "ein", "eine", "den", "dem", "des", "in", "von", "zu", "mit", "auf",
    "für", "als", "bei", "nach", "über", "unter", "durch", "vor", "zwischen",
    "ohne", "gegen", "um", "an", "aus", "nicht", "nur", "auch", "noch",
    "so", "sehr", "wenn", "wie", "was", "wo", "wer", "wann", "warum",
    "kann", "wird", "werden", "hat", "haben", "sein", "seine", "ihrer",
])

STOPWORDS_EN = frozenset([
    "the", "and", "or", "but", "is", "are", "was", "were", "a", "an",
    "in", "of", "to", "with", "on", "for", "as", "at", "by", "from",
    "up", "about", "into", "through", "during", "before", "after",
    "above", "below", "between", "among", "since", "without", "under",
    "not", "only", "also", "still", "if", "how", "what", "where",
    "when", "why", "who", "which", "can", "will", "would", "has", "have",
    "had", "his", "her", "their", "this", "that", "these", "those",
])

# answers may mix both languages
STOPWORDS = STOPWORDS_DE | STOPWORDS_EN

# priority order matters: first matching suffix wins
STEM_SUFFIXES = ("ung", "lich", "keit", "heit", "isch", "end", "est", "er", "en", "em", "e", "s")

_STRIP_PATTERN = re.compile(r"[^a-z0-9_\säöüß\\^{}()\[\]=<>≤≥±∞∑∏∈∉⊆⊇∪∩]")

_LATEX_COMMAND = re.compile(r"\\[a-zA-Z]+")
_MATH_PATTERNS = [
    re.compile(r"\b(?:softmax|attention|transformer|bert|gpt|lstm|rnn|cnn)\b", re.IGNORECASE | re.ASCII),
    re.compile(r"\b(?:embedding|token|vector|matrix|tensor)\b", re.IGNORECASE | re.ASCII),
    re.compile(r"\b(?:gradient|backprop|forward|loss|optimizer)\b", re.IGNORECASE | re.ASCII),
    re.compile(r"\b(?:accuracy|precision|recall|f1|auc|perplexity)\b", re.IGNORECASE | re.ASCII),
    re.compile(r"\$[^$]+\$"),       # inline math
    re.compile(r"\\\([^)]+\\\)"),   # LaTeX inline
]


# =============================================================================
# Tokenization
# =============================================================================

def tokenize(text) -> List[str]:
    """Split text into lowercase tokens.

    Punctuation is dropped; German umlauts and common math/set symbols are
    kept. Non-string or empty input gives an empty list.
    """
    if not text or not isinstance(text, str):
        return []
    cleaned = _STRIP_PATTERN.sub(" ", text.lower())
    return [tok for tok in re.split(r"\s+", cleaned) if tok]


def remove_stopwords(tokens: Iterable[str], stopwords=STOPWORDS_DE) -> List[str]:
    return [tok for tok in tokens if tok not in stopwords]


def stem(word: str) -> str:
    """Rudimentary German suffix stripping."""
    if len(word) <= 3:
        return word
    for suffix in STEM_SUFFIXES:
        if word.endswith(suffix) and len(word) > len(suffix) + 2:
            return word[:-len(suffix)]
    return word


def process_text(text, use_stemming: bool = False) -> List[str]:
    """Tokenize, drop German and English stopwords, optionally stem."""
    tokens = remove_stopwords(tokenize(text), STOPWORDS)
    if use_stemming:
        tokens = [stem(tok) for tok in tokens]
    return tokens


# =============================================================================
# Keyword / math term extraction
# =============================================================================

def extract_keywords(text, max_keywords: int = 10) -> List[str]:
    """Most frequent stemmed content words.

    Args:
        text: Input text
        max_keywords: Maximum number of keywords to return

    Returns:
        Keywords ordered by descending frequency; ties keep first occurrence
    """
    frequency = Counter(process_text(text, use_stemming=True))
    ranked = sorted(frequency.items(), key=lambda item: -item[1])
    return [tok for tok, _ in ranked[:max_keywords]]


def extract_math_terms(text) -> List[str]:
    """LaTeX commands, inline math spans and NLP/ML jargon found in text.

    Terms are lowercased and de-duplicated, in the order they were found.
    """
    if not text or not isinstance(text, str):
        return []

    terms = _LATEX_COMMAND.findall(text)
    for pattern in _MATH_PATTERNS:
        terms.extend(pattern.findall(text))

    return list(dict.fromkeys(term.lower() for term in terms))


# =============================================================================
# Similarity
# =============================================================================

def jaccard_similarity(a: Sequence[str], b: Sequence[str]) -> float:
    if not a and not b:
        return 1.0
    if not a or not b:
        return 0.0
    sa, sb = set(a), set(b)
    return len(sa & sb) / len(sa | sb)


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance with unit insertion, deletion and substitution costs."""
    a = a or ""
    b = b or ""
    if not a:
        return len(b)
    if not b:
        return len(a)

    b_chars = np.array(list(b))
    offsets = np.arange(len(b) + 1)
    previous = offsets.copy()

    for i, char in enumerate(a, start=1):
        cost = (b_chars != char).astype(np.int64)
        current = np.empty_like(previous)
        current[0] = i
        current[1:] = np.minimum(previous[1:] + 1, previous[:-1] + cost)  # deletion, substitution
        # insertions: current[j] = min over k <= j of current[k] + (j - k)
        previous = np.minimum.accumulate(current - offsets) + offsets
    return int(previous[-1])


def levenshtein_similarity(a: str, b: str) -> float:
    """Normalized Levenshtein similarity in [0, 1]."""
    max_len = max(len(a or ""), len(b or ""))
    if max_len == 0:
        return 1.0
    return 1.0 - levenshtein_distance(a, b) / max_len


# =============================================================================
# Score presentation
# =============================================================================

def normalize_score(score: float, min_value: float = 0.0, max_value: float = 1.0) -> float:
    return float(np.clip(score, min_value, max_value))


def format_score(score: float) -> str:
    """Render a [0, 1] score as a rounded percentage, e.g. ``"87%"``."""
    return f"{int(math.floor(score * 100 + 0.5))}%"


def get_score_color(score: float) -> str:
    if score >= 0.8:
        return "green"
    if score >= 0.6:
        return "yellow"
    if score >= 0.4:
        return "orange"
    return "red"


def get_score_label(score: float) -> str:
    if score >= 0.9:
        return "excellent"
    if score >= 0.8:
        return "very good"
    if score >= 0.7:
        return "good"
    if score >= 0.6:
        return "satisfactory"
    if score >= 0.5:
        return "sufficient"
    if score >= 0.3:
        return "poor"
    return "insufficient"


# =============================================================================
# Debugging
# =============================================================================

def analyze_text(text) -> Dict:
    """Token statistics for inspecting how a text is seen by the grader."""
    raw_tokens = tokenize(text)
    processed = process_text(text)
    keywords = extract_keywords(text)
    math_terms = extract_math_terms(text)
    return {
        "raw_tokens": raw_tokens,
        "processed_tokens": processed,
        "keywords": keywords,
        "math_terms": math_terms,
        "stats": {
            "raw_count": len(raw_tokens),
            "processed_count": len(processed),
            "keyword_count": len(keywords),
            "math_term_count": len(math_terms),
        },
    }
