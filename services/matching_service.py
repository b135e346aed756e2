"""
Matching engine for catalog suggestions.

Scores catalog entries against a free-text item description in tiers:

    1. Exact       - normalized name equality, score 100
    2. Keyword     - word-overlap score with manufacturer weighting
    3. Similarity  - trigram similarity with manufacturer weighting

The combined strategy stops at the first tier that yields anything, so a
cheap hit never pays for the expensive tiers.
"""

import math
import re
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence
import structlog

from rapidfuzz import fuzz

from config import settings
from models.catalog import CatalogProduct
from models.matching import (
    CandidateMatch,
    CatalogEntry,
    MatchQuery,
    MatchStrategy,
    MatchTier,
)
from models.record import EditableRow
from services.catalog_store import SupabaseCatalogStore, get_catalog_store
from utils.text_utils import normalize_for_match

logger = structlog.get_logger(__name__)

_TRIGRAM_WORDS = re.compile(r"[^\W_]+")


@dataclass(frozen=True)
class MatchingConfig:
    """
    Tunable thresholds for the matching engine.

    The defaults are empirically chosen and kept configurable.
    """
    top_k: int = 3
    top_k_manufacturer: int = 5
    min_score: int = 20
    min_score_manufacturer: int = 15
    min_word_length: int = 3
    similarity_threshold: float = 0.3
    similarity_scorer: str = "trigram"
    manufacturer_exact_bonus: int = 30
    manufacturer_partial_bonus: int = 15
    manufacturer_mismatch_penalty: int = 20

    @classmethod
    def from_settings(cls) -> "MatchingConfig":
        return cls(
            top_k=settings.match_top_k,
            top_k_manufacturer=settings.match_top_k_manufacturer,
            min_score=settings.match_min_score,
            min_score_manufacturer=settings.match_min_score_manufacturer,
            min_word_length=settings.match_min_word_length,
            similarity_threshold=settings.match_similarity_threshold,
            similarity_scorer=settings.match_similarity_scorer,
            manufacturer_exact_bonus=settings.match_manufacturer_exact_bonus,
            manufacturer_partial_bonus=settings.match_manufacturer_partial_bonus,
            manufacturer_mismatch_penalty=settings.match_manufacturer_mismatch_penalty,
        )


# ===================
# SCORING PRIMITIVES
# ===================

def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp_score(score: float) -> int:
    return max(0, min(100, int(score)))


def tokenize(text: Optional[str], min_word_length: int = 3) -> list[str]:
    """
    Lowercase words of at least min_word_length characters.

    "Кабель ВВГ 3x2.5" → ["кабель", "ввг", "3x2.5"]
    """
    return [
        word for word in normalize_for_match(text).split(" ")
        if len(word) >= min_word_length
    ]


def keyword_score(query_words: Sequence[str], candidate_words: Sequence[str]) -> int:
    """
    Word-overlap score in 0..100.

    Counts word pairs where either word contains the other, relative to
    the longer word list.
    """
    longest = max(len(query_words), len(candidate_words))
    if longest == 0:
        return 0

    matched = sum(
        1
        for query_word in query_words
        for candidate_word in candidate_words
        if query_word in candidate_word or candidate_word in query_word
    )
    return clamp_score(round_half_up(matched / longest * 100))


def trigrams(text: Optional[str]) -> set[str]:
    """
    pg_trgm style trigram set.

    Each alphanumeric word is lowercased and padded with two leading
    spaces and one trailing space before slicing.
    """
    grams: set[str] = set()
    for word in _TRIGRAM_WORDS.findall((text or "").lower()):
        padded = f"  {word} "
        grams.update(padded[i:i + 3] for i in range(len(padded) - 2))
    return grams


def trigram_similarity(left: Optional[str], right: Optional[str]) -> float:
    """Shared trigrams over all distinct trigrams, 0.0 to 1.0."""
    left_grams = trigrams(left)
    right_grams = trigrams(right)
    union = left_grams | right_grams
    if not union:
        return 0.0
    return len(left_grams & right_grams) / len(union)


def token_sort_similarity(left: Optional[str], right: Optional[str]) -> float:
    """Order-independent token similarity, 0.0 to 1.0."""
    return fuzz.token_sort_ratio(
        normalize_for_match(left),
        normalize_for_match(right)
    ) / 100


SIMILARITY_SCORERS = {
    "trigram": trigram_similarity,
    "token_sort": token_sort_similarity,
}


def _manufacturer_key(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def manufacturers_related(left: Optional[str], right: Optional[str]) -> bool:
    """True when both are set and equal or one contains the other."""
    left_key = _manufacturer_key(left)
    right_key = _manufacturer_key(right)
    if not left_key or not right_key:
        return False
    return left_key in right_key or right_key in left_key


def manufacturer_adjustment(
    score: int,
    query_manufacturer: Optional[str],
    candidate_manufacturer: Optional[str],
    config: MatchingConfig = MatchingConfig(),
) -> int:
    """
    Apply the manufacturer rule to a name score.

    Equal: +30. One contains the other: +15. Both set but unrelated: -20,
    floored at 0. Either missing: unchanged. Result clamped to 0..100.
    """
    query_key = _manufacturer_key(query_manufacturer)
    candidate_key = _manufacturer_key(candidate_manufacturer)

    if not query_key or not candidate_key:
        return clamp_score(score)

    if query_key == candidate_key:
        score += config.manufacturer_exact_bonus
    elif query_key in candidate_key or candidate_key in query_key:
        score += config.manufacturer_partial_bonus
    else:
        score = max(0, score - config.manufacturer_mismatch_penalty)

    return clamp_score(score)


# ===================
# ENGINE
# ===================

class MatchingEngine:
    """
    Tiered fuzzy search over an in-memory catalog.

    Pure: never mutates the catalog and never caches results.
    """

    def __init__(self, config: Optional[MatchingConfig] = None):
        self.config = config or MatchingConfig()
        if self.config.similarity_scorer not in SIMILARITY_SCORERS:
            raise ValueError(f"Unknown similarity scorer: {self.config.similarity_scorer}")
        self._similarity = SIMILARITY_SCORERS[self.config.similarity_scorer]

    def acceptance_window(
        self,
        query: MatchQuery,
        catalog: Sequence[CatalogEntry],
    ) -> tuple[int, int]:
        """
        (top_k, min_score) for a query.

        Widened when any catalog entry shares the query's manufacturer, so
        a correct-manufacturer entry with a mediocre name score still shows.
        """
        if query.manufacturer and any(
            manufacturers_related(query.manufacturer, entry.manufacturer)
            for entry in catalog
        ):
            return self.config.top_k_manufacturer, self.config.min_score_manufacturer
        return self.config.top_k, self.config.min_score

    def exact(
        self,
        query: MatchQuery,
        catalog: Sequence[CatalogEntry],
        top_k: Optional[int] = None,
    ) -> list[CandidateMatch]:
        """Entries whose normalized name equals the query text."""
        target = normalize_for_match(query.text)
        if not target:
            return []

        limit = top_k or self.acceptance_window(query, catalog)[0]
        matches = [
            CandidateMatch(entry=entry, score=100, tier=MatchTier.EXACT)
            for entry in catalog
            if normalize_for_match(entry.name) == target
        ]
        return matches[:limit]

    def keyword(
        self,
        query: MatchQuery,
        catalog: Sequence[CatalogEntry],
        top_k: Optional[int] = None,
    ) -> list[CandidateMatch]:
        """
        Keyword-overlap score for every entry, manufacturer-weighted.

        Entries with no shared word still qualify through the manufacturer
        bonus when the adjusted score clears the minimum.
        """
        query_words = tokenize(query.text, self.config.min_word_length)
        if not query_words:
            return []

        scored = [
            (entry, keyword_score(query_words, tokenize(entry.name, self.config.min_word_length)))
            for entry in catalog
        ]

        return self._rank(query, catalog, scored, MatchTier.KEYWORD, top_k)

    def similarity(
        self,
        query: MatchQuery,
        catalog: Sequence[CatalogEntry],
        top_k: Optional[int] = None,
    ) -> list[CandidateMatch]:
        """Entries above the similarity threshold, manufacturer-weighted."""
        if not normalize_for_match(query.text):
            return []

        scored = []
        for entry in catalog:
            ratio = self._similarity(query.text, entry.name)
            if ratio >= self.config.similarity_threshold:
                scored.append((entry, round_half_up(ratio * 100)))

        return self._rank(query, catalog, scored, MatchTier.SIMILARITY, top_k)

    def suggest(
        self,
        query: MatchQuery,
        catalog: Sequence[CatalogEntry],
        strategy: MatchStrategy = MatchStrategy.COMBINED,
        top_k: Optional[int] = None,
    ) -> list[CandidateMatch]:
        """
        Ranked suggestions for one query.

        Args:
            query: Item text and optional manufacturer
            catalog: Entries to search, in declaration order
            strategy: A single tier, or COMBINED (exact → keyword →
                      similarity, first non-empty tier wins)
            top_k: Overrides the manufacturer-aware result count

        Returns:
            Candidates, best first
        """
        if strategy == MatchStrategy.EXACT:
            return self.exact(query, catalog, top_k)
        if strategy == MatchStrategy.KEYWORD:
            return self.keyword(query, catalog, top_k)
        if strategy == MatchStrategy.SIMILARITY:
            return self.similarity(query, catalog, top_k)

        for tier in (self.exact, self.keyword, self.similarity):
            matches = tier(query, catalog, top_k)
            if matches:
                logger.debug(
                    "suggestions_found",
                    query=query.text,
                    tier=matches[0].tier.value,
                    count=len(matches)
                )
                return matches

        logger.debug("no_suggestions", query=query.text)
        return []

    def suggest_for_rows(
        self,
        rows: Iterable[EditableRow],
        catalog: Sequence[CatalogEntry],
    ) -> dict[str, list[CandidateMatch]]:
        """
        Suggestions for every named row.

        Returns:
            row id → candidates; rows without candidates are left out
        """
        suggestions: dict[str, list[CandidateMatch]] = {}
        row_count = 0

        for row in rows:
            if not row.name:
                continue
            row_count += 1
            matches = self.suggest(
                MatchQuery(text=row.name, manufacturer=row.manufacturer),
                catalog
            )
            if matches:
                suggestions[row.id] = matches

        logger.info(
            "suggestions_computed",
            rows=row_count,
            matched=len(suggestions),
            catalog_size=len(catalog)
        )

        return suggestions

    def _rank(
        self,
        query: MatchQuery,
        catalog: Sequence[CatalogEntry],
        scored: list[tuple[CatalogEntry, int]],
        tier: MatchTier,
        top_k: Optional[int],
    ) -> list[CandidateMatch]:
        """Manufacturer-adjust, threshold, stable-sort and cap."""
        if not scored:
            return []

        window_top_k, min_score = self.acceptance_window(query, catalog)
        limit = top_k or window_top_k

        adjusted = [
            (entry, manufacturer_adjustment(score, query.manufacturer, entry.manufacturer, self.config))
            for entry, score in scored
        ]
        # sorted() is stable: ties keep catalog order
        ranked = sorted(adjusted, key=lambda pair: pair[1], reverse=True)

        return [
            CandidateMatch(entry=entry, score=score, tier=tier)
            for entry, score in ranked
            if score >= min_score
        ][:limit]


# ===================
# APPLYING A SUGGESTION
# ===================

def select_match(
    row: EditableRow,
    entry: CatalogEntry,
    pending: Optional[dict[str, list[CandidateMatch]]] = None,
) -> tuple[EditableRow, dict[str, list[CandidateMatch]]]:
    """
    Copy a chosen catalog entry onto a row.

    Pure: returns a new row with code, manufacturer, unit, price, source
    and product code taken from the entry, plus the pending suggestions
    without this row. Neither the row, the entry nor `pending` is mutated.
    """
    updated = row.model_copy(update={
        "code": entry.code,
        "manufacturer": entry.manufacturer,
        "unit": entry.unit,
        "price": entry.price,
        "price_source": entry.source,
        "product_code": str(entry.id),
    })
    remaining = {
        row_id: matches
        for row_id, matches in (pending or {}).items()
        if row_id != row.id
    }
    return updated, remaining


# ===================
# SERVICE
# ===================

class MatchingService:
    """Runs the matching engine against the persisted catalog."""

    def __init__(
        self,
        store: SupabaseCatalogStore,
        engine: Optional[MatchingEngine] = None,
    ):
        self.store = store
        self.engine = engine or MatchingEngine(MatchingConfig.from_settings())

    def load_catalog(self, limit: Optional[int] = None) -> list[CatalogEntry]:
        """Read catalog rows as matching entries, in key order."""
        rows = self.store.fetch_all(limit)
        source = getattr(self.store, "table", None)
        return [
            CatalogEntry.from_product(CatalogProduct.from_row(row), source=source)
            for row in rows
        ]

    def suggest(
        self,
        name: str,
        manufacturer: Optional[str] = None,
        strategy: MatchStrategy = MatchStrategy.COMBINED,
        top_k: Optional[int] = None,
    ) -> list[dict]:
        """
        Suggestions for one item as flat dicts.

        Returns:
            [{id, code, name, manufacturer, unit, price, source, score, tier}]
        """
        logger.info("suggest_requested", name=name, manufacturer=manufacturer, strategy=strategy.value)

        catalog = self.load_catalog()
        matches = self.engine.suggest(
            MatchQuery(text=name, manufacturer=manufacturer),
            catalog,
            strategy=strategy,
            top_k=top_k
        )
        return [match.to_suggestion() for match in matches]

    def suggest_for_rows(self, rows: Iterable[EditableRow]) -> dict[str, list[CandidateMatch]]:
        return self.engine.suggest_for_rows(rows, self.load_catalog())


# Singleton instance for convenience
_matching_service: Optional[MatchingService] = None


def get_matching_service() -> MatchingService:
    """Get or create MatchingService instance."""
    global _matching_service
    if _matching_service is None:
        _matching_service = MatchingService(get_catalog_store())
    return _matching_service
