"""
Category Scorer and scoring pipeline

score_category() applies the rubric ladders of one category to a normalized
answer set. score_answers() runs the whole flow for a raw submission:
normalize -> E/S/G scores -> total -> point-based rating.
"""

import logging
from dataclasses import dataclass, field

from app.normalizer import normalize
from app.rating import rate
from app.rubric import CATEGORIES, CATEGORY_CAPS, RUBRIC_QUESTIONS, RUBRIC_VERSION

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CategoryScore:
    category: str
    total: int
    raw: int
    cap: int
    breakdown: dict = field(default_factory=dict)
    improvements: list = field(default_factory=list)

    @property
    def capped(self):
        return self.raw > self.total


@dataclass(frozen=True)
class AssessmentResult:
    scores: dict
    total: int
    rating: object
    improvements: list
    normalized: dict

    @property
    def level(self):
        return self.rating.level

    def to_dict(self):
        data = {
            "E": self.scores["E"].total,
            "S": self.scores["S"].total,
            "G": self.scores["G"].total,
            "total": self.total,
        }
        data.update(self.rating.to_dict())
        data["improvements"] = list(self.improvements)
        details = {}
        for category in CATEGORIES:
            details.update(self.scores[category].breakdown)
        data["details"] = details
        data["categories"] = {
            c: {
                "total": self.scores[c].total,
                "raw": self.scores[c].raw,
                "cap": self.scores[c].cap,
                "capped": self.scores[c].capped,
            }
            for c in CATEGORIES
        }
        data["rubricVersion"] = RUBRIC_VERSION
        return data


def _matches(pattern, normalized):
    return all(normalized.get(key) in accepted for key, accepted in pattern.items())


def score_question(question, normalized):
    """Points for one question: first matching ladder rung, else 0."""
    for pattern, points in question["ladder"]:
        if _matches(pattern, normalized):
            return points
    return 0


def score_category(category, normalized):
    """Score one of E/S/G against the canonical rubric.

    Absent answers score 0. The category total is capped; raw keeps the
    uncapped sum of the breakdown.
    """
    if category not in CATEGORY_CAPS:
        raise ValueError(f"Unknown category: {category}")

    normalized = normalized or {}
    breakdown = {}
    improvements = []
    for q in RUBRIC_QUESTIONS:
        if q["category"] != category:
            continue
        points = score_question(q, normalized)
        breakdown[q["id"]] = points
        if points < q["max_points"]:
            improvements.append(q["id"])

    raw = sum(breakdown.values())
    cap = CATEGORY_CAPS[category]
    total = min(raw, cap)
    if raw > cap:
        logger.debug(f"{category} raw score {raw} capped at {cap}")

    return CategoryScore(
        category=category,
        total=total,
        raw=raw,
        cap=cap,
        breakdown=breakdown,
        improvements=improvements,
    )


def score_normalized(normalized):
    scores = {c: score_category(c, normalized) for c in CATEGORIES}
    total = sum(s.total for s in scores.values())
    improvements = []
    for c in CATEGORIES:
        improvements.extend(scores[c].improvements)
    return AssessmentResult(
        scores=scores,
        total=total,
        rating=rate(total),
        improvements=improvements,
        normalized=normalized,
    )


def score_answers(raw):
    """Full pipeline for a raw answer submission."""
    return score_normalized(normalize(raw))
