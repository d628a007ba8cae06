"""
GRI Level-2 disclosure readiness scorer

Responses are grouped by category, each item a {"value", "label"} object:

    {"E": [{"value": "yes", "label": "GRI 302 能源"}, ...], "S": [...], "G": [...]}

Item values score no=1, basic/developing=2, yes/advanced=3; anything else 0.
Category sums are weighted E 35%, S 35%, G 30% and rounded half-up to one
decimal. Levels: A >= 8.5, B >= 7.0, C >= 5.5, else D.
"""

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field

from app.normalizer import MalformedInputError

logger = logging.getLogger(__name__)

VALUE_POINTS = {
    "no": 1,
    "basic": 2,
    "developing": 2,
    "yes": 3,
    "advanced": 3,
}

TOP_VALUES = ("yes", "advanced")

CATEGORY_WEIGHTS = {"E": 0.35, "S": 0.35, "G": 0.30}

GRI_LEVELS = [
    (8.5, "A (領先級)", "您的公司已具備卓越的 GRI 揭露基礎，建議進一步尋求第三方驗證"),
    (7.0, "B (中上級)", "您的公司具備良好的永續發展實踐，建議重點補強評分較低的構面"),
    (5.5, "C (進展級)", "您的公司已開始建立永續管理體系，建議優先改善環境與治理構面"),
    (None, "D (初期級)", "建議從基礎政策制定與員工意識提升開始著手"),
]


@dataclass(frozen=True)
class GRIScore:
    scores: dict
    total: float
    level: str
    summary: str
    recommendations: list = field(default_factory=list)

    def to_dict(self):
        return {
            **self.scores,
            "total": self.total,
            "details": dict(self.scores),
            "level": self.level,
            "summary": self.summary,
            "recommendations": list(self.recommendations),
        }


def _round_half_up(value, digits=1):
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def gri_level(total):
    """Level label and summary for a weighted GRI total."""
    for threshold, level, summary in GRI_LEVELS:
        if threshold is None or total >= threshold:
            return level, summary
    return GRI_LEVELS[-1][1], GRI_LEVELS[-1][2]


def score_gri(responses):
    """Weighted GRI readiness score for a category-grouped response set.

    Missing categories and non-object items are skipped. Every item that is
    not a top answer adds a recommendation naming its label.
    """
    if responses is None:
        responses = {}
    if not isinstance(responses, Mapping):
        raise MalformedInputError(
            f"GRI responses must be a mapping of category to items, got {type(responses).__name__}"
        )

    scores = {c: 0 for c in CATEGORY_WEIGHTS}
    recommendations = []
    for category in CATEGORY_WEIGHTS:
        items = responses.get(category) or []
        if not isinstance(items, list):
            logger.debug(f"Ignoring non-list GRI responses for {category}")
            continue
        for item in items:
            if not isinstance(item, Mapping):
                continue
            value = item.get("value")
            scores[category] += VALUE_POINTS.get(value, 0) if isinstance(value, str) else 0
            if value not in TOP_VALUES:
                recommendations.append(f"{category}構面可進一步改善：{item.get('label') or ''}")

    weighted = sum(scores[c] * w for c, w in CATEGORY_WEIGHTS.items())
    total = _round_half_up(weighted)
    level, summary = gri_level(total)
    return GRIScore(
        scores=scores,
        total=total,
        level=level,
        summary=summary,
        recommendations=recommendations,
    )
