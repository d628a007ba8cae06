"""
Aggregate Rating Engine

Two independent rating strategies share the A-D letters but not their meaning:

- Point-based (rate): the 0-100 rubric total of the primary scoring flow,
  tiers A >= 80, B >= 60, C >= 30, else D.
- Percentage-based (rate_by_percentage): share of "yes" answers in the
  economic-activity questionnaire, tiers A >= 90, B >= 70, else C.

Boundaries are inclusive on the lower bound. The percentage strategy compares
the unrounded percentage and only rounds the value it returns for display.
"""

import math
from dataclasses import dataclass, field

from app.normalizer import normalize
from app.rubric import RUBRIC_QUESTIONS


# (threshold, tier) pairs in descending order; the last tier catches everything.
POINT_TIERS = [
    (80, {
        "level": "A",
        "level_name": "領先級 (A)",
        "rate_discount": 0.15,
        "rate_discount_range": "0.15% ~ 0.2%",
        "products": ["永續績效連結貸款(SLL)", "綠色融資", "永續夥伴年度表揚"],
        "special_benefits": ["優先承作 SLL 資格", "最高減碼幅度"],
        "warning": None,
    }),
    (60, {
        "level": "B",
        "level_name": "平均級 (B)",
        "rate_discount": 0.075,
        "rate_discount_range": "0.05% ~ 0.1%",
        "products": ["一般永續授信", "永續主題貸款"],
        "special_benefits": ["綠色融資快速審核通道", "ESG輔導平台進階功能免費使用"],
        "warning": None,
    }),
    (30, {
        "level": "C",
        "level_name": "潛力級 (C)",
        "rate_discount": 0,
        "rate_discount_range": "無利率優惠",
        "products": ["一般授信(須持續改善)"],
        "special_benefits": ["需簽訂12個月轉型意向書", "達到B級後續貸享優惠"],
        "warning": "需與銀行簽訂「永續轉型意向書」，12個月內達到B級",
    }),
    (None, {
        "level": "D",
        "level_name": "風險級 (D)",
        "rate_discount": -0.05,
        "rate_discount_range": "基準利率加碼0.05%",
        "products": ["一般授信(需加嚴審核)"],
        "special_benefits": ["限制下一年度授信額度"],
        "warning": "需提交「風險改善計畫」並定期追蹤",
    }),
]

PERCENTAGE_TIERS = [
    (90, {
        "level": "A",
        "level_name": "優秀級 (A)",
        "rate_discount": 0.25,
        "description": "永續經濟活動表現優秀，符合綠色融資優惠條件",
        "benefits": ["利率減碼0.25%", "綠色授信優先審核", "永續夥伴年度表揚"],
    }),
    (70, {
        "level": "B",
        "level_name": "良好級 (B)",
        "rate_discount": 0.1,
        "description": "永續經濟活動表現良好，具備轉型基礎",
        "benefits": ["利率減碼0.1%", "永續輔導顧問諮詢"],
    }),
    (None, {
        "level": "C",
        "level_name": "普通級 (C)",
        "rate_discount": 0,
        "description": "永續經濟活動尚待改善，建議參考改善建議逐步提升",
        "benefits": ["免費ESG輔導課程"],
    }),
]

LEVEL_ORDER = {"A": 0, "B": 1, "C": 2, "D": 3}


@dataclass(frozen=True)
class PointRating:
    level: str
    level_name: str
    rate_discount: float
    rate_discount_range: str
    products: list = field(default_factory=list)
    special_benefits: list = field(default_factory=list)
    warning: str = None

    def to_dict(self):
        data = {
            "level": self.level,
            "levelName": self.level_name,
            "rateDiscount": self.rate_discount,
            "rateDiscountRange": self.rate_discount_range,
            "products": list(self.products),
        }
        if self.special_benefits:
            data["specialBenefits"] = list(self.special_benefits)
        if self.warning:
            data["warning"] = self.warning
        return data


@dataclass(frozen=True)
class PercentageRating:
    level: str
    level_name: str
    percentage: float
    yes_count: int
    total_questions: int
    rate_discount: float
    description: str
    benefits: list = field(default_factory=list)

    def to_dict(self):
        return {
            "rating": self.level,
            "ratingName": self.level_name,
            "percentage": self.percentage,
            "yesCount": self.yes_count,
            "totalQuestions": self.total_questions,
            "rateDiscount": self.rate_discount,
            "ratingDescription": self.description,
            "benefits": list(self.benefits),
        }


def _pick_tier(value, tiers):
    for threshold, tier in tiers:
        if threshold is None or value >= threshold:
            return tier
    return tiers[-1][1]


def _number(value):
    """Finite float, or 0 for non-numeric, NaN and infinite input."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(value) or math.isinf(value):
        return 0.0
    return value


def rate(total):
    """Point-based rating for a 0-100 rubric total."""
    tier = _pick_tier(_number(total), POINT_TIERS)
    return PointRating(
        level=tier["level"],
        level_name=tier["level_name"],
        rate_discount=tier["rate_discount"],
        rate_discount_range=tier["rate_discount_range"],
        products=list(tier["products"]),
        special_benefits=list(tier["special_benefits"]),
        warning=tier["warning"],
    )


def rate_by_percentage(yes_count, total_questions):
    """Percentage-of-yes rating used by the activity-submission flow.

    The tier is chosen from the unrounded percentage; 89.99% is B even though
    it displays as 90.0.
    """
    yes_count = max(int(_number(yes_count)), 0)
    total_questions = int(_number(total_questions))
    if total_questions <= 0:
        percentage = 0.0
    else:
        percentage = yes_count * 100 / total_questions

    tier = _pick_tier(percentage, PERCENTAGE_TIERS)
    return PercentageRating(
        level=tier["level"],
        level_name=tier["level_name"],
        percentage=round(percentage, 1),
        yes_count=yes_count,
        total_questions=total_questions,
        rate_discount=tier["rate_discount"],
        description=tier["description"],
        benefits=list(tier["benefits"]),
    )


def _answered_yes(question, normalized):
    """True when any key of the question carries its top-rung answer."""
    top_pattern = question["ladder"][0][0]
    return any(normalized.get(key) in accepted for key, accepted in top_pattern.items())


def count_yes(answers):
    """Count "yes" answers in a raw submission of any key-naming generation.

    Answers are normalized first, so {"e4": "yes"} and
    {"e4_environmentalPenalty": "yes"} count alike. A question is a "yes"
    when one of its keys holds the answer of its best ladder rung.

    Returns (yes_count, total_questions); every rubric question counts toward
    the denominator whether answered or not.
    """
    normalized = normalize(answers)
    yes_count = sum(1 for q in RUBRIC_QUESTIONS if _answered_yes(q, normalized))
    return yes_count, len(RUBRIC_QUESTIONS)


def is_not_worse(level_a, level_b):
    """True when letter level_a ranks at least as well as level_b."""
    return LEVEL_ORDER[level_a] <= LEVEL_ORDER[level_b]
