"""
Economic Activity Compliance Classifier

Classifies one economic activity of the sustainable-activity questionnaire
(永續經濟活動自評問卷) as Y / T / N / X:

1. Out-of-scope category                          -> X 不適用
2. Conditions 1-3 all met                         -> Y 符合
3. A condition failed, transition plan = yes      -> T 轉型中
4. A condition failed, transition plan = no       -> N 不符合

Condition 1: substantial contribution to at least one environmental objective.
Condition 2: no significant harm to the other environmental objectives.
Condition 3: no significant harm to social safeguards.

A failed condition with transition plan "not applicable" matches none of the
rules above; it is rated N and logged.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

COMPLIANT = "Y"
TRANSITIONING = "T"
NON_COMPLIANT = "N"
OUT_OF_SCOPE = "X"

RATING_LABELS = {
    COMPLIANT: "符合",
    TRANSITIONING: "轉型中",
    NON_COMPLIANT: "不符合",
    OUT_OF_SCOPE: "不適用",
}

RATING_DEFINITIONS = {
    COMPLIANT: "經濟活動同時符合條件一（對環境目的具實質貢獻）、條件二（未對其他環境目的造成重大危害）及條件三（未對社會保障造成重大危害）。",
    TRANSITIONING: "經濟活動未符合條件一至條件三之任一條件，惟已提出具體之轉型計畫，承諾於期限內改善至符合。",
    NON_COMPLIANT: "經濟活動未符合條件一至條件三之任一條件，且未提出轉型計畫。",
    OUT_OF_SCOPE: "經濟活動非屬永續經濟活動認定參考指引之適用範疇。",
}

CATEGORY_GENERAL = "一般經濟活動"
CATEGORY_FORWARD_LOOKING = "前瞻經濟活動"
CATEGORY_OUT_OF_SCOPE = "排除適用之經濟活動"

_OUT_OF_SCOPE_CATEGORIES = {
    CATEGORY_OUT_OF_SCOPE,
    "非屬適用範疇",
    "不適用",
    "out-of-scope",
    "excluded",
    "x",
}

PLAN_YES = "yes"
PLAN_NO = "no"
PLAN_NOT_APPLICABLE = "not-applicable"

_PLAN_ALIASES = {
    "是": PLAN_YES,
    "有": PLAN_YES,
    "yes": PLAN_YES,
    "true": PLAN_YES,
    "否": PLAN_NO,
    "無": PLAN_NO,
    "no": PLAN_NO,
    "false": PLAN_NO,
    "不適用": PLAN_NOT_APPLICABLE,
    "not-applicable": PLAN_NOT_APPLICABLE,
    "n/a": PLAN_NOT_APPLICABLE,
    "na": PLAN_NOT_APPLICABLE,
}

_TRUE_STRINGS = {"是", "yes", "true", "y", "1", "符合"}


def _to_bool(value):
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return False


def normalize_plan(value):
    """Map 是/否/不適用 (or English equivalents) to yes / no / not-applicable."""
    if isinstance(value, bool):
        return PLAN_YES if value else PLAN_NO
    if not isinstance(value, str):
        return PLAN_NOT_APPLICABLE
    return _PLAN_ALIASES.get(value.strip().lower(), PLAN_NOT_APPLICABLE)


def is_out_of_scope(category):
    return isinstance(category, str) and category.strip().lower() in _OUT_OF_SCOPE_CATEGORIES


@dataclass(frozen=True)
class EconomicActivity:
    category: str
    condition1: bool
    condition2: bool
    condition3: bool
    transition_plan: str = PLAN_NOT_APPLICABLE
    activity_code: str = ""
    activity_name: str = ""
    activity_type: str = "operating"
    revenue_share: float = None
    condition1_items: tuple = field(default_factory=tuple)
    condition2_violations: tuple = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data):
        """Build an activity from a questionnaire JSON object (camelCase keys)."""
        data = data or {}
        revenue_share = data.get("revenueShare")
        try:
            revenue_share = float(revenue_share) if revenue_share not in (None, "") else None
        except (TypeError, ValueError):
            revenue_share = None
        return cls(
            category=str(data.get("category") or CATEGORY_GENERAL),
            condition1=_to_bool(data.get("condition1")),
            condition2=_to_bool(data.get("condition2")),
            condition3=_to_bool(data.get("condition3")),
            transition_plan=normalize_plan(data.get("transitionPlan")),
            activity_code=str(data.get("activityCode") or ""),
            activity_name=str(data.get("activityName") or ""),
            activity_type=str(data.get("type") or "operating"),
            revenue_share=revenue_share,
            condition1_items=tuple(data.get("condition1Items") or ()),
            condition2_violations=tuple(data.get("condition2Violations") or ()),
        )

    @property
    def all_conditions_met(self):
        return self.condition1 and self.condition2 and self.condition3


@dataclass(frozen=True)
class ActivityRating:
    rating: str

    @property
    def label(self):
        return RATING_LABELS[self.rating]

    @property
    def definition(self):
        return RATING_DEFINITIONS[self.rating]

    def to_dict(self):
        return {"rating": self.rating, "label": self.label, "definition": self.definition}


def classify(activity):
    """Classify an EconomicActivity as Y, T, N or X (first matching rule wins)."""
    if is_out_of_scope(activity.category):
        return ActivityRating(OUT_OF_SCOPE)
    if activity.all_conditions_met:
        return ActivityRating(COMPLIANT)

    plan = normalize_plan(activity.transition_plan)
    if plan == PLAN_YES:
        return ActivityRating(TRANSITIONING)
    if plan == PLAN_NO:
        return ActivityRating(NON_COMPLIANT)

    logger.warning(
        f"Activity {activity.activity_code or activity.activity_name or '?'} fails a condition "
        f"with transition plan '{activity.transition_plan}'; rating as {NON_COMPLIANT}"
    )
    return ActivityRating(NON_COMPLIANT)


def compliance_summary(ratings):
    """Count ratings per tag and the compliant share of in-scope activities."""
    counts = Counter(r.rating for r in ratings)
    in_scope = sum(counts[tag] for tag in (COMPLIANT, TRANSITIONING, NON_COMPLIANT))
    compliant_pct = round(counts[COMPLIANT] / in_scope * 100, 1) if in_scope else 0.0
    return {
        "counts": {tag: counts.get(tag, 0) for tag in RATING_LABELS},
        "inScope": in_scope,
        "compliantPercentage": compliant_pct,
    }
