"""
Progress Tracker

Works on an ordered assessment history (oldest first). Each history entry is
a dict shaped like Assessment.to_dict():

    {"id", "date", "scores": {"total", "E", "S", "G"}, "rating",
     "environmentalData": {"scope1Emissions", "scope2Emissions", "electricityUsage"},
     "answers": {...raw answers...}}

Provides:
- build_trend: per-assessment score series and change vs. the previous one
- rescore: recompute stored scores from raw answers with the current rubric
- evaluate_achievements: unlock achievement badges
"""

import logging

from app.scoring import score_answers

logger = logging.getLogger(__name__)


def _total(entry):
    scores = (entry or {}).get("scores") or {}
    return scores.get("total") or 0


def _score(entry, category):
    scores = (entry or {}).get("scores") or {}
    return scores.get(category) or 0


def _env(entry, key):
    env = (entry or {}).get("environmentalData") or {}
    return env.get(key) or 0


def _reduction_pct(current, previous, key):
    """Percent reduction of an environmental metric, None when not comparable."""
    if not previous:
        return None
    prev = _env(previous, key)
    if prev == 0:
        return None
    return (prev - _env(current, key)) / prev * 100


def _continuous_improvement(history):
    if len(history) < 3:
        return False
    last3 = history[-3:]
    return all(_total(last3[i]) > _total(last3[i - 1]) for i in range(1, 3))


# Per-assessment achievements take (current, previous); history-wide ones take
# the whole history and are flagged with "scope": "history".
ACHIEVEMENTS = [
    {
        "id": "carbon_reduction_10",
        "name": "減碳10%",
        "description": "碳排放量較上期減少10%以上",
        "icon": "🌱",
        "category": "environment",
        "condition": lambda cur, prev: (_reduction_pct(cur, prev, "scope1Emissions") or 0) >= 10,
    },
    {
        "id": "energy_efficiency_5",
        "name": "能源效率提升",
        "description": "能源使用量較上期減少5%以上",
        "icon": "⚡",
        "category": "environment",
        "condition": lambda cur, prev: (_reduction_pct(cur, prev, "electricityUsage") or 0) >= 5,
    },
    {
        "id": "social_responsibility",
        "name": "社會責任認證",
        "description": "S構面分數達到25分以上",
        "icon": "👥",
        "category": "social",
        "condition": lambda cur, prev: _score(cur, "S") >= 25,
    },
    {
        "id": "governance_excellence",
        "name": "治理卓越",
        "description": "G構面分數達到18分以上",
        "icon": "⚖️",
        "category": "governance",
        "condition": lambda cur, prev: _score(cur, "G") >= 18,
    },
    {
        "id": "total_score_20",
        "name": "總分提升20分",
        "description": "ESG總分較上期提升20分以上",
        "icon": "🌟",
        "category": "comprehensive",
        "condition": lambda cur, prev: prev is not None and _total(cur) - _total(prev) >= 20,
    },
    {
        "id": "rating_a",
        "name": "A級評級",
        "description": "獲得A級（領先級）評級",
        "icon": "🏆",
        "category": "comprehensive",
        "condition": lambda cur, prev: str(cur.get("rating") or "").upper() == "A",
    },
    {
        "id": "continuous_improvement",
        "name": "持續改善",
        "description": "連續3期評估總分持續提升",
        "icon": "📈",
        "category": "comprehensive",
        "scope": "history",
        "condition": _continuous_improvement,
    },
    {
        "id": "e_score_25",
        "name": "環境優秀",
        "description": "E構面分數達到25分以上",
        "icon": "🌍",
        "category": "environment",
        "condition": lambda cur, prev: _score(cur, "E") >= 25,
    },
    {
        "id": "total_score_60",
        "name": "總分達標",
        "description": "ESG總分達到60分以上",
        "icon": "⭐",
        "category": "comprehensive",
        "condition": lambda cur, prev: _total(cur) >= 60,
    },
    {
        "id": "total_score_70",
        "name": "總分良好",
        "description": "ESG總分達到70分以上",
        "icon": "⭐⭐",
        "category": "comprehensive",
        "condition": lambda cur, prev: _total(cur) >= 70,
    },
    {
        "id": "total_score_80",
        "name": "總分優秀",
        "description": "ESG總分達到80分以上",
        "icon": "⭐⭐⭐",
        "category": "comprehensive",
        "condition": lambda cur, prev: _total(cur) >= 80,
    },
]


def build_trend(history):
    """Score series for charting plus the change between the last two entries."""
    points = [
        {
            "id": entry.get("id"),
            "date": entry.get("date"),
            "total": _total(entry),
            "E": _score(entry, "E"),
            "S": _score(entry, "S"),
            "G": _score(entry, "G"),
            "rating": entry.get("rating"),
        }
        for entry in history
    ]

    change = None
    if len(history) >= 2:
        current, previous = history[-1], history[-2]
        diff = _total(current) - _total(previous)
        prev_total = _total(previous)
        change = {
            "points": diff,
            "percent": round(diff / prev_total * 100, 1) if prev_total else 0,
            "E": _score(current, "E") - _score(previous, "E"),
            "S": _score(current, "S") - _score(previous, "S"),
            "G": _score(current, "G") - _score(previous, "G"),
        }

    return {
        "points": points,
        "latest": points[-1] if points else None,
        "change": change,
    }


def rescore(history):
    """Recompute scores for every entry with stored answers.

    Returns (updated_history, changed_count). Entries are copied, not mutated.
    """
    updated = []
    changed = 0
    for entry in history:
        answers = entry.get("answers") or {}
        if not answers:
            updated.append(entry)
            continue

        result = score_answers(answers)
        new_scores = {
            "total": result.total,
            "E": result.scores["E"].total,
            "S": result.scores["S"].total,
            "G": result.scores["G"].total,
        }
        if _total(entry) != result.total:
            changed += 1
            logger.info(f"Rescored assessment {entry.get('id')}: {_total(entry)} -> {result.total}")
        updated.append({**entry, "scores": new_scores, "rating": result.level})
    return updated, changed


def evaluate_achievements(history, unlocked=None):
    """Return achievements newly unlocked by any entry of history.

    Ids in `unlocked` are never re-awarded. The unlocking entry is the first
    one (oldest first) that meets the condition.
    """
    already = set(unlocked or [])
    new = []
    for index, entry in enumerate(history):
        previous = history[index - 1] if index > 0 else None
        for definition in ACHIEVEMENTS:
            if definition["id"] in already:
                continue
            try:
                if definition.get("scope") == "history":
                    met = definition["condition"](history[: index + 1])
                else:
                    met = definition["condition"](entry, previous)
            except (TypeError, KeyError, ValueError) as e:
                logger.warning(f"Achievement check {definition['id']} failed: {e}")
                met = False
            if met:
                already.add(definition["id"])
                new.append({
                    "id": definition["id"],
                    "name": definition["name"],
                    "description": definition["description"],
                    "icon": definition["icon"],
                    "category": definition["category"],
                    "unlockedDate": entry.get("date"),
                    "unlockedByAssessment": entry.get("id"),
                })
    return new
