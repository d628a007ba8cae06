"""
Answer Normalizer

Maps raw answer submissions, which may use any of the historical field-naming
schemes, onto the canonical answer keys of the current rubric.

Best effort: missing or unrecognised answers are dropped rather than rejected,
so old submissions can always be re-scored.
"""

import logging
from collections.abc import Mapping

from app.rubric import LEGACY_TRANSLATIONS, canonical_keys

logger = logging.getLogger(__name__)


class MalformedInputError(ValueError):
    """Raised when a submission is not an answer mapping at all."""


_CANONICAL_KEYS = canonical_keys()

# {canonical_key: [(legacy_key, value_map), ...]} in precedence order
_LEGACY_BY_CANONICAL = {}
for _legacy_key, _canonical_key, _value_map in LEGACY_TRANSLATIONS:
    _LEGACY_BY_CANONICAL.setdefault(_canonical_key, []).append((_legacy_key, _value_map))


def _clean(value):
    """Coerce a raw answer to a comparable string, or None when empty."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "yes" if value else "no"
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def normalize(raw):
    """Translate a RawAnswerSet into a NormalizedAnswerSet.

    For each canonical key the detailed key wins when present and non-empty.
    Otherwise the first legacy key present is translated through its value
    table. Values outside the key's enum are dropped, as are unknown keys.
    """
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise MalformedInputError(
            f"Answers must be a mapping of question key to value, got {type(raw).__name__}"
        )

    normalized = {}
    for key, accepted in _CANONICAL_KEYS.items():
        value = _clean(raw.get(key))
        if value is not None:
            if value in accepted:
                normalized[key] = value
            else:
                logger.debug(f"Dropping unrecognised value {value!r} for {key}")
            continue

        for legacy_key, value_map in _LEGACY_BY_CANONICAL.get(key, []):
            legacy_value = _clean(raw.get(legacy_key))
            if legacy_value is None:
                continue
            translated = value_map.get(legacy_value)
            if translated is not None and translated in accepted:
                normalized[key] = translated
            else:
                logger.debug(f"No translation for legacy {legacy_key}={legacy_value!r}")
            break

    return normalized
