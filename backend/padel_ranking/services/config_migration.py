"""
Legacy ranking config -> typed format variant.

Older rankings stored one flat camelCase dict (pointsPerWin2_0, promotionCount,
scoringMode, customPoints, ...) next to optional per-format namespaces
(classicConfig, pozoConfig, ...). Namespaced values win over flat ones;
missing keys take the variant defaults.
"""
import logging
from typing import Any, Dict, Optional

from pydantic import TypeAdapter

from padel_ranking.models.formats import FORMAT_VARIANTS, TournamentFormat

logger = logging.getLogger(__name__)

# camelCase legacy key -> snake_case field
POINTS_KEYS = {
    "pointsPerWin2_0": "points_per_win_2_0",
    "pointsPerWin2_1": "points_per_win_2_1",
    "pointsDraw": "points_draw",
    "pointsPerLoss2_1": "points_per_loss_2_1",
    "pointsPerLoss2_0": "points_per_loss_2_0",
}

FIELD_KEYS = {
    "maxPlayersPerDivision": "max_players_per_division",
    "promotionCount": "promotion_count",
    "relegationCount": "relegation_count",
    "scoringMode": "scoring_mode",
    "totalPoints": "total_points",
    "customPoints": "total_points",
    "numCourts": "num_courts",
    "variant": "variant",
    "consolation": "consolation",
    "thirdPlaceMatch": "third_place_match",
    "type": "participant_type",
    "pairsPerGroup": "pairs_per_group",
    "qualifiersPerGroup": "qualifiers_per_group",
    "consolationQualifiersPerGroup": "consolation_qualifiers_per_group",
    "courts": "courts",
}

VARIANT_ALIASES = {"fixed-pairs": "pairs"}

_format_adapter = TypeAdapter(TournamentFormat)

VARIANTS_BY_KIND = {cls.model_fields["kind"].default: cls for cls in FORMAT_VARIANTS}


def _merged_source(format_kind: str, legacy: Dict[str, Any]) -> Dict[str, Any]:
    source = {k: v for k, v in legacy.items() if not isinstance(v, dict)}
    namespaced = legacy.get(f"{format_kind}Config")
    if isinstance(namespaced, dict):
        source.update(namespaced)
    return source


def migrate_legacy_config(format_kind: Optional[str], legacy: Optional[Dict[str, Any]]):
    """
    Build the TournamentFormat variant for `format_kind` from a legacy config.

    An unknown or missing kind falls back to "classic", the default of old
    rankings. Keys that do not apply to the variant are ignored.
    """
    kind = format_kind or "classic"
    source = _merged_source(kind, legacy or {})

    data: Dict[str, Any] = {"kind": kind}
    points = {POINTS_KEYS[k]: v for k, v in source.items() if k in POINTS_KEYS and v is not None}
    if points:
        data["points"] = points
    for legacy_key, field_name in FIELD_KEYS.items():
        value = source.get(legacy_key)
        if value is None or field_name in data:
            continue
        data[field_name] = value

    if data.get("variant") in VARIANT_ALIASES:
        data["variant"] = VARIANT_ALIASES[data["variant"]]

    # Only keep fields the target variant declares
    variant_cls = VARIANTS_BY_KIND.get(kind)
    if variant_cls is None:
        logger.warning("Unknown legacy format '%s'; migrating as classic", kind)
        variant_cls = VARIANTS_BY_KIND["classic"]
        data["kind"] = "classic"
    data = {k: v for k, v in data.items() if k in variant_cls.model_fields}

    return _format_adapter.validate_python(data)
