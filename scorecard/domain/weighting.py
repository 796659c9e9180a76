"""Offline weighting pass: derive shWeight / goalWeight from KPI metadata."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, FrozenSet, List, Sequence, Tuple

from scorecard.domain.models import Kpi, StrategicTarget
from scorecard.domain.policies import normalize_weights

IMPORTANCE_KEYWORDS: Tuple[FrozenSet[str], ...] = (
    frozenset({"eğitim", "sertifika", "atölye", "mentorluk", "staj"}),
    frozenset({"verim", "oee", "iyileştirme", "standart"}),
    frozenset({"dijital", "erp", "crm", "lms", "otomasyon", "platform", "simülasyon"}),
    frozenset({"yeşil", "enerji", "karbon", "çevre", "sürdürülebil"}),
    frozenset({"risk", "güvenlik", "direnç", "kriz", "süreklilik"}),
)
BONUS_THEMES: Tuple[str, ...] = ("DIGITAL", "GREEN", "RESILIENCE")
PRIORITY_TARGET_PREFIX = "SH1."


@dataclass(frozen=True)
class WeightingResult:
    kpis: List[Kpi]
    targets: List[StrategicTarget]
    kpi_raw_scores: Dict[str, float]
    target_raw_scores: Dict[str, float]


def kpi_raw_score(kpi: Kpi, target_code: str) -> float:
    text = kpi.description.casefold()
    keyword_score = sum(1.0 for group in IMPORTANCE_KEYWORDS if any(word in text for word in group))
    theme_score = 1.0 if len(kpi.themes) >= 2 else 0.5
    target_hint = 0.6 if target_code.startswith(PRIORITY_TARGET_PREFIX) else 0.5
    return keyword_score + theme_score + target_hint


def target_raw_score(kpis: Sequence[Kpi]) -> float:
    themes = {theme for kpi in kpis for theme in kpi.themes}
    base = 1.0 + (0.5 if len(kpis) >= 2 else 0.0)
    return base + sum(0.5 for theme in BONUS_THEMES if theme in themes)


def compute_weights(targets: Sequence[StrategicTarget], kpis: Sequence[Kpi]) -> WeightingResult:
    """Return copies of targets and KPIs with normalized weights filled in."""
    target_code = {target.id: target.code for target in targets}
    kpis_by_target: Dict[str, List[Kpi]] = {}
    for kpi in kpis:
        kpis_by_target.setdefault(kpi.strategic_target_id, []).append(kpi)

    kpi_raw: Dict[str, float] = {}
    weighted_kpis: Dict[str, Kpi] = {}
    for target_id, members in kpis_by_target.items():
        raw = [kpi_raw_score(kpi, target_code.get(target_id, "")) for kpi in members]
        for kpi, score, weight in zip(members, raw, normalize_weights(raw)):
            kpi_raw[kpi.id] = score
            weighted_kpis[kpi.id] = replace(kpi, sh_weight=weight)

    targets_by_goal: Dict[str, List[StrategicTarget]] = {}
    for target in targets:
        targets_by_goal.setdefault(target.strategic_goal_id, []).append(target)

    target_raw: Dict[str, float] = {}
    weighted_targets: Dict[str, StrategicTarget] = {}
    for members in targets_by_goal.values():
        raw = [target_raw_score(kpis_by_target.get(target.id, [])) for target in members]
        for target, score, weight in zip(members, raw, normalize_weights(raw)):
            target_raw[target.id] = score
            weighted_targets[target.id] = replace(target, goal_weight=weight)

    return WeightingResult(
        kpis=[weighted_kpis.get(kpi.id, kpi) for kpi in kpis],
        targets=[weighted_targets.get(target.id, target) for target in targets],
        kpi_raw_scores=kpi_raw,
        target_raw_scores=target_raw,
    )
