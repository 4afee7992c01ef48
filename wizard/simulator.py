# wizard/simulator.py
"""Offline stand-in for the "executor" agent.

Nothing here touches the network: the narrative only describes what a real
executor would search for and book.
"""
from __future__ import annotations

from wizard.domain import GOAL_PATH_SEPARATOR, LOCALITY_CODE_LENGTH

# Leading digit of the postal code -> coarse region label
REGION_BY_PREFIX = {
    "1": "東京都心エリア",
    "5": "大阪・関西エリア",
}
DEFAULT_REGION = "全国エリア"

UNKNOWN_GOAL = "（目標未設定）"
UNKNOWN_CODE = "（郵便番号不明）"

NARRATIVE_TEMPLATE = """【実行エージェント（シミュレーション）】
目標: {goal_path}
対象地域: {region}（〒{code}）

1. {region}で「{target}」に対応できるお店・サービスを検索しました。
2. 評価と空き状況をもとに候補を3件に絞り込みました。
3. 最も条件に合う候補で「{target}」の予約・手配を仮押さえしました。

※これはシミュレーションです。実際の予約や注文は行われていません。"""


def region_for(locality_code: str) -> str:
    code = (locality_code or "").strip()
    if not code:
        return DEFAULT_REGION
    return REGION_BY_PREFIX.get(code[0], DEFAULT_REGION)


def _last_segment(goal_path: str) -> str:
    path = goal_path or ""
    parts = path.split(GOAL_PATH_SEPARATOR)
    if len(parts) == 1:
        # Hand-typed paths may omit the spaces around ">".
        parts = path.split(GOAL_PATH_SEPARATOR.strip())
    parts = [p.strip() for p in parts]
    parts = [p for p in parts if p]
    return parts[-1] if parts else UNKNOWN_GOAL


def simulate(goal_path: str, locality_code: str) -> str:
    """Deterministic narrative for a finalized goal; degrades instead of failing."""
    code = (locality_code or "").strip()
    well_formed_code = len(code) == LOCALITY_CODE_LENGTH and code.isascii() and code.isdigit()

    return NARRATIVE_TEMPLATE.format(
        goal_path=(goal_path or "").strip() or UNKNOWN_GOAL,
        region=region_for(code),
        code=f"{code[:3]}-{code[3:]}" if well_formed_code else UNKNOWN_CODE,
        target=_last_segment(goal_path),
    )
