"""
기록된 세션 로드

세션 파일은 JSON Lines 형식. 한 줄이 호스트 이벤트 1건:

```json
{"t": 0.0, "event": "VenueOpened", "venue": "VENDOR", "payload": {"source": "Innkeeper"},
 "state": {"balance": 1000, "inventory": {"BAGS": [{"item_id": 2589, "quantity": 1}]}}}
```

- t: 세션 시작 기준 상대 시각 (초, 감소하면 안 됨)
- state: 이벤트 전달 전에 호스트에 반영할 상태 (선택)

아이템 카탈로그는 YAML:

```yaml
items:
  2589: {name: Linen Cloth, vendor_unit_value: 13}
```
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from adapters.models import InventorySlot, ItemMetadata
from core.domain.events import HostEvent
from core.types import InventoryScope

logger = logging.getLogger(__name__)


class ReplaySessionError(ValueError):
    """세션/카탈로그 파일 형식 오류"""

    pass


@dataclass(frozen=True)
class HostState:
    """이벤트 전달 전 호스트에 반영할 상태

    Attributes:
        balance: 소지금 (None이면 변경 없음)
        inventory: 범위별 슬롯 (포함된 범위만 교체)
    """

    balance: int | None = None
    inventory: dict[InventoryScope, tuple[InventorySlot, ...]] | None = None


@dataclass(frozen=True)
class ReplayStep:
    """세션 1단계"""

    t: float
    event: HostEvent
    state: HostState | None = None
    line_no: int = 0


def _parse_slots(raw: Any, line_no: int) -> tuple[InventorySlot, ...]:
    if not isinstance(raw, list):
        raise ReplaySessionError(f"{line_no}행: inventory 범위 값은 목록이어야 합니다")
    slots = []
    for entry in raw:
        try:
            slots.append(
                InventorySlot(
                    item_id=int(entry["item_id"]),
                    quantity=int(entry["quantity"]),
                    link=entry.get("link"),
                )
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ReplaySessionError(f"{line_no}행: 잘못된 슬롯 {entry!r}") from e
    return tuple(slots)


def _parse_state(raw: Any, line_no: int) -> HostState | None:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ReplaySessionError(f"{line_no}행: state는 객체여야 합니다")

    balance = raw.get("balance")
    inventory = None
    if "inventory" in raw:
        if not isinstance(raw["inventory"], dict):
            raise ReplaySessionError(f"{line_no}행: inventory는 객체여야 합니다")
        inventory = {}
        for scope, slots in raw["inventory"].items():
            try:
                key = InventoryScope(scope)
            except ValueError as e:
                raise ReplaySessionError(f"{line_no}행: 알 수 없는 인벤토리 범위 {scope!r}") from e
            inventory[key] = _parse_slots(slots, line_no)

    return HostState(
        balance=int(balance) if balance is not None else None,
        inventory=inventory,
    )


def parse_step(line: str, line_no: int = 0) -> ReplayStep:
    """세션 1줄 파싱

    Raises:
        ReplaySessionError: JSON 오류, 필수 필드 누락, 알 수 없는 이벤트/장소
    """
    try:
        data = json.loads(line)
    except json.JSONDecodeError as e:
        raise ReplaySessionError(f"{line_no}행: JSON 파싱 실패: {e}") from e

    if not isinstance(data, dict):
        raise ReplaySessionError(f"{line_no}행: 객체가 아닙니다")
    if "event" not in data:
        raise ReplaySessionError(f"{line_no}행: 'event' 필드가 없습니다")

    try:
        event = HostEvent.create(
            data["event"],
            venue=data.get("venue"),
            **(data.get("payload") or {}),
        )
    except ValueError as e:
        raise ReplaySessionError(f"{line_no}행: {e}") from e

    return ReplayStep(
        t=float(data.get("t", 0.0)),
        event=event,
        state=_parse_state(data.get("state"), line_no),
        line_no=line_no,
    )


def load_session(path: Path) -> list[ReplayStep]:
    """세션 파일 로드

    빈 줄과 '#'으로 시작하는 줄은 무시.

    Args:
        path: JSONL 파일 경로

    Returns:
        시간순 ReplayStep 목록

    Raises:
        ReplaySessionError: 형식 오류 또는 시각이 감소하는 경우
    """
    steps: list[ReplayStep] = []
    last_t = 0.0

    with open(path, encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue

            step = parse_step(stripped, line_no)
            if step.t < last_t:
                raise ReplaySessionError(
                    f"{line_no}행: 시각이 감소했습니다 ({step.t} < {last_t})"
                )
            last_t = step.t
            steps.append(step)

    logger.info(f"세션 로드: {len(steps)}건", extra={"path": str(path)})
    return steps


def load_catalog(path: Path) -> dict[int, ItemMetadata]:
    """아이템 카탈로그(YAML) 로드

    Raises:
        ReplaySessionError: 형식 오류
    """
    try:
        data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ReplaySessionError(f"카탈로그 파싱 실패: {e}") from e

    items = data.get("items") or {}
    if not isinstance(items, dict):
        raise ReplaySessionError("카탈로그의 'items'는 매핑이어야 합니다")

    catalog: dict[int, ItemMetadata] = {}
    for raw_id, info in items.items():
        info = info or {}
        try:
            item_id = int(raw_id)
            catalog[item_id] = ItemMetadata(
                item_id=item_id,
                name=str(info.get("name", f"item:{item_id}")),
                vendor_unit_value=int(info.get("vendor_unit_value", 0)),
                class_id=int(info.get("class_id", 0)),
                subclass_id=int(info.get("subclass_id", 0)),
            )
        except (TypeError, ValueError, AttributeError) as e:
            raise ReplaySessionError(f"카탈로그 항목 오류: {raw_id}") from e

    return catalog
