# backend/mcstats/stats.py
"""Player statistics normalization and leaderboard aggregation.

Everything here is a pure function of its inputs: no I/O, no shared state.
Raw payloads come from the ``player_stats.stats`` column and may be null,
malformed, or JSON-encoded twice.
"""
import enum
import json
import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union


class StatsError(str, enum.Enum):
    NOT_FOUND = "not_found"
    EMPTY_DATA = "empty_data"
    CORRUPTED_JSON = "corrupted_json"


@dataclass(frozen=True)
class Ok:
    value: Dict[str, Any]


@dataclass(frozen=True)
class Err:
    error: StatsError


StatsResult = Union[Ok, Err]


@dataclass(frozen=True)
class PlayerRecord:
    id: str
    raw_payload: Optional[Union[str, bytes]]


@dataclass(frozen=True)
class LeaderboardEntry:
    id: str
    value: Union[int, float]

    def as_dict(self, key: str) -> Dict[str, Any]:
        return {"id": self.id, key: self.value}


# ----- Normalizer -----
MAX_DECODE_PASSES = 2


def _reject_constant(name: str):
    # NaN / Infinity are not JSON
    raise ValueError(f"invalid JSON constant {name}")


def _finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"number out of range {text}")
    return value


def _decode(text: str) -> Tuple[bool, Any]:
    try:
        return True, json.loads(text, parse_constant=_reject_constant, parse_float=_finite_float)
    except (ValueError, RecursionError):
        return False, None


def normalize(raw_payload: Optional[Union[str, bytes]]) -> StatsResult:
    """Decode a stored stats payload into a mapping.

    A payload that decodes to a string is decoded once more; anything still
    not an object after two passes is corrupted.
    """
    if raw_payload is None or raw_payload == "" or raw_payload == b"":
        return Err(StatsError.EMPTY_DATA)
    if isinstance(raw_payload, bytes):
        try:
            raw_payload = raw_payload.decode("utf-8")
        except UnicodeDecodeError:
            return Err(StatsError.CORRUPTED_JSON)
    if not isinstance(raw_payload, str):
        return Err(StatsError.CORRUPTED_JSON)

    value: Any = raw_payload
    for _ in range(MAX_DECODE_PASSES):
        if not isinstance(value, str):
            break
        ok, value = _decode(value)
        if not ok:
            return Err(StatsError.CORRUPTED_JSON)

    if not isinstance(value, dict):
        return Err(StatsError.CORRUPTED_JSON)
    return Ok(value)


# ----- Metric registry -----
IDENTITY = "identity"
SUM_OF_CHILDREN = "sum-of-children"


@dataclass(frozen=True)
class MetricDescriptor:
    name: str
    path: Tuple[str, ...]
    aggregate: str = IDENTITY
    response_key: Optional[str] = None

    @property
    def key(self) -> str:
        return self.response_key or self.name


METRICS: Dict[str, MetricDescriptor] = {
    d.name: d
    for d in (
        MetricDescriptor("balance", ("balance",)),
        MetricDescriptor("blockbroken", ("stats", "minecraft:mined"), SUM_OF_CHILDREN),
        MetricDescriptor("playtime", ("stats", "minecraft:custom", "minecraft:play_time")),
        MetricDescriptor("kills", ("stats", "minecraft:custom", "minecraft:mob_kills")),
        MetricDescriptor("deaths", ("stats", "minecraft:custom", "minecraft:deaths"), response_key="death"),
    )
}


def get_metric(name: str) -> MetricDescriptor:
    return METRICS[name]


# ----- Metric extractor -----
def _as_number(value: Any) -> Optional[Union[int, float]]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return value
    return None


def _walk(stats: Dict[str, Any], path: Tuple[str, ...]) -> Any:
    node: Any = stats
    for segment in path:
        if not isinstance(node, dict) or segment not in node:
            return None
        node = node[segment]
    return node


def extract(result: StatsResult, descriptor: MetricDescriptor) -> Union[int, float]:
    """Read one metric out of a normalized payload; 0 whenever it can't."""
    if not isinstance(result, Ok):
        return 0
    node = _walk(result.value, descriptor.path)

    if descriptor.aggregate == SUM_OF_CHILDREN:
        if not isinstance(node, dict):
            return 0
        try:
            total = sum((_as_number(v) or 0) for v in node.values())
        except OverflowError:
            # huge int mixed with floats
            return 0
        return total if _as_number(total) is not None else 0

    value = _as_number(node)
    return 0 if value is None else value


# ----- Leaderboard builder -----
def build_leaderboard(
    records: Iterable[PlayerRecord],
    descriptor: MetricDescriptor,
    limit: Optional[int] = None,
) -> List[LeaderboardEntry]:
    entries = [
        LeaderboardEntry(id=r.id, value=extract(normalize(r.raw_payload), descriptor))
        for r in records
    ]
    entries.sort(key=lambda e: (-e.value, e.id))
    if limit is not None:
        entries = entries[:max(limit, 0)]
    return entries


# ----- Single-record lookup -----
def lookup(record: Optional[PlayerRecord]) -> StatsResult:
    if record is None:
        return Err(StatsError.NOT_FOUND)
    return normalize(record.raw_payload)
