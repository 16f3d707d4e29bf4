from __future__ import annotations
import json
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional

from core.aggregator import PackageEnergy

logger = logging.getLogger(__name__)

PACKAGE_FIELDS = ("core", "dram", "uncore", "pkg")

@dataclass
class ReadingBatch:
    """
    One interval of readings as produced by the hardware pollers.

    sensor and packages hold cumulative counters (mJ), gpu_delta is already
    the energy of the interval.
    """
    sensor: Dict[str, float] = field(default_factory=dict)
    packages: Dict[int, PackageEnergy] = field(default_factory=dict)
    gpu_delta: int = 0
    usage: Dict[str, float] = field(default_factory=dict)
    ts_unix: Optional[float] = None


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        n = float(value)
    except (TypeError, ValueError):
        return None
    # NaN, Infinity and overflowing literals count as absent
    return n if math.isfinite(n) else None


def _numeric_map(raw: Any) -> Dict[str, float]:
    out: Dict[str, float] = {}
    if not isinstance(raw, dict):
        return out
    for k, v in raw.items():
        n = _number(v)
        if n is not None:
            out[str(k)] = n
    return out


def _package(raw: Any) -> PackageEnergy:
    values = dict(raw) if isinstance(raw, dict) else {}
    if "pkg" not in values and "package" in values:
        values["pkg"] = values["package"]
    parts = {}
    for name in PACKAGE_FIELDS:
        n = _number(values.get(name))
        parts[name] = int(n) if n is not None else 0
    return PackageEnergy(**parts)


def parse_batch(obj: Dict[str, Any]) -> ReadingBatch:
    """
    Build a ReadingBatch from one decoded JSON record.

    Non-numeric entries are dropped and missing package fields count as 0;
    package keys must be integer indexes, other keys are ignored.

    Args:
        obj: Decoded record with 'sensor', 'packages', 'gpu_delta', 'usage'

    Returns:
        Parsed batch
    """
    packages: Dict[int, PackageEnergy] = {}
    raw_packages = obj.get("packages", {})
    if isinstance(raw_packages, dict):
        for k, v in raw_packages.items():
            try:
                pkg_id = int(k)
            except (TypeError, ValueError):
                logger.warning("ignoring package with non-integer id %r", k)
                continue
            packages[pkg_id] = _package(v)

    gpu = _number(obj.get("gpu_delta"))
    ts = _number(obj.get("ts_unix"))
    return ReadingBatch(
        sensor=_numeric_map(obj.get("sensor")),
        packages=packages,
        gpu_delta=int(gpu) if gpu is not None else 0,
        usage=_numeric_map(obj.get("usage")),
        ts_unix=ts,
    )


class ReadingsFile:
    """
    Reads ReadingBatch records from an NDJSON file, one interval per line.

    Blank lines are ignored; lines that are not JSON objects are skipped and
    counted in `skipped`.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        self.skipped = 0

    def read(self) -> Iterator[ReadingBatch]:
        with open(self.path, "r", encoding="utf-8") as f:
            for lineno, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    rec = json.loads(line)
                except json.JSONDecodeError:
                    rec = None
                if not isinstance(rec, dict):
                    self.skipped += 1
                    logger.warning("%s:%d: skipping malformed record", self.path, lineno)
                    continue
                yield parse_batch(rec)
