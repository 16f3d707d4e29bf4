"""
report.py
Reads NDJSON output of the agent (record_type=="node_energy") and prints the
energy per domain over all intervals, absolute (J) and as share of the node total.

Usage:
    python3 -m output.report /path/to/node_energy.ndjson
"""

from __future__ import annotations
import sys
import json
from collections import defaultdict
from typing import Any, Dict, Iterable, Iterator

RECORD_TYPE = "node_energy"

# pkg, gpu and other add up to the node total; core/dram/uncore split pkg
DOMAIN_ORDER = ["pkg", "core", "dram", "uncore", "gpu", "other"]

def fmt_pct(n: float) -> str:
    return f"{n:5.1f}%"

def iter_records(path: str) -> Iterator[Dict[str, Any]]:
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                rec = json.loads(line)
            except json.JSONDecodeError:
                continue
            if isinstance(rec, dict) and rec.get("record_type") == RECORD_TYPE:
                yield rec

def summarize(records: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Sum per-domain energy (mJ) over node_energy records.

    Returns:
        {"intervals": n, "node_mj": total, "domains_mj": {domain: total}}
    """
    intervals = 0
    node_mj = 0
    domains: Dict[str, int] = defaultdict(int)
    for rec in records:
        energy = rec.get("energy_mj")
        if not isinstance(energy, dict):
            continue
        intervals += 1
        for k in DOMAIN_ORDER:
            v = energy.get(k, 0)
            if isinstance(v, (int, float)):
                domains[k] += int(v)
        v = energy.get("node", 0)
        if isinstance(v, (int, float)):
            node_mj += int(v)
    return {"intervals": intervals, "node_mj": node_mj, "domains_mj": dict(domains)}

def main(path: str) -> None:
    summary = summarize(iter_records(path))
    node_mj = summary["node_mj"]
    if node_mj == 0:
        print("No node energy > 0 found.")
        return

    print(f"=== Energy by domain ({summary['intervals']} intervals) ===")
    for k in DOMAIN_ORDER:
        val = summary["domains_mj"].get(k, 0)
        print(f"{k:10s} {val / 1000.0:14.3f} J  ({fmt_pct(val / node_mj * 100)})")
    print(f"{'node':10s} {node_mj / 1000.0:14.3f} J")

if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python3 -m output.report /path/to/node_energy.ndjson")
        sys.exit(1)
    main(sys.argv[1])
