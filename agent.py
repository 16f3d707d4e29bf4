from __future__ import annotations
import argparse
import logging
import os
from typing import Any, Dict, List, Optional
import yaml  # from pyyaml

from core.util import now_ts, hostname, cpu_arch
from core.aggregator import ENERGY_LABEL_KEYS, NodeEnergy
from collectors.readings import ReadingsFile
from output.exporter import NodeEnergyExporter
from output.json_sink import JsonSink

SCHEMA_VERSION = "1.0"
RECORD_TYPE = "node_energy"

logger = logging.getLogger("agent")

DEFAULT_USAGE_METRICS = ["cpu_time", "cpu_cycles", "cpu_instr", "cache_miss", "memory_bytes"]

def load_config(path: str = "config.yml") -> Dict[str, Any]:
    """
    Load configuration from YAML file and override with environment variables.

    Environment variables override YAML values:
    - NODEENERGY_INPUT_PATH: Readings NDJSON produced by the pollers
    - NODEENERGY_OUTPUT_PATH: Output file path (e.g., /var/log/nodeenergy/energy.ndjson)
    - NODEENERGY_NODE_NAME: Node name label (default: hostname)
    - NODEENERGY_LOG_LEVEL: Logging level (e.g., DEBUG)

    Args:
        path: Path to the YAML configuration file

    Returns:
        Dictionary containing merged configuration from file and environment variables
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
    except FileNotFoundError:
        print(f"Warning: Config file {path} not found, using defaults")
        config = {}

    if "NODEENERGY_INPUT_PATH" in os.environ:
        if "input" not in config:
            config["input"] = {}
        config["input"]["path"] = os.environ["NODEENERGY_INPUT_PATH"]

    if "NODEENERGY_OUTPUT_PATH" in os.environ:
        if "output" not in config:
            config["output"] = {}
        config["output"]["path"] = os.environ["NODEENERGY_OUTPUT_PATH"]

    if "NODEENERGY_NODE_NAME" in os.environ:
        config["node_name"] = os.environ["NODEENERGY_NODE_NAME"]

    if "NODEENERGY_LOG_LEVEL" in os.environ:
        config["log_level"] = os.environ["NODEENERGY_LOG_LEVEL"]

    return config

def build_exporter(cfg: Dict[str, Any]) -> NodeEnergyExporter:
    """Resolve the static node labels once and build the row exporter."""
    return NodeEnergyExporter(
        node_name=cfg.get("node_name") or hostname(),
        cpu_arch=cfg.get("cpu_arch") or cpu_arch(),
        usage_metric_names=cfg.get("usage_metrics") or DEFAULT_USAGE_METRICS,
        energy_keys=cfg.get("energy_keys") or ENERGY_LABEL_KEYS,
    )

def build_record(node: NodeEnergy, exporter: NodeEnergyExporter, ts: float, seq: int) -> Dict[str, Any]:
    packages = {}
    for pkg_id in node.package_ids():
        core, dram, uncore = node.per_package_breakdown(pkg_id)
        packages[str(pkg_id)] = {"core": core, "dram": dram, "uncore": uncore}
    return {
        "host": exporter.node_name,
        "ts_unix": ts,
        "seq": seq,
        "columns": exporter.header(),
        "row": exporter.row(node),
        "energy_mj": node.summary(),
        "packages": packages,
        "usage": node.usage,
    }

def run(cfg: Dict[str, Any]) -> int:
    """
    Replay every reading batch of the input file through one NodeEnergy and
    write a node_energy record per interval.

    Returns:
        Number of records written
    """
    in_path = cfg.get("input", {}).get("path", "./readings.ndjson")
    out_path = cfg.get("output", {}).get("path", "./node_energy.ndjson")
    exporter = build_exporter(cfg)
    sink = JsonSink(out_path, RECORD_TYPE, SCHEMA_VERSION)
    readings = ReadingsFile(in_path)
    node = NodeEnergy()

    seq = 0
    for batch in readings.read():
        node.reset()
        node.set_values(batch.sensor, batch.packages, batch.gpu_delta, batch.usage)
        seq += 1
        ts = batch.ts_unix if batch.ts_unix is not None else now_ts()
        sink.write(build_record(node, exporter, ts, seq))

    logger.info("wrote %d records to %s (%d input lines skipped)", seq, out_path, readings.skipped)
    return seq

def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Node energy reconciliation agent")
    ap.add_argument("--config", default="config.yml", help="YAML configuration file")
    args = ap.parse_args(argv)

    cfg = load_config(args.config)
    logging.basicConfig(
        level=getattr(logging, str(cfg.get("log_level", "INFO")).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    try:
        run(cfg)
    except FileNotFoundError as e:
        logger.error("input not found: %s", e.filename)
        return 2
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
