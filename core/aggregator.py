from __future__ import annotations
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

from core.counter import DeltaCounter
from core.util import finite_int

logger = logging.getLogger(__name__)


class EnergyDomain(Enum):
    """Energy domains reported per node."""
    CORE = "core"
    DRAM = "dram"
    UNCORE = "uncore"
    PKG = "pkg"
    GPU = "gpu"
    OTHER = "other"

    @classmethod
    def parse(cls, key: "EnergyDomain | str") -> "EnergyDomain":
        """
        Resolve a domain from a member or its string key.

        Raises:
            ValueError: if the key names no known domain
        """
        if isinstance(key, cls):
            return key
        if key == "package":
            return cls.PKG
        return cls(key)


# column order of the exported energy values
ENERGY_LABEL_KEYS: Tuple[EnergyDomain, ...] = (
    EnergyDomain.CORE,
    EnergyDomain.DRAM,
    EnergyDomain.UNCORE,
    EnergyDomain.PKG,
    EnergyDomain.GPU,
    EnergyDomain.OTHER,
)


@dataclass(frozen=True)
class PackageEnergy:
    """Cumulative energy readings (mJ) of one CPU package."""
    core: int = 0
    dram: int = 0
    uncore: int = 0
    pkg: int = 0


class NodeEnergy:
    """
    Per-interval energy model of a node.

    Holds one DeltaCounter per hardware domain (core, dram, uncore, pkg, sensor)
    plus the GPU delta and the residual "other" energy. The object is reused
    across intervals: call reset(), then set_values(), then read totals.

    Platforms often expose only part of the domains. A domain whose total is
    exactly zero is treated as not measured and, for core and dram, derived
    from the package total. Priority is core > dram > uncore: uncore is never
    derived, and when neither core nor dram is measured everything left in
    the package is attributed to core.
    """

    def __init__(self) -> None:
        self.core = DeltaCounter("core")
        self.dram = DeltaCounter("dram")
        self.uncore = DeltaCounter("uncore")
        self.pkg = DeltaCounter("pkg")
        self.sensor = DeltaCounter("sensor")
        self.gpu_delta = 0
        self.other_delta = 0
        self.usage: Dict[str, float] = {}

    def reset(self) -> None:
        """Clear per-interval values; counter history is kept."""
        self.usage = {}
        self.core.reset()
        self.dram.reset()
        self.uncore.reset()
        self.pkg.reset()
        self.sensor.reset()
        self.gpu_delta = 0
        self.other_delta = 0

    def set_values(
        self,
        sensor_energy: Mapping[str, int | float],
        pkg_energy: Mapping[int, PackageEnergy],
        gpu_delta: int,
        usage: Mapping[str, float],
    ) -> None:
        """
        Ingest one interval of readings.

        Args:
            sensor_energy: Cumulative reading per sensor id
            pkg_energy: Cumulative core/dram/uncore/pkg readings per package index
            gpu_delta: GPU energy of the interval (already a delta)
            usage: Resource usage metrics, stored as given
        """
        logger.debug("sensor energy %s package energy %s", sensor_energy, pkg_energy)
        for sensor_id, energy in sensor_energy.items():
            self.sensor.update(sensor_id, energy)
        for pkg_id, energy in pkg_energy.items():
            self.core.update(pkg_id, energy.core)
            self.dram.update(pkg_id, energy.dram)
            self.uncore.update(pkg_id, energy.uncore)
            self.pkg.update(pkg_id, energy.pkg)
        self.gpu_delta = max(finite_int(gpu_delta), 0)

        total_sensor = self.sensor.total()
        total_pkg = self.pkg.total()
        if total_sensor > total_pkg + self.gpu_delta:
            self.other_delta = total_sensor - total_pkg - self.gpu_delta
        else:
            self.other_delta = 0
        self.usage = dict(usage)
        logger.debug("%s", self)

    def raw_total(self, key: EnergyDomain | str) -> int:
        """Total of a domain as measured, without deriving missing values."""
        domain = EnergyDomain.parse(key)
        if domain is EnergyDomain.CORE:
            return self.core.total()
        if domain is EnergyDomain.DRAM:
            return self.dram.total()
        if domain is EnergyDomain.UNCORE:
            return self.uncore.total()
        if domain is EnergyDomain.PKG:
            return self.pkg.total()
        if domain is EnergyDomain.GPU:
            return self.gpu_delta
        return self.other_delta

    def domain_total(self, key: EnergyDomain | str) -> int:
        """
        Total of a domain for the interval, deriving core or dram when absent.

        Args:
            key: EnergyDomain member or its string key

        Returns:
            Energy in mJ, never negative
        """
        domain = EnergyDomain.parse(key)
        val = self.raw_total(domain)
        if val == 0:
            uncore = self.uncore.total()
            if domain is EnergyDomain.CORE:
                val = self.pkg.total() - self.dram.total() - uncore
            elif domain is EnergyDomain.DRAM:
                core = self.core.total()
                if core > 0:
                    val = self.pkg.total() - core - uncore
        return max(val, 0)

    def node_total(self) -> int:
        return self.pkg.total() + self.gpu_delta + self.other_delta

    def per_package_breakdown(self, package_id: int) -> Tuple[int, int, int]:
        """
        Core, dram and uncore deltas of one package with the same derivation
        priority as domain_total(), applied to that package's own deltas.
        """
        pkg = self.pkg.delta(package_id)
        core = self.core.delta(package_id)
        dram = self.dram.delta(package_id)
        uncore = self.uncore.delta(package_id)
        if core == 0:
            core = max(pkg - dram - uncore, 0)
        elif dram == 0:
            dram = max(pkg - core - uncore, 0)
        return core, dram, uncore

    def package_ids(self) -> List[int]:
        return sorted(self.pkg.entity_ids())

    def export_row(
        self,
        static_labels: Sequence[str],
        usage_metric_names: Iterable[str],
        energy_keys: Iterable[EnergyDomain | str] = ENERGY_LABEL_KEYS,
    ) -> List[str]:
        """
        Format the interval as positional metric values.

        Layout: static labels, usage values truncated to integers, then each
        energy domain in joules (mJ / 1000) with six decimals.
        """
        row = [str(label) for label in static_labels]
        for name in usage_metric_names:
            row.append(str(finite_int(self.usage.get(name, 0.0))))
        for key in energy_keys:
            joules = self.domain_total(key) / 1000.0
            row.append(f"{joules:f}")
        return row

    def summary(self) -> Dict[str, int]:
        """Derived totals of every domain plus the node total, in mJ."""
        out = {domain.value: self.domain_total(domain) for domain in ENERGY_LABEL_KEYS}
        out["sensor"] = self.sensor.total()
        out["node"] = self.node_total()
        return out

    def __str__(self) -> str:
        return (
            "node energy (mJ): \n"
            f"\tePkg: {self.pkg.total()} (eCore: {self.core.total()} eDram: {self.dram.total()} "
            f"eUncore: {self.uncore.total()}) eGPU: {self.gpu_delta} eOther: {self.other_delta} \n"
        )
