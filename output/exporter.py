from __future__ import annotations
from typing import Dict, Iterable, List, Tuple

from core.aggregator import ENERGY_LABEL_KEYS, EnergyDomain, NodeEnergy

ENERGY_COLUMN_PREFIX = "curr_energy_in_"

class NodeEnergyExporter:
    """
    Turns a populated NodeEnergy into the positional row consumed by the
    metrics exporter.

    Node name and CPU architecture are resolved once at startup and passed in;
    they never change for the lifetime of the exporter.
    """

    def __init__(
        self,
        node_name: str,
        cpu_arch: str,
        usage_metric_names: Iterable[str] = (),
        energy_keys: Iterable[EnergyDomain | str] = ENERGY_LABEL_KEYS,
    ) -> None:
        self._labels: Tuple[str, str] = (node_name, cpu_arch)
        self._usage_metric_names: Tuple[str, ...] = tuple(usage_metric_names)
        self._energy_keys: Tuple[EnergyDomain, ...] = tuple(EnergyDomain.parse(k) for k in energy_keys)

    @property
    def node_name(self) -> str:
        return self._labels[0]

    @property
    def cpu_arch(self) -> str:
        return self._labels[1]

    def header(self) -> List[str]:
        """Column names matching the positions of row()."""
        cols = ["node_name", "cpu_architecture"]
        cols.extend(self._usage_metric_names)
        cols.extend(ENERGY_COLUMN_PREFIX + k.value for k in self._energy_keys)
        return cols

    def row(self, node_energy: NodeEnergy) -> List[str]:
        return node_energy.export_row(self._labels, self._usage_metric_names, self._energy_keys)

    def record(self, node_energy: NodeEnergy) -> Dict[str, str]:
        return dict(zip(self.header(), self.row(node_energy)))
