from __future__ import annotations
import json
from typing import Any, Dict
from core.util import ensure_parent

class JsonSink:
    """
    NDJSON output sink for one record type.

    Every line carries the schema_version / record_type envelope of the sink,
    so readers can filter records without knowing the writer. Creates parent
    directories if they don't exist.
    """

    def __init__(self, path: str, record_type: str, schema_version: str = "1.0") -> None:
        """
        Initialize JSON sink with output file path and record envelope.

        Args:
            path: File path for NDJSON output
            record_type: Type stamped on every record (e.g. 'node_energy')
            schema_version: Version of the record layout
        """
        self.path = path
        self.record_type = record_type
        self.schema_version = schema_version
        ensure_parent(self.path)

    def write(self, obj: Dict[str, Any]) -> None:
        """
        Append one record as a JSON line.

        Args:
            obj: Record payload; may repeat the sink's record_type but not another one

        Raises:
            ValueError: if obj carries a different record_type
        """
        rtype = obj.get("record_type", self.record_type)
        if rtype != self.record_type:
            raise ValueError(f"sink for {self.record_type!r} records got {rtype!r}")
        record = {"schema_version": self.schema_version, "record_type": self.record_type}
        record.update(obj)
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(json.dumps(record, sort_keys=True) + "\n")
