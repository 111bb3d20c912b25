"""SnapshotWriter: Writes a price snapshot as JSON and CSV files."""

from __future__ import annotations

import csv
import io
import json
import logging
import os
from pathlib import Path

from .PricePublisher import PriceSnapshot

logger = logging.getLogger(__name__)

JSON_FILENAME = "prices.json"
CSV_FILENAME = "prices.csv"


class SnapshotWriter:
    """Persists snapshots to an output directory.

    :ivar output_dir: Directory receiving the output files.
    """

    def __init__(self, output_dir: Path | str) -> None:
        self.output_dir = Path(output_dir)

    @staticmethod
    def render_json(snapshot: PriceSnapshot) -> str:
        """Render the snapshot as pretty-printed JSON."""
        return json.dumps(snapshot.to_json(), indent=2) + "\n"

    @staticmethod
    def render_csv(snapshot: PriceSnapshot) -> str:
        """Render the snapshot as a ``market,price`` table."""
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(["market", "price"])
        writer.writerows(snapshot.to_rows())
        return buffer.getvalue()

    def write(self, snapshot: PriceSnapshot) -> list[Path]:
        """Write prices.json and prices.csv.

        :param snapshot: Complete snapshot to persist.
        :returns: Paths of the written files.
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        written = [
            self._write_atomic(JSON_FILENAME, self.render_json(snapshot)),
            self._write_atomic(CSV_FILENAME, self.render_csv(snapshot)),
        ]
        logger.info(f"Written {', '.join(str(p) for p in written)}")
        return written

    def _write_atomic(self, filename: str, content: str) -> Path:
        # Replace via rename so readers never see a truncated file
        path = self.output_dir / filename
        tmp_path = path.with_name(f".{filename}.tmp")
        tmp_path.write_text(content, encoding="utf-8")
        os.replace(tmp_path, path)
        return path
