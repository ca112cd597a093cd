from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from speedboard.adapters.persistence.gtfs_static_parser import (
    build_static_data,
    read_csv,
)
from speedboard.app.ports.output import IGtfsRepository
from speedboard.domain.models.gtfs import GtfsStaticData


@dataclass(slots=True)
class LocalGtfsRepository(IGtfsRepository):
    """Loads static GTFS from a directory of .txt files.

    Env vars:
      - GTFS_PATH: path to directory containing routes.txt (trips.txt and
        shapes.txt optional)

    The directory is read once and kept in memory.
    """

    base_path: str | Path | None = None

    _data: GtfsStaticData | None = field(default=None, init=False, repr=False)

    def _base(self) -> Path:
        value = self.base_path or os.getenv("GTFS_PATH") or "data/gtfs"
        return Path(value)

    def _rows(self, name: str) -> list[dict[str, str | None]]:
        path = self._base() / name
        if not path.exists():
            return []
        with path.open("r", encoding="utf-8-sig", newline="") as fp:
            return read_csv(fp)

    async def load_static_data(self) -> GtfsStaticData:
        if self._data is None:
            routes_path = self._base() / "routes.txt"
            if not routes_path.exists():
                raise FileNotFoundError(f"routes.txt not found in {self._base()}")
            self._data = build_static_data(
                self._rows("routes.txt"),
                self._rows("trips.txt"),
                self._rows("shapes.txt"),
            )
        return self._data
