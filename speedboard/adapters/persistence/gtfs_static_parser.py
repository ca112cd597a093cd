from __future__ import annotations

import csv
import io
import zipfile
from collections import Counter
from collections.abc import Iterable, Mapping
from typing import IO

from speedboard.domain.exceptions.feed import StaticDataError
from speedboard.domain.models.geo import GeoPoint
from speedboard.domain.models.gtfs import GtfsRoute, GtfsStaticData

Row = Mapping[str, str | None]


def _clean(row: Row, key: str) -> str | None:
    return (row.get(key) or "").strip() or None


def parse_routes(rows: Iterable[Row]) -> dict[str, GtfsRoute]:
    routes_by_id: dict[str, GtfsRoute] = {}
    for row in rows:
        route_id = _clean(row, "route_id")
        if not route_id:
            continue
        routes_by_id[route_id] = GtfsRoute(
            route_id=route_id,
            short_name=_clean(row, "route_short_name"),
            long_name=_clean(row, "route_long_name"),
            color=_clean(row, "route_color"),
            text_color=_clean(row, "route_text_color"),
        )
    return routes_by_id


def parse_shapes(rows: Iterable[Row]) -> dict[str, tuple[GeoPoint, ...]]:
    tmp: dict[str, list[tuple[int, GeoPoint]]] = {}
    for row in rows:
        shape_id = _clean(row, "shape_id")
        if not shape_id:
            continue
        try:
            seq = int(row.get("shape_pt_sequence") or 0)
            point = GeoPoint(
                lat=float(row["shape_pt_lat"] or ""),
                lon=float(row["shape_pt_lon"] or ""),
            )
        except (TypeError, ValueError, KeyError):
            continue
        tmp.setdefault(shape_id, []).append((seq, point))

    shapes_by_id: dict[str, tuple[GeoPoint, ...]] = {}
    for shape_id, pts in tmp.items():
        pts.sort(key=lambda x: x[0])
        shapes_by_id[shape_id] = tuple(p for _, p in pts)
    return shapes_by_id


def pick_route_shapes(
    trip_rows: Iterable[Row], shapes_by_id: Mapping[str, tuple[GeoPoint, ...]]
) -> dict[str, tuple[GeoPoint, ...]]:
    """Choose, per route, the drawable shape used by the most trips."""

    counts: dict[str, Counter[str]] = {}
    for row in trip_rows:
        route_id = _clean(row, "route_id")
        shape_id = _clean(row, "shape_id")
        if not route_id or not shape_id:
            continue
        if len(shapes_by_id.get(shape_id, ())) < 2:
            continue
        counts.setdefault(route_id, Counter())[shape_id] += 1

    return {
        route_id: shapes_by_id[shape_counts.most_common(1)[0][0]]
        for route_id, shape_counts in counts.items()
    }


def build_static_data(
    route_rows: Iterable[Row],
    trip_rows: Iterable[Row],
    shape_rows: Iterable[Row],
) -> GtfsStaticData:
    shapes_by_id = parse_shapes(shape_rows)
    return GtfsStaticData(
        routes_by_id=parse_routes(route_rows),
        shapes_by_route_id=pick_route_shapes(trip_rows, shapes_by_id),
    )


def read_csv(fp: IO[str]) -> list[dict[str, str | None]]:
    return list(csv.DictReader(fp))


def parse_gtfs_zip(content: bytes) -> GtfsStaticData:
    """Parse routes.txt, trips.txt and shapes.txt from a GTFS archive.

    routes.txt is required; trips.txt and shapes.txt are optional.
    """

    try:
        archive = zipfile.ZipFile(io.BytesIO(content))
    except zipfile.BadZipFile as exc:
        raise StaticDataError(f"Invalid GTFS archive: {exc}") from exc

    with archive:
        names = set(archive.namelist())
        if "routes.txt" not in names:
            raise StaticDataError("routes.txt not found in GTFS archive")

        def rows(name: str) -> list[dict[str, str | None]]:
            if name not in names:
                return []
            with archive.open(name) as raw:
                return read_csv(io.TextIOWrapper(raw, encoding="utf-8-sig", newline=""))

        try:
            routes = rows("routes.txt")
            trips = rows("trips.txt")
            shapes = rows("shapes.txt")
        except (UnicodeDecodeError, csv.Error, zipfile.BadZipFile) as exc:
            raise StaticDataError(f"Unreadable GTFS archive member: {exc}") from exc

        return build_static_data(routes, trips, shapes)
