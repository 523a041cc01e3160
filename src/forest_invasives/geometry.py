"""Bounding boxes and the polygon membership filter.

An Esri envelope query returns everything touching the *bounding box* of an
area, which over-selects for any non-rectangular boundary. ``filter_features``
narrows such a result down to the features that really intersect the
boundary polygon(s).

Both inputs must already be in the same coordinate reference system. Esri
``f=geojson`` output is always WGS84 lon/lat, so results from two GeoJSON
queries are consistent by construction.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import shapely
from shapely.errors import ShapelyError
from shapely.geometry import box, shape
from shapely.geometry.base import BaseGeometry
from shapely.strtree import STRtree

from forest_invasives.errors import CRSMismatchError, EmptyGeometryError, EmptyReferenceError
from forest_invasives.schemas import Feature, FeatureCollection

if TYPE_CHECKING:
    from shapely.geometry import Polygon

WGS84 = 4326

#: Anything accepted where a single geometry is expected.
GeometryLike = Feature | dict[str, Any] | BaseGeometry | None

#: One geometry or a collection of them.
GeometryInput = FeatureCollection | GeometryLike | Iterable[GeometryLike]


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned envelope plus the CRS its numbers are expressed in."""

    xmin: float
    ymin: float
    xmax: float
    ymax: float
    wkid: int = WGS84

    def __post_init__(self) -> None:
        values = (self.xmin, self.ymin, self.xmax, self.ymax)
        if not all(math.isfinite(v) for v in values):
            msg = f"Bounding box values must be finite: {values}"
            raise ValueError(msg)
        if self.xmin > self.xmax or self.ymin > self.ymax:
            msg = f"Bounding box minimums exceed maximums: {values}"
            raise ValueError(msg)

    @classmethod
    def from_bounds(cls, bounds: Sequence[float], wkid: int = WGS84) -> BoundingBox:
        """Build from a ``(xmin, ymin, xmax, ymax)`` sequence (shapely order)."""
        xmin, ymin, xmax, ymax = (float(v) for v in bounds)
        return cls(xmin, ymin, xmax, ymax, wkid=wkid)

    def as_param(self) -> str:
        """Esri envelope shorthand: ``xmin,ymin,xmax,ymax``."""
        return f"{self.xmin!r},{self.ymin!r},{self.xmax!r},{self.ymax!r}"

    def to_polygon(self) -> Polygon:
        return box(self.xmin, self.ymin, self.xmax, self.ymax)

    @property
    def center(self) -> tuple[float, float]:
        """(x, y) midpoint."""
        return ((self.xmin + self.xmax) / 2, (self.ymin + self.ymax) / 2)


# =============================================================================
# Geometry conversion
# =============================================================================


def to_shape(obj: GeometryLike) -> BaseGeometry | None:
    """
    Convert a feature or GeoJSON geometry to a shapely geometry.

    Returns None for missing, malformed or empty geometry. Invalid polygons
    (e.g. self-intersecting rings) are repaired with ``make_valid``; ones that
    only repair to lines or points (zero-area rings) count as degenerate.
    """
    if obj is None:
        return None
    if isinstance(obj, BaseGeometry):
        geom = obj
    else:
        mapping = obj.geometry if isinstance(obj, Feature) else obj
        if not mapping:
            return None
        try:
            geom = shape(mapping)
        except (ShapelyError, ValueError, TypeError, KeyError, IndexError, AttributeError):
            return None

    if geom.is_empty:
        return None
    if not geom.is_valid:
        repaired = shapely.make_valid(geom)
        # A ring that collapses to lines or points is degenerate, not repaired
        if repaired.is_empty or shapely.get_dimensions(repaired) < shapely.get_dimensions(geom):
            return None
        geom = repaired
    return geom


def _shapes(items: GeometryInput) -> list[BaseGeometry]:
    if isinstance(items, FeatureCollection):
        items = items.features
    elif isinstance(items, BaseGeometry | Feature) or (isinstance(items, Mapping) and "type" in items):
        items = [items]
    out: list[BaseGeometry] = []
    for item in items:
        geom = to_shape(item)
        if geom is not None:
            out.append(geom)
    return out


def envelope(collection: GeometryInput, wkid: int = WGS84) -> BoundingBox:
    """Combined bounding box of every usable geometry in ``collection``.

    ``wkid`` labels the CRS of the coordinates; it does not reproject.
    """
    geoms = _shapes(collection)
    if not geoms:
        msg = "No usable geometry to take an envelope from"
        raise EmptyGeometryError(msg)
    return BoundingBox.from_bounds(shapely.total_bounds(geoms), wkid=wkid)


# =============================================================================
# Filtering
# =============================================================================


def _check_crs(reference: Any, candidates: FeatureCollection) -> None:
    ref_crs = reference.crs if isinstance(reference, FeatureCollection) else None
    if ref_crs and candidates.crs and ref_crs != candidates.crs:
        raise CRSMismatchError(ref_crs, candidates.crs)


def inclusion_mask(
    reference: GeometryInput,
    candidates: FeatureCollection,
) -> list[bool]:
    """
    One flag per candidate: True iff it intersects any reference geometry.

    Raises:
        EmptyReferenceError: ``reference`` holds no usable geometry.
        CRSMismatchError: Both inputs declare a CRS and they differ.
    """
    ref_geoms = _shapes(reference)
    if not ref_geoms:
        msg = "Reference geometry set is empty; nothing to filter against"
        raise EmptyReferenceError(msg)
    _check_crs(reference, candidates)

    tree = STRtree(ref_geoms)
    mask: list[bool] = []
    for feature in candidates.features:
        geom = to_shape(feature)
        if geom is None:
            mask.append(False)
            continue
        hits = tree.query(geom, predicate="intersects")
        mask.append(len(hits) > 0)
    return mask


def filter_features(
    reference: GeometryInput,
    candidates: FeatureCollection,
) -> FeatureCollection:
    """
    Keep the candidates that intersect the reference geometry.

    Features keep their geometry, attributes and relative order. Features with
    empty or unreadable geometry are dropped.
    """
    mask = inclusion_mask(reference, candidates)
    kept = [f for f, keep in zip(candidates.features, mask, strict=True) if keep]
    return candidates.with_features(kept)


def split_features(
    reference: GeometryInput,
    candidates: FeatureCollection,
) -> tuple[FeatureCollection, FeatureCollection]:
    """``(inside, outside)`` partition of ``candidates`` in one pass."""
    mask = inclusion_mask(reference, candidates)
    inside = [f for f, keep in zip(candidates.features, mask, strict=True) if keep]
    outside = [f for f, keep in zip(candidates.features, mask, strict=True) if not keep]
    return candidates.with_features(inside), candidates.with_features(outside)
