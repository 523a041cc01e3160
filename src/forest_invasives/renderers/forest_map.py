"""Leaflet map of a forest boundary and the invasive species inside it.

Builds a standalone HTML page: boundary polygons as an outline layer,
retained observations as circle markers and (optionally) the observations the
bounding-box query returned from outside the boundary as a separate, toggled
layer.
"""

from __future__ import annotations

from typing import Any

from markupsafe import escape

from forest_invasives.datasources.usfs.invasives import species_label
from forest_invasives.errors import EmptyGeometryError
from forest_invasives.geometry import BoundingBox, envelope
from forest_invasives.renderers import render_template
from forest_invasives.schemas import Feature, FeatureCollection

#: Popup rows shown per feature.
MAX_POPUP_ROWS = 8

#: Continental US, used when there is nothing to zoom to.
FALLBACK_BOUNDS = BoundingBox(-125.0, 24.0, -66.0, 50.0)


def feature_popup_rows(feature: Feature, limit: int = MAX_POPUP_ROWS) -> list[tuple[str, str]]:
    """First ``limit`` non-empty attributes as (name, value) pairs."""
    rows: list[tuple[str, str]] = []
    for key, value in feature.properties.items():
        if value is None or value == "":
            continue
        rows.append((key, str(value)))
        if len(rows) >= limit:
            break
    return rows


def _popup_html(feature: Feature, title: str) -> str:
    rows = "".join(
        f"<tr><th>{escape(k)}</th><td>{escape(v)}</td></tr>" for k, v in feature_popup_rows(feature)
    )
    return f"<strong>{escape(title)}</strong><table>{rows}</table>"


def _with_popups(collection: FeatureCollection, *, label_species: bool) -> dict[str, Any]:
    """GeoJSON dict with a ``_popup`` HTML string on every feature."""
    geojson = collection.to_geojson()
    for feature, out in zip(collection.features, geojson["features"], strict=True):
        title = species_label(feature) if label_species else "Forest boundary"
        out["properties"]["_popup"] = _popup_html(feature, title)
    return geojson


def _fit_bounds(*collections: FeatureCollection) -> BoundingBox:
    for collection in collections:
        try:
            return envelope(collection)
        except EmptyGeometryError:
            continue
    return FALLBACK_BOUNDS


def build_forest_map_html(
    boundary: FeatureCollection,
    invasives: FeatureCollection,
    *,
    title: str,
    excluded: FeatureCollection | None = None,
) -> str:
    """
    Render a full Leaflet page.

    Args:
        boundary: Forest boundary polygon(s).
        invasives: Observations to show (normally already filtered).
        title: Page heading, e.g. the forest name.
        excluded: Observations outside the boundary, shown in grey.

    Returns:
        Complete HTML document as a string.
    """
    bounds = _fit_bounds(boundary, invasives)
    return render_template(
        "forest_map.html.j2",
        title=title,
        boundary_geojson=_with_popups(boundary, label_species=False),
        invasives_geojson=_with_popups(invasives, label_species=True),
        excluded_geojson=_with_popups(excluded, label_species=True) if excluded is not None else None,
        invasive_count=len(invasives),
        excluded_count=len(excluded) if excluded is not None else 0,
        bounds=[[bounds.ymin, bounds.xmin], [bounds.ymax, bounds.xmax]],
    )
