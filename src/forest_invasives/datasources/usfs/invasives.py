"""Invasive species observation queries."""

from __future__ import annotations

from typing import TYPE_CHECKING

from forest_invasives.datasources.usfs import client
from forest_invasives.query import QueryBuilder
from forest_invasives.schemas import Feature
from forest_invasives.services.esri import fetch_feature_collection, layer_query_url

if TYPE_CHECKING:
    import requests

    from forest_invasives.geometry import BoundingBox
    from forest_invasives.schemas import FeatureCollection


def invasive_species_query(
    bbox: BoundingBox,
    *,
    where: str = "1=1",
    record_count: int = client.DEFAULT_RECORD_COUNT,
    layer_url: str = client.INVASIVE_SPECIES_LAYER,
) -> QueryBuilder:
    """Observations intersecting ``bbox`` (a superset of any polygon inside it)."""
    return (
        QueryBuilder(layer_query_url(layer_url))
        .where(where)
        .envelope(bbox)
        .out_fields("*")
        .return_geometry(True)
        .record_count(record_count)
        .output_format("geojson")
    )


def fetch_invasive_species(
    bbox: BoundingBox,
    *,
    where: str = "1=1",
    record_count: int = client.DEFAULT_RECORD_COUNT,
    layer_url: str = client.INVASIVE_SPECIES_LAYER,
    session: requests.Session | None = None,
) -> FeatureCollection:
    """
    Fetch invasive species observations inside a bounding box.

    At most ``record_count`` features are returned; there is no paging.
    """
    query = invasive_species_query(
        bbox, where=where, record_count=record_count, layer_url=layer_url
    )
    return fetch_feature_collection(query, session=session)


def species_label(feature: Feature) -> str:
    """Best available species name for display."""
    for name in client.SPECIES_NAME_FIELDS:
        value = feature.get(name)
        if value:
            return str(value)
    return "Unknown species"
