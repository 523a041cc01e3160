"""National forest boundary queries."""

from __future__ import annotations

from typing import TYPE_CHECKING

from forest_invasives.datasources.usfs import client
from forest_invasives.query import QueryBuilder, where_contains, where_equals
from forest_invasives.services.esri import fetch_feature_collection, layer_query_url

if TYPE_CHECKING:
    import requests

    from forest_invasives.schemas import FeatureCollection


def forest_boundary_query(
    name: str,
    *,
    layer_url: str = client.FOREST_BOUNDARY_LAYER,
) -> QueryBuilder:
    """Query for one forest's boundary polygon, by exact name."""
    return (
        QueryBuilder(layer_query_url(layer_url))
        .where(where_equals(client.FOREST_NAME_FIELD, name))
        .out_fields("*")
        .return_geometry(True)
        .output_format("geojson")
    )


def fetch_forest_boundary(
    name: str,
    *,
    layer_url: str = client.FOREST_BOUNDARY_LAYER,
    session: requests.Session | None = None,
) -> FeatureCollection:
    """
    Fetch the boundary of a national forest as GeoJSON.

    Args:
        name: Exact ``FORESTNAME`` value, e.g. "Angeles National Forest".
        layer_url: Boundary layer (override for testing or another service).
        session: HTTP session (defaults to the shared one).

    Returns:
        Collection with the forest's polygon(s); empty if the name is unknown.
    """
    return fetch_feature_collection(forest_boundary_query(name, layer_url=layer_url), session=session)


def forest_search_query(
    text: str,
    *,
    layer_url: str = client.FOREST_BOUNDARY_LAYER,
) -> QueryBuilder:
    """Case-insensitive name search, attributes only."""
    return (
        QueryBuilder(layer_query_url(layer_url))
        .where(where_contains(client.FOREST_NAME_FIELD, text))
        .out_fields([client.FOREST_NAME_FIELD])
        .return_geometry(False)
        .set("orderByFields", client.FOREST_NAME_FIELD)
        .output_format("geojson")
    )


def search_forests(
    text: str,
    *,
    layer_url: str = client.FOREST_BOUNDARY_LAYER,
    session: requests.Session | None = None,
) -> list[str]:
    """Forest names containing ``text`` (sorted, de-duplicated)."""
    result = fetch_feature_collection(forest_search_query(text, layer_url=layer_url), session=session)
    names = {str(f.get(client.FOREST_NAME_FIELD)) for f in result.features if f.get(client.FOREST_NAME_FIELD)}
    return sorted(names)
