"""
Esri REST map/feature service client.

Thin helpers on top of ``QueryBuilder``: send one query, check the status,
decode the GeoJSON. Layer metadata (``<layer>?f=json``) is exposed so field
names and the native spatial reference can be looked up before writing a
``where`` clause.

Service docs: https://developers.arcgis.com/rest/services-reference/enterprise/
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from forest_invasives.errors import EsriServiceError, GeoJSONDecodeError, HTTPStatusError
from forest_invasives.schemas import FeatureCollection, decode_feature_collection
from forest_invasives.services import http

if TYPE_CHECKING:
    import requests

    from forest_invasives.query import QueryBuilder


@dataclass
class LayerField:
    name: str
    type: str
    alias: str | None = None


@dataclass
class LayerInfo:
    """Subset of a layer's ``?f=json`` description."""

    name: str
    geometry_type: str | None
    max_record_count: int | None
    wkid: int | None
    fields: list[LayerField] = field(default_factory=list)

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def has_field(self, name: str) -> bool:
        return name.upper() in {f.upper() for f in self.field_names}


def layer_query_url(layer_url: str) -> str:
    """``.../MapServer/0`` -> ``.../MapServer/0/query``."""
    base = layer_url.rstrip("?").rstrip("/")
    return base if base.endswith("/query") else f"{base}/query"


def _check_status(resp: requests.Response) -> None:
    if not resp.ok:
        raise HTTPStatusError(resp.status_code, resp.url, resp.text[:500])


def fetch_feature_collection(
    query: QueryBuilder,
    *,
    session: requests.Session | None = None,
) -> FeatureCollection:
    """
    Send ``query`` and decode the GeoJSON response.

    Raises:
        HTTPStatusError: Non-2xx status.
        GeoJSONDecodeError: 2xx response that is not a FeatureCollection
            (``EsriServiceError`` when it is an Esri error document).
        requests.RequestException: Transport failure or timeout, unchanged.
    """
    s = session or http.session
    resp = s.send(query.prepare())
    _check_status(resp)
    return decode_feature_collection(resp.content)


def fetch_layer_info(
    layer_url: str,
    *,
    session: requests.Session | None = None,
) -> LayerInfo:
    """GET ``<layer>?f=json`` and summarize it."""
    s = session or http.session
    base = layer_url.rstrip("?").rstrip("/").removesuffix("/query")
    resp = s.get(base, params={"f": "json"})
    _check_status(resp)

    try:
        doc: dict[str, Any] = resp.json()
    except ValueError:
        raise GeoJSONDecodeError("Layer description is not JSON", resp.text[:500]) from None
    if not isinstance(doc, dict):
        raise GeoJSONDecodeError("Layer description is not a JSON object", resp.text[:500])

    error = doc.get("error")
    if isinstance(error, dict):
        raise EsriServiceError(error.get("code"), str(error.get("message", "")), error.get("details"))

    extent_sr = (doc.get("extent") or {}).get("spatialReference") or {}
    source_sr = doc.get("sourceSpatialReference") or extent_sr
    wkid = source_sr.get("latestWkid") or source_sr.get("wkid")

    return LayerInfo(
        name=doc.get("name", ""),
        geometry_type=doc.get("geometryType"),
        max_record_count=doc.get("maxRecordCount"),
        wkid=wkid,
        fields=[
            LayerField(name=f["name"], type=f.get("type", ""), alias=f.get("alias"))
            for f in doc.get("fields") or []
            if "name" in f
        ],
    )
