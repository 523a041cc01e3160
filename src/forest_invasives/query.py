"""
Query URL builder for Esri REST ``/query`` endpoints.

Parameters are held in their native Python types (``int`` CRS codes, ``bool``
flags, ``BoundingBox`` envelopes) and only turned into strings when the URL is
serialized. Builders are immutable: every setter returns a new builder, so a
base query can be shared and specialised without surprises.

Usage::

    from forest_invasives.query import QueryBuilder, where_equals

    q = (
        QueryBuilder("https://host/arcgis/rest/services/EDW/Layer/MapServer/0/query")
        .where(where_equals("FORESTNAME", "Angeles National Forest"))
        .out_fields("*")
        .output_format("geojson")
    )
    q.url()

Parameter reference:
https://developers.arcgis.com/rest/services-reference/enterprise/query-feature-service-layer/
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote, urlencode

import requests

from forest_invasives.errors import QueryBuildError
from forest_invasives.geometry import BoundingBox

# ---------------------------------------------------------------------------
# Esri constants
# ---------------------------------------------------------------------------
GEOMETRY_ENVELOPE = "esriGeometryEnvelope"
GEOMETRY_POLYGON = "esriGeometryPolygon"
GEOMETRY_POINT = "esriGeometryPoint"
SPATIAL_REL_INTERSECTS = "esriSpatialRelIntersects"
SPATIAL_REL_CONTAINS = "esriSpatialRelContains"
SPATIAL_REL_WITHIN = "esriSpatialRelWithin"

FORMAT_GEOJSON = "geojson"
FORMAT_JSON = "json"

#: Characters left unescaped in values (``outFields=*`` stays readable).
SAFE_CHARS = "*"


# =============================================================================
# Serialization
# =============================================================================


def to_wire(value: Any) -> str | None:
    """
    Convert a typed parameter value to its wire string.

    ``None`` means "omit the parameter". Booleans become ``true``/``false``,
    numbers plain decimals, sequences comma-joined, mappings compact JSON.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, str):
        return value
    if isinstance(value, BoundingBox):
        return value.as_param()
    if isinstance(value, Mapping):
        return json.dumps(value, separators=(",", ":"))
    if isinstance(value, Iterable):
        parts = [to_wire(v) for v in value]
        return ",".join(p for p in parts if p is not None)
    msg = f"Cannot serialize query value of type {type(value).__name__}"
    raise QueryBuildError(msg)


def sql_literal(text: str) -> str:
    """Quote ``text`` as an SQL string literal (embedded quotes doubled)."""
    return "'" + text.replace("'", "''") + "'"


def where_equals(field_name: str, value: str | int | float) -> str:
    """``FIELD = 'value'`` (numbers are left unquoted)."""
    if isinstance(value, str):
        return f"{field_name} = {sql_literal(value)}"
    return f"{field_name} = {value}"


def where_contains(field_name: str, text: str) -> str:
    """Case-insensitive substring match, e.g. ``UPPER(F) LIKE '%ANGELES%'``.

    ``%`` is the LIKE wildcard in the Esri SQL dialect; literal ``%`` and ``_``
    in ``text`` are not escaped.
    """
    return f"UPPER({field_name}) LIKE {sql_literal('%' + text.upper() + '%')}"


# =============================================================================
# Builder
# =============================================================================


@dataclass(frozen=True, init=False)
class QueryBuilder:
    """An immutable base URL plus typed query parameters.

    Builders compare by value but are not hashable (the parameters are a dict).
    """

    base_url: str
    _params: dict[str, Any] = field(default_factory=dict, repr=False)

    __hash__ = None  # type: ignore[assignment]

    def __init__(self, base_url: str, params: Mapping[str, Any] | None = None) -> None:
        base = (base_url or "").strip()
        if not base:
            msg = "Query base URL must not be empty"
            raise QueryBuildError(msg)
        if "?" in base.rstrip("?"):
            msg = f"Query base URL must end at or before '?': {base_url!r}"
            raise QueryBuildError(msg)
        object.__setattr__(self, "base_url", base.rstrip("?"))
        cleaned = {k: v for k, v in (params or {}).items() if v is not None}
        if any(not k for k in cleaned):
            msg = "Query parameter name must not be empty"
            raise QueryBuildError(msg)
        object.__setattr__(self, "_params", cleaned)

    # -- generic setters ------------------------------------------------------

    def set(self, key: str, value: Any) -> QueryBuilder:
        """Return a builder with ``key`` set (replacing any earlier value).

        Passing ``None`` removes the parameter.
        """
        if not key:
            msg = "Query parameter name must not be empty"
            raise QueryBuildError(msg)
        params = dict(self._params)
        if value is None:
            params.pop(key, None)
        else:
            params[key] = value
        return QueryBuilder(self.base_url, params)

    def update(self, mapping: Mapping[str, Any] | None = None, **params: Any) -> QueryBuilder:
        """Bulk ``set``; later keys win."""
        builder = self
        for key, value in {**(mapping or {}), **params}.items():
            builder = builder.set(key, value)
        return builder

    # -- Esri conveniences ----------------------------------------------------

    def where(self, clause: str) -> QueryBuilder:
        return self.set("where", clause)

    def out_fields(self, fields: str | Iterable[str]) -> QueryBuilder:
        return self.set("outFields", fields)

    def envelope(
        self,
        bbox: BoundingBox,
        *,
        spatial_rel: str = SPATIAL_REL_INTERSECTS,
    ) -> QueryBuilder:
        """Restrict to features related to ``bbox``.

        ``inSR`` is taken from ``bbox.wkid``; it must describe the numbers in
        the box or the server silently searches the wrong place.
        """
        return self.update(
            geometry=bbox,
            geometryType=GEOMETRY_ENVELOPE,
            inSR=bbox.wkid,
            spatialRel=spatial_rel,
        )

    def record_count(self, count: int) -> QueryBuilder:
        return self.set("resultRecordCount", count)

    def return_geometry(self, flag: bool = True) -> QueryBuilder:
        return self.set("returnGeometry", flag)

    def output_format(self, fmt: str = FORMAT_GEOJSON) -> QueryBuilder:
        return self.set("f", fmt)

    # -- output -----------------------------------------------------------------

    @property
    def params(self) -> dict[str, Any]:
        """Typed parameters (a copy)."""
        return dict(self._params)

    def wire_params(self) -> dict[str, str]:
        """Parameters as they go on the wire, in insertion order."""
        wire: dict[str, str] = {}
        for key, value in self._params.items():
            text = to_wire(value)
            if text is not None:
                wire[key] = text
        return wire

    def query_string(self) -> str:
        """Percent-encoded query string (spaces as ``%20``)."""
        return urlencode(self.wire_params(), safe=SAFE_CHARS, quote_via=quote)

    def url(self) -> str:
        """Full request URL."""
        qs = self.query_string()
        return f"{self.base_url}?{qs}" if qs else self.base_url

    def prepare(self) -> requests.PreparedRequest:
        """A GET request ready for ``session.send``."""
        return requests.Request("GET", self.url()).prepare()
