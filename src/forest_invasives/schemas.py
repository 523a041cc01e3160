"""
GeoJSON feature models and response decoding.

A query response is decoded once into an immutable ``FeatureCollection``
snapshot. Filtering produces a new collection; nothing is updated in place.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from forest_invasives.errors import EsriServiceError, GeoJSONDecodeError

#: How much of an unusable body to keep on the raised error.
BODY_EXCERPT_CHARS = 500

_EPSG_RE = re.compile(r"(?:EPSG|epsg)(?::{1,2}|/0/|\.)?(\d+)$")


class Feature(BaseModel):
    """A single GeoJSON feature."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    type: str = "Feature"
    id: str | int | float | None = None
    geometry: dict[str, Any] | None = None
    properties: dict[str, Any] = Field(default_factory=dict)

    @field_validator("properties", mode="before")
    @classmethod
    def _null_properties(cls, value: Any) -> Any:
        # GeoJSON allows "properties": null
        return {} if value is None else value

    def get(self, key: str, default: Any = None) -> Any:
        """Attribute lookup, case-insensitive on the field name."""
        if key in self.properties:
            return self.properties[key]
        lowered = key.lower()
        for name, value in self.properties.items():
            if name.lower() == lowered:
                return value
        return default


class FeatureCollection(BaseModel):
    """An ordered, immutable set of features from one query."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    type: str = "FeatureCollection"
    features: tuple[Feature, ...] = ()
    crs: str | None = Field(default=None, description="Declared CRS, e.g. 'EPSG:4326'")

    def __len__(self) -> int:
        return len(self.features)

    def with_features(self, features: Iterable[Feature]) -> FeatureCollection:
        """New collection holding ``features`` under the same CRS."""
        return FeatureCollection(features=tuple(features), crs=self.crs)

    def to_geojson(self) -> dict[str, Any]:
        """Plain GeoJSON dict (for rendering or writing to disk)."""
        features: list[dict[str, Any]] = []
        for f in self.features:
            out: dict[str, Any] = {"type": "Feature", "geometry": f.geometry}
            if f.id is not None:
                out["id"] = f.id
            out["properties"] = dict(f.properties)
            features.append(out)
        return {"type": "FeatureCollection", "features": features}


# =============================================================================
# Decoding
# =============================================================================


def normalize_crs_name(name: str | None) -> str | None:
    """Normalize a GeoJSON ``crs`` name to ``EPSG:<code>``.

    Handles ``EPSG:4326``, ``urn:ogc:def:crs:EPSG::4326`` and the OGC CRS84
    alias. Anything unrecognized is returned unchanged.
    """
    if not name:
        return None
    text = name.strip()
    if text.upper().endswith("CRS84"):
        return "EPSG:4326"
    match = _EPSG_RE.search(text)
    if match:
        return f"EPSG:{int(match.group(1))}"
    return text


def _excerpt(text: str) -> str:
    return text[:BODY_EXCERPT_CHARS]


def _legacy_crs_name(member: Any, text: str) -> str | None:
    """``crs.properties.name`` of a pre-RFC 7946 document, if present."""
    if not member:
        return None
    properties = member.get("properties") if isinstance(member, dict) else None
    name = properties.get("name") if isinstance(properties, dict) else None
    if not isinstance(name, str):
        raise GeoJSONDecodeError(f"Malformed crs member: {member!r}", _excerpt(text))
    return name


def decode_feature_collection(body: str | bytes) -> FeatureCollection:
    """
    Parse a GeoJSON FeatureCollection response body.

    Raises:
        EsriServiceError: Body is an Esri error document.
        GeoJSONDecodeError: Body is not JSON (e.g. an HTML error page served
            with status 200), not a FeatureCollection, or has a malformed
            ``crs`` member or feature.
    """
    text = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body

    try:
        doc = json.loads(text)
    except ValueError:
        msg = "Response is not JSON"
        if text.lstrip()[:1] == "<":
            msg = "Response is an HTML page, not GeoJSON"
        raise GeoJSONDecodeError(msg, _excerpt(text)) from None

    if not isinstance(doc, dict):
        raise GeoJSONDecodeError("Response JSON is not an object", _excerpt(text))

    error = doc.get("error")
    if isinstance(error, dict):
        raise EsriServiceError(
            error.get("code"),
            str(error.get("message", "unknown error")),
            error.get("details"),
            body=_excerpt(text),
        )

    if doc.get("type") != "FeatureCollection":
        msg = f"Expected a GeoJSON FeatureCollection, got type={doc.get('type')!r}"
        raise GeoJSONDecodeError(msg, _excerpt(text))

    crs_name = _legacy_crs_name(doc.get("crs"), text)

    raw_features = doc.get("features") or []
    if not isinstance(raw_features, list):
        raise GeoJSONDecodeError("FeatureCollection \"features\" is not an array", _excerpt(text))
    try:
        features = tuple(Feature.model_validate(f) for f in raw_features)
    except ValidationError as exc:
        raise GeoJSONDecodeError(f"Malformed feature: {exc}", _excerpt(text)) from exc

    return FeatureCollection(features=features, crs=normalize_crs_name(crs_name))
