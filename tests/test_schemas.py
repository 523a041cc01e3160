"""Tests for GeoJSON models and response decoding."""

from __future__ import annotations

import json

import pytest

from forest_invasives.errors import EsriServiceError, GeoJSONDecodeError, ResponseError
from forest_invasives.schemas import (
    Feature,
    FeatureCollection,
    decode_feature_collection,
    normalize_crs_name,
)

# =============================================================================
# Sample responses
# =============================================================================

SAMPLE_FOREST_RESPONSE: dict = {
    "type": "FeatureCollection",
    "features": [
        {
            "type": "Feature",
            "id": 7,
            "geometry": {
                "type": "Polygon",
                "coordinates": [
                    [[-118.9, 34.2], [-117.6, 34.2], [-117.6, 34.8], [-118.9, 34.8], [-118.9, 34.2]]
                ],
            },
            "properties": {
                "OBJECTID": 7,
                "FORESTNAME": "Angeles National Forest",
                "REGION": "05",
                "GIS_ACRES": 695_000.5,
            },
        }
    ],
}

ESRI_ERROR_RESPONSE: dict = {
    "error": {
        "code": 400,
        "message": "Unable to complete operation.",
        "details": ["'where' parameter is invalid"],
    }
}

HTML_ERROR_PAGE = """<html><head><title>Error</title></head>
<body><h2>Error: Unable to perform query. Please check your parameters.</h2></body></html>"""


class TestDecodeFeatureCollection:
    """Test decoding of query response bodies."""

    def test_valid_response(self) -> None:
        fc = decode_feature_collection(json.dumps(SAMPLE_FOREST_RESPONSE))
        assert isinstance(fc, FeatureCollection)
        assert len(fc) == 1
        feature = fc.features[0]
        assert feature.id == 7
        assert feature.properties["FORESTNAME"] == "Angeles National Forest"
        assert feature.geometry is not None
        assert feature.geometry["type"] == "Polygon"

    def test_bytes_body(self) -> None:
        fc = decode_feature_collection(json.dumps(SAMPLE_FOREST_RESPONSE).encode())
        assert len(fc) == 1

    def test_empty_collection(self) -> None:
        fc = decode_feature_collection('{"type": "FeatureCollection", "features": []}')
        assert len(fc) == 0

    def test_missing_features_key(self) -> None:
        assert len(decode_feature_collection('{"type": "FeatureCollection"}')) == 0

    def test_null_properties_and_geometry(self) -> None:
        body = json.dumps(
            {
                "type": "FeatureCollection",
                "features": [{"type": "Feature", "geometry": None, "properties": None}],
            }
        )
        feature = decode_feature_collection(body).features[0]
        assert feature.geometry is None
        assert feature.properties == {}

    def test_html_error_page(self) -> None:
        with pytest.raises(GeoJSONDecodeError, match="HTML") as excinfo:
            decode_feature_collection(HTML_ERROR_PAGE)
        assert "<html>" in excinfo.value.body

    def test_plain_text_body(self) -> None:
        with pytest.raises(GeoJSONDecodeError, match="not JSON"):
            decode_feature_collection("Service unavailable")

    def test_esri_error_document(self) -> None:
        with pytest.raises(EsriServiceError) as excinfo:
            decode_feature_collection(json.dumps(ESRI_ERROR_RESPONSE))
        err = excinfo.value
        assert err.code == 400
        assert "Unable to complete operation." in str(err)
        assert "'where' parameter is invalid" in str(err)

    def test_esri_error_is_decode_error(self) -> None:
        with pytest.raises(GeoJSONDecodeError):
            decode_feature_collection(json.dumps(ESRI_ERROR_RESPONSE))

    def test_decode_errors_are_response_errors(self) -> None:
        with pytest.raises(ResponseError):
            decode_feature_collection(HTML_ERROR_PAGE)

    def test_esri_json_instead_of_geojson(self) -> None:
        body = json.dumps({"features": [{"attributes": {"OBJECTID": 1}}], "spatialReference": {}})
        with pytest.raises(GeoJSONDecodeError, match="FeatureCollection"):
            decode_feature_collection(body)

    def test_json_array(self) -> None:
        with pytest.raises(GeoJSONDecodeError):
            decode_feature_collection("[1, 2, 3]")

    def test_malformed_feature(self) -> None:
        body = json.dumps({"type": "FeatureCollection", "features": ["not a feature"]})
        with pytest.raises(GeoJSONDecodeError, match="Malformed"):
            decode_feature_collection(body)

    def test_legacy_crs_member(self) -> None:
        body = json.dumps(
            SAMPLE_FOREST_RESPONSE
            | {"crs": {"type": "name", "properties": {"name": "urn:ogc:def:crs:EPSG::3857"}}}
        )
        assert decode_feature_collection(body).crs == "EPSG:3857"

    def test_no_crs_member(self) -> None:
        assert decode_feature_collection(json.dumps(SAMPLE_FOREST_RESPONSE)).crs is None

    def test_crs_properties_not_an_object(self) -> None:
        body = json.dumps(SAMPLE_FOREST_RESPONSE | {"crs": {"type": "name", "properties": "x"}})
        with pytest.raises(GeoJSONDecodeError, match="crs"):
            decode_feature_collection(body)

    def test_crs_name_not_a_string(self) -> None:
        body = json.dumps(SAMPLE_FOREST_RESPONSE | {"crs": {"properties": {"name": 4326}}})
        with pytest.raises(GeoJSONDecodeError, match="crs"):
            decode_feature_collection(body)

    def test_null_crs_member(self) -> None:
        body = json.dumps(SAMPLE_FOREST_RESPONSE | {"crs": None})
        assert decode_feature_collection(body).crs is None

    def test_features_not_an_array(self) -> None:
        body = json.dumps({"type": "FeatureCollection", "features": 3})
        with pytest.raises(GeoJSONDecodeError, match="array"):
            decode_feature_collection(body)

    def test_numeric_ids(self) -> None:
        body = json.dumps(
            {
                "type": "FeatureCollection",
                "features": [
                    {"type": "Feature", "id": 1.5, "geometry": None, "properties": {}},
                    {"type": "Feature", "id": 2, "geometry": None, "properties": {}},
                    {"type": "Feature", "id": "a-3", "geometry": None, "properties": {}},
                ],
            }
        )
        assert [f.id for f in decode_feature_collection(body).features] == [1.5, 2, "a-3"]


class TestNormalizeCrsName:
    """Test CRS name normalization."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("EPSG:4326", "EPSG:4326"),
            ("epsg:4269", "EPSG:4269"),
            ("urn:ogc:def:crs:EPSG::26911", "EPSG:26911"),
            ("urn:ogc:def:crs:OGC:1.3:CRS84", "EPSG:4326"),
            ("http://www.opengis.net/def/crs/EPSG/0/3857", "EPSG:3857"),
            ("LOCAL_CS", "LOCAL_CS"),
            (None, None),
            ("", None),
        ],
    )
    def test_names(self, name: str | None, expected: str | None) -> None:
        assert normalize_crs_name(name) == expected


class TestFeature:
    """Test Feature model helpers."""

    def test_get_exact(self) -> None:
        f = Feature(properties={"FORESTNAME": "Angeles National Forest"})
        assert f.get("FORESTNAME") == "Angeles National Forest"

    def test_get_case_insensitive(self) -> None:
        f = Feature(properties={"ForestName": "Angeles National Forest"})
        assert f.get("FORESTNAME") == "Angeles National Forest"

    def test_get_default(self) -> None:
        assert Feature().get("missing", "x") == "x"

    def test_frozen(self) -> None:
        f = Feature(id=1)
        with pytest.raises(ValueError):
            f.id = 2  # type: ignore[misc]


class TestFeatureCollection:
    """Test FeatureCollection helpers."""

    def test_with_features_keeps_crs(self) -> None:
        fc = FeatureCollection(features=(Feature(id=1), Feature(id=2)), crs="EPSG:4326")
        subset = fc.with_features([fc.features[1]])
        assert len(subset) == 1
        assert subset.crs == "EPSG:4326"
        assert len(fc) == 2

    def test_to_geojson(self) -> None:
        fc = decode_feature_collection(json.dumps(SAMPLE_FOREST_RESPONSE))
        out = fc.to_geojson()
        assert out["type"] == "FeatureCollection"
        assert out["features"][0]["id"] == 7
        assert out["features"][0]["properties"]["REGION"] == "05"
        assert out["features"][0]["geometry"] == SAMPLE_FOREST_RESPONSE["features"][0]["geometry"]

    def test_to_geojson_omits_missing_id(self) -> None:
        out = FeatureCollection(features=(Feature(),)).to_geojson()
        assert "id" not in out["features"][0]
        assert out["features"][0]["geometry"] is None
