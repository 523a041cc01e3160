"""Exception hierarchy.

Errors are split by where a failure happens:

  - QueryBuildError: the query could not be assembled (before any network call)
  - ResponseError: the server answered, but the answer is not usable data
  - GeometryError: the filter inputs are unusable

Transport failures (``requests.ConnectionError``, ``requests.Timeout``) are not
part of this hierarchy; they propagate from ``requests`` unchanged.
"""

from __future__ import annotations

from typing import Any


class ForestInvasivesError(Exception):
    """Base class for all project errors."""


class QueryBuildError(ForestInvasivesError, ValueError):
    """A query URL could not be built from the given inputs."""


# =============================================================================
# Responses
# =============================================================================


class ResponseError(ForestInvasivesError):
    """The request completed but the response cannot be used."""


class HTTPStatusError(ResponseError):
    """The server answered with a non-success status code."""

    def __init__(self, status_code: int, url: str, body: str = "") -> None:
        self.status_code = status_code
        self.url = url
        self.body = body
        super().__init__(f"HTTP {status_code} from {url}")


class GeoJSONDecodeError(ResponseError):
    """The response body is not a GeoJSON FeatureCollection."""

    def __init__(self, message: str, body: str = "") -> None:
        self.body = body
        super().__init__(message)


class EsriServiceError(GeoJSONDecodeError):
    """The server returned an Esri ``{"error": {...}}`` document."""

    def __init__(
        self,
        code: int | None,
        message: str,
        details: list[Any] | None = None,
        body: str = "",
    ) -> None:
        self.code = code
        self.details = details or []
        text = f"Esri error {code}: {message}" if code is not None else f"Esri error: {message}"
        if self.details:
            text += " (" + "; ".join(str(d) for d in self.details) + ")"
        super().__init__(text, body)


# =============================================================================
# Geometry
# =============================================================================


class GeometryError(ForestInvasivesError):
    """Base class for geometry input problems."""


class EmptyReferenceError(GeometryError, ValueError):
    """The reference geometry set for a filter has no usable geometry."""


class EmptyGeometryError(GeometryError, ValueError):
    """A collection has no usable geometry to take an envelope from."""


class CRSMismatchError(GeometryError):
    """Two inputs declare different coordinate reference systems."""

    def __init__(self, reference_crs: str, candidate_crs: str) -> None:
        self.reference_crs = reference_crs
        self.candidate_crs = candidate_crs
        super().__init__(
            f"Reference CRS {reference_crs} does not match candidate CRS {candidate_crs}; "
            "reproject one of the inputs first"
        )
