"""Forest Invasives - invasive species inside national forests, via Esri REST APIs.

Architecture::

    query.py       QueryBuilder: typed parameters -> encoded Esri query URL
    schemas.py     Feature / FeatureCollection models, GeoJSON decoding
    geometry.py    Bounding boxes and the polygon membership filter (shapely)
    services/      HTTP session and Esri request helpers
    datasources/   USFS layers (forest boundaries, invasive species)
    renderers/     Pure data -> HTML (Leaflet map)
    flows/         Prefect orchestration (boundary -> bbox -> filter -> map)

Data flow: query -> services (fetch + decode) -> geometry (filter) -> renderers
"""

__version__ = "0.1.0"

from forest_invasives.config import Settings
from forest_invasives.geometry import BoundingBox, filter_features
from forest_invasives.query import QueryBuilder
from forest_invasives.schemas import Feature, FeatureCollection

__all__ = [
    "BoundingBox",
    "Feature",
    "FeatureCollection",
    "QueryBuilder",
    "Settings",
    "__version__",
    "filter_features",
]
