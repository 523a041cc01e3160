"""U.S. Forest Service EDW data source.

Public API:
  - client: layer URLs, field names, defaults
  - forests: forest_boundary_query, fetch_forest_boundary, search_forests
  - invasives: invasive_species_query, fetch_invasive_species, species_label
"""

from forest_invasives.datasources.usfs.client import (
    DEFAULT_FOREST,
    DEFAULT_RECORD_COUNT,
    FOREST_BOUNDARY_LAYER,
    INVASIVE_SPECIES_LAYER,
)
from forest_invasives.datasources.usfs.forests import (
    fetch_forest_boundary,
    forest_boundary_query,
    forest_search_query,
    search_forests,
)
from forest_invasives.datasources.usfs.invasives import (
    fetch_invasive_species,
    invasive_species_query,
    species_label,
)

__all__ = [
    "DEFAULT_FOREST",
    "DEFAULT_RECORD_COUNT",
    "FOREST_BOUNDARY_LAYER",
    "INVASIVE_SPECIES_LAYER",
    "fetch_forest_boundary",
    "fetch_invasive_species",
    "forest_boundary_query",
    "forest_search_query",
    "invasive_species_query",
    "search_forests",
    "species_label",
]
