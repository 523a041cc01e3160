"""USFS Enterprise Data Warehouse (EDW) layer URLs and field names.

Service directory: https://apps.fs.usda.gov/arcx/rest/services/EDW
"""

EDW_BASE = "https://apps.fs.usda.gov/arcx/rest/services/EDW"

# Administrative forest boundaries (one polygon per national forest)
FOREST_BOUNDARY_LAYER = f"{EDW_BASE}/EDW_ForestSystemBoundaries_01/MapServer/0"
FOREST_NAME_FIELD = "FORESTNAME"

# Invasive species observations (FACTS/NRM invasive plant inventory)
INVASIVE_SPECIES_LAYER = f"{EDW_BASE}/EDW_InvasiveSpecies_01/MapServer/0"

# Candidate attribute names for a species label, first match wins
SPECIES_NAME_FIELDS = ("COMMON_NAME", "SCIENTIFIC_NAME", "SPECIES_NAME", "NRCS_PLANT_CODE")

DEFAULT_FOREST = "Angeles National Forest"
DEFAULT_RECORD_COUNT = 1000  # fixed cap, no paging
