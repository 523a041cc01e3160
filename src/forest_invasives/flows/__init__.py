"""
Prefect flows.

Flows:
- explore: forest boundary -> bbox query -> polygon filter -> Leaflet map

Usage (local):
    python -m forest_invasives.flows.explore

Usage (Prefect):
    prefect server start  # Optional, for dashboard
    python -m forest_invasives.flows.explore
"""
