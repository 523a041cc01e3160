"""
Collaborators for talking to remote services.

- http.py  - Shared ``requests`` session (default timeout, opt-in retries)
- esri.py  - Esri REST query/metadata helpers (status check + GeoJSON decode)
"""
