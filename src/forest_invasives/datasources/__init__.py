"""External data sources.

Each subdirectory is one data source::

    datasources/{name}/
    ├── __init__.py       # Public API re-exports
    ├── client.py         # Layer URLs, field names, defaults
    └── {feature}.py      # Query builders + fetch functions

Fetch functions build a ``QueryBuilder`` and hand it to
``services.esri.fetch_feature_collection``; the builder is returned by a
separate ``*_query`` function so the URL can be inspected without a request.
"""
