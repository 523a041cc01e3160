"""
Prefect flow: invasive species inside one national forest.

Steps run strictly in order, since each query depends on the previous result:

  1. fetch the forest boundary polygon
  2. query invasive species inside the boundary's bounding box
  3. drop the observations outside the real boundary
  4. render and write a Leaflet map

Run locally:
    python -m forest_invasives.flows.explore

Run with Prefect dashboard:
    prefect server start &
    python -m forest_invasives.flows.explore
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from prefect import flow, task
from prefect.cache_policies import NO_CACHE

from forest_invasives.config import get_settings
from forest_invasives.datasources import usfs
from forest_invasives.geometry import BoundingBox, envelope, split_features
from forest_invasives.renderers.forest_map import build_forest_map_html
from forest_invasives.services.http import create_session, retry_policy

if TYPE_CHECKING:
    import requests

    from forest_invasives.schemas import FeatureCollection


def _session() -> requests.Session:
    settings = get_settings()
    return create_session(
        retry=retry_policy(settings.http_retries),
        timeout=settings.request_timeout,
        user_agent=settings.user_agent,
    )


def map_filename(forest: str) -> str:
    """``Angeles National Forest`` -> ``angeles-national-forest.html``."""
    slug = "-".join("".join(c if c.isalnum() else " " for c in forest.lower()).split())
    return f"{slug or 'forest'}.html"


@task(name="fetch-boundary", cache_policy=NO_CACHE)
def fetch_boundary(forest: str, session: requests.Session | None = None) -> FeatureCollection:
    """Fetch the forest boundary polygon(s)."""
    settings = get_settings()
    return usfs.fetch_forest_boundary(forest, layer_url=settings.forest_layer_url, session=session)


@task(name="fetch-invasives", cache_policy=NO_CACHE)
def fetch_invasives(
    bbox: BoundingBox,
    where: str = "1=1",
    session: requests.Session | None = None,
) -> FeatureCollection:
    """Fetch invasive species observations inside the bounding box."""
    settings = get_settings()
    return usfs.fetch_invasive_species(
        bbox,
        where=where,
        record_count=settings.record_count,
        layer_url=settings.invasives_layer_url,
        session=session,
    )


@task(name="filter-invasives", cache_policy=NO_CACHE)
def filter_invasives(
    boundary: FeatureCollection, candidates: FeatureCollection
) -> tuple[FeatureCollection, FeatureCollection]:
    """Split candidates into (inside, outside) the boundary."""
    return split_features(boundary, candidates)


@task(name="render-map", cache_policy=NO_CACHE)
def render_map(
    forest: str,
    boundary: FeatureCollection,
    inside: FeatureCollection,
    outside: FeatureCollection | None = None,
) -> str:
    return build_forest_map_html(boundary, inside, title=forest, excluded=outside)


@task(name="write-map", cache_policy=NO_CACHE)
def write_map(html: str, output: Path) -> Path:
    """Write the map page to ``output``."""
    output.parent.mkdir(parents=True, exist_ok=True)
    with output.open("w") as f:
        f.write(html)
    return output


@flow(name="explore-forest", log_prints=True)
def explore_forest(
    forest: str | None = None,
    *,
    where: str = "1=1",
    output: Path | None = None,
    show_excluded: bool = False,
) -> dict[str, Any]:
    """
    Map the invasive species observed inside one national forest.

    Returns a summary dict. Query and response errors propagate; the flow
    does not retry.
    """
    settings = get_settings()
    forest = forest or settings.default_forest
    output = output or settings.output_dir / map_filename(forest)

    with _session() as session:
        print(f"Fetching boundary for {forest}...")
        boundary = fetch_boundary(forest, session)
        if len(boundary) == 0:
            print(f"No forest named {forest!r} found.")
            return {"forest": forest, "error": "forest not found"}

        bbox = envelope(boundary)
        print(f"Boundary has {len(boundary)} feature(s); bbox {bbox.as_param()}")

        print("Fetching invasive species inside the bounding box...")
        candidates = fetch_invasives(bbox, where, session)

    if len(candidates) >= settings.record_count:
        print(f"Warning: hit the {settings.record_count} record cap; results are truncated.")

    inside, outside = filter_invasives(boundary, candidates)
    print(f"{len(inside)} of {len(candidates)} observations fall inside the boundary.")

    html = render_map(forest, boundary, inside, outside if show_excluded else None)
    path = write_map(html, output)
    print(f"Map written to {path}")

    return {
        "forest": forest,
        "bbox": bbox.as_param(),
        "candidates": len(candidates),
        "retained": len(inside),
        "excluded": len(outside),
        "output": str(path),
    }


if __name__ == "__main__":
    result = explore_forest()
    print(f"Flow complete: {result}")
