from __future__ import annotations

import csv
import logging
from pathlib import Path

import requests

from astrofolio_catalog.schema import PLUGIN_CSV_COLUMNS, Catalog
from astrofolio_catalog.store import CatalogStore

logger = logging.getLogger(__name__)

OPENNGC_SOURCE_URL = "https://raw.githubusercontent.com/mattiaverga/OpenNGC/master/database_files/NGC.csv"
DEFAULT_TIMEOUT_SECONDS = 45.0


def export_catalog(store: CatalogStore, catalog: Catalog | str, path: Path | str) -> int:
    """Write a catalog in the plugin CSV dialect; the file re-imports to the same rows."""
    resolved = Catalog.parse(catalog)
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    written = 0
    with output_path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=PLUGIN_CSV_COLUMNS)
        writer.writeheader()
        for obj in store.objects_in_catalog(resolved):
            writer.writerow(
                {
                    "designation": obj.designation,
                    "common_name": obj.common_name or "",
                    "object_type": obj.object_type,
                    "constellation": obj.constellation,
                    "ra_hours": repr(obj.ra_hours),
                    "dec_degrees": repr(obj.dec_degrees),
                    "magnitude": "" if obj.magnitude is None else repr(obj.magnitude),
                    "size": obj.angular_size or "",
                    "distance": obj.distance or "",
                    "notes": obj.notes,
                    "aliases": ", ".join(obj.aliases),
                }
            )
            written += 1

    logger.info("Exported %d %s objects to %s", written, resolved.value, output_path)
    return written


def download_source(
    url: str,
    destination: Path | str,
    *,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    session: requests.Session | None = None,
) -> Path:
    """Fetch a remote catalog file (OpenNGC by default in the CLI) to ``destination``."""
    target = Path(destination)
    client = session or requests.Session()
    response = client.get(url, timeout=timeout)
    response.raise_for_status()

    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(response.content)
    logger.info("Downloaded %s (%d bytes) to %s", url, len(response.content), target)
    return target
