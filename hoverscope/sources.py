"""
Catalog sources: bundled JSON files and a remote mirror.

Catalogs are always returned in the fixed precedence order of
``CATALOG_FILES`` (primary domain catalogs first), which is the order the
merger relies on for last-write-wins.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional, Tuple

import requests

from .catalog import Catalog, MergedTable, TableStore
from .errors import CatalogFetchError, HoverscopeError, MissingCatalogError

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"

DEFAULT_REMOTE_BASE_URL = "https://raw.githubusercontent.com/nataliehogg/hoverscope/main/"

DEFAULT_TIMEOUT = 10.0

# (file name, category, required)
CATALOG_FILES: Tuple[Tuple[str, str, bool], ...] = (
    ("telescopes.json", "instrument", True),
    ("surveys.json", "survey", True),
    ("simulations.json", "simulation", True),
    ("sams.json", "model", True),
    ("people.json", "person", False),
)


def _to_catalog(file_name: str, category: str, data) -> Catalog:
    if not isinstance(data, dict):
        raise CatalogFetchError(f"{file_name} does not contain a JSON object")
    return Catalog.from_mapping(category, data)


def load_bundled_catalogs(data_dir: Optional[Path] = None) -> List[Catalog]:
    """
    Read catalogs from ``data_dir`` (the package data directory by default).

    Raises:
        MissingCatalogError: a required catalog file does not exist
        CatalogFetchError: a catalog file is not valid JSON
    """
    data_dir = Path(data_dir) if data_dir else DATA_DIR
    catalogs = []
    for file_name, category, required in CATALOG_FILES:
        path = data_dir / file_name
        if not path.is_file():
            if required:
                raise MissingCatalogError(f"Catalog file not found: {path}")
            logger.debug("Optional catalog %s not present", path)
            continue
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise CatalogFetchError(f"Could not read {path}: {e}") from e
        catalogs.append(_to_catalog(file_name, category, data))
    logger.info("Loaded %s bundled catalogs from %s", len(catalogs), data_dir)
    return catalogs


def _fetch_all(http, base_url: str, timeout: float) -> List[Catalog]:
    catalogs = []
    for file_name, category, required in CATALOG_FILES:
        url = base_url + file_name
        try:
            response = http.get(url, timeout=timeout)
            response.raise_for_status()
            catalog = _to_catalog(file_name, category, response.json())
        except (requests.RequestException, ValueError, HoverscopeError) as e:
            if required:
                raise CatalogFetchError(f"{file_name} fetch failed: {e}") from e
            logger.debug("Optional catalog %s unavailable: %s", url, e)
            continue
        catalogs.append(catalog)
    return catalogs


def fetch_remote_catalogs(
    base_url: str = DEFAULT_REMOTE_BASE_URL,
    session: Optional[requests.Session] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> List[Catalog]:
    """
    Download every catalog file from ``base_url``.

    All required files must download and decode; an optional file that is
    missing or malformed is skipped. A session created here is closed before
    returning; a caller-supplied session is left open.

    Raises:
        CatalogFetchError: any required download or decode failed
    """
    if not base_url.endswith("/"):
        base_url += "/"
    if session is not None:
        catalogs = _fetch_all(session, base_url, timeout)
    else:
        with requests.Session() as http:
            catalogs = _fetch_all(http, base_url, timeout)
    logger.info("Fetched %s catalogs from %s", len(catalogs), base_url)
    return catalogs


def refresh(
    store: TableStore,
    base_url: Optional[str] = None,
    data_dir: Optional[Path] = None,
    session: Optional[requests.Session] = None,
) -> Tuple[MergedTable, str]:
    """
    Reload ``store`` from the remote mirror, falling back to bundled data.

    Returns:
        The installed table and its source, "remote" or "bundled"
    """
    if base_url:
        try:
            table = store.load(fetch_remote_catalogs(base_url, session=session))
            return table, "remote"
        except HoverscopeError as e:
            logger.warning("Could not fetch catalogs remotely, using bundled data: %s", e)
    table = store.load(load_bundled_catalogs(data_dir))
    return table, "bundled"
