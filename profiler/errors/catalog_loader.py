import os

import yaml

_catalog_cache = None

DEFAULT_CATALOG_PATH = os.path.join(os.path.dirname(__file__), "error_catalog.yml")


def load_error_catalog(path=DEFAULT_CATALOG_PATH):
    global _catalog_cache
    if _catalog_cache is None:
        with open(os.path.abspath(path), "r", encoding="utf-8") as f:
            _catalog_cache = yaml.safe_load(f)
    return _catalog_cache
