from .catalog_loader import load_error_catalog


def get_error_metadata(key: str, context: dict = None):
    context = context or {}
    catalog = load_error_catalog()
    entry = catalog.get(key, catalog["UnknownError"])

    try:
        message = entry["message"].format(**context)
    except (KeyError, IndexError, ValueError):
        message = entry["message"]

    return {
        "code": entry.get("code", "E9999"),
        "message": message,
        "severity": entry.get("severity", "critical"),
        "component": entry.get("component", "unknown"),
    }
