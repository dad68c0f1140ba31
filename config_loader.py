from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional

import yaml

from profiler.errors.exceptions import ConfigError

DEFAULT_CANDIDATE_WINDOWS = list(range(5, 27, 2))


@dataclass
class DecompositionConfig:
    period: int = 12
    robust: bool = True
    candidate_windows: List[int] = field(default_factory=lambda: list(DEFAULT_CANDIDATE_WINDOWS))
    trend_window: Optional[int] = None
    n_jobs: int = 1
    materiality: float = 0.1


@dataclass
class AnalysisConfig:
    data_path: str = "dataset/monthly_museum_visits.csv"
    institution: str = "NATURAL HISTORY MUSEUM"
    csv_delimiter: str = ","
    label_delimiter: str = "_"
    na_values: Optional[List[str]] = None
    acknowledge_missing: bool = False
    window_start: str = "2010-01"
    window_end: str = "2015-12"
    decomposition: DecompositionConfig = field(default_factory=DecompositionConfig)
    acf_lags: int = 24
    visualize: bool = True
    show_plots: bool = False
    output_dir: str = "outputs"
    profiling: bool = True

    def get(self, key: str, default=None):
        return getattr(self, key, default)


def _build(cls, data: Dict[str, Any], path: str):
    known = {f.name for f in fields(cls)}
    filtered = {key: value for key, value in data.items() if key in known}
    try:
        return cls(**filtered)
    except TypeError as e:
        raise ConfigError(path=path, reason=str(e))


def config_from_dict(data: Dict[str, Any], path: str = "<dict>") -> AnalysisConfig:
    if not isinstance(data, dict):
        raise ConfigError(path=path, reason="top level must be a mapping")
    data = dict(data)

    window = data.pop("window", None) or {}
    if "start" in window:
        data["window_start"] = str(window["start"])
    if "end" in window:
        data["window_end"] = str(window["end"])

    profiling = data.pop("profiling", None)
    if isinstance(profiling, dict):
        data["profiling"] = bool(profiling.get("enabled", True))
    elif profiling is not None:
        data["profiling"] = bool(profiling)

    decomposition = _build(DecompositionConfig, data.pop("decomposition", None) or {}, path)
    if not decomposition.candidate_windows:
        raise ConfigError(path=path, reason="decomposition.candidate_windows is empty")
    if decomposition.period < 2:
        raise ConfigError(path=path, reason="decomposition.period must be at least 2")
    if decomposition.materiality < 0:
        raise ConfigError(path=path, reason="decomposition.materiality must be non-negative")
    if decomposition.n_jobs == 0:
        raise ConfigError(path=path, reason="decomposition.n_jobs must be a positive worker count or negative (all cores)")
    decomposition.candidate_windows = [int(w) for w in decomposition.candidate_windows]

    config = _build(AnalysisConfig, data, path)
    config.decomposition = decomposition
    return config


def load_config(path: str = "config.yaml") -> AnalysisConfig:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        raise ConfigError(path=path, reason="file not found")
    except yaml.YAMLError as e:
        raise ConfigError(path=path, reason=f"invalid YAML: {e}")
    return config_from_dict(data, path)
