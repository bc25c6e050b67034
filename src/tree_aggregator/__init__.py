# src/tree_aggregator/__init__.py
from .errors import AggregatorError, TargetNotFoundError, UnitLoadError
from .loaders import UnitLoader
from .logic import aggregate, fold_records, traverse
from .models import AggregatorConfig, ExcludeConfig, ExportRequest, UnitRecord, normalize_config
from .paths import Caller, discover_caller

__all__ = [
    "aggregate",
    "traverse",
    "fold_records",
    "normalize_config",
    "AggregatorConfig",
    "ExcludeConfig",
    "ExportRequest",
    "UnitRecord",
    "UnitLoader",
    "Caller",
    "discover_caller",
    "AggregatorError",
    "TargetNotFoundError",
    "UnitLoadError",
]
