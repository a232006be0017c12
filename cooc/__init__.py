from cooc.config import AnalyzeConfig, load_config
from cooc.dictionary import ColumnId, Dictionary, RowId
from cooc.errors import (
    CoocError,
    ConfigError,
    InputChangedError,
    InvalidIdError,
    MalformedRecordError,
    NumericDomainError,
    StagingError,
)
from cooc.pipeline import AnalysisResult, CoocAnalyzer, RelatedPair, write_related

__all__ = [
    "AnalyzeConfig",
    "load_config",
    "ColumnId",
    "Dictionary",
    "RowId",
    "CoocError",
    "ConfigError",
    "InputChangedError",
    "InvalidIdError",
    "MalformedRecordError",
    "NumericDomainError",
    "StagingError",
    "AnalysisResult",
    "CoocAnalyzer",
    "RelatedPair",
    "write_related",
]
