"""
ドメイン層

値正規化・差分検知・比較ベース選択ロジックを提供します。
"""

from .models import ConfigSource, ConfigValue, DiffResult, MISSING, SourceKind
from .normalizer import ValueNormalizer, normalize, stringify
from .diff_detector import DiffDetector, compare
from .source_ordering import order_sources

__all__ = [
    "ConfigSource",
    "ConfigValue",
    "DiffResult",
    "MISSING",
    "SourceKind",
    "ValueNormalizer",
    "normalize",
    "stringify",
    "DiffDetector",
    "compare",
    "order_sources",
]
