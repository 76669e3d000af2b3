"""
アダプター層

設定ファイルの読み込み・稼働中サーバーへの問い合わせ・DSN 解析を提供します。
"""

from .source_adapter import (
    SourceAdapter,
    SourceReadError,
    CnfReadError,
    DatabaseConnectionError,
    QueryError,
)
from .cnf_adapter import CnfAdapter
from .dsn import DsnConfig, DsnParseError, parse_dsn
from .mysql_adapter import MySQLAdapter

__all__ = [
    "SourceAdapter",
    "SourceReadError",
    "CnfReadError",
    "DatabaseConnectionError",
    "QueryError",
    "CnfAdapter",
    "DsnConfig",
    "DsnParseError",
    "parse_dsn",
    "MySQLAdapter",
]
