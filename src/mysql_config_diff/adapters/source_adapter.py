"""
設定ソースアダプター抽象基底クラス

設定ファイル・稼働中サーバーといった取得元の差異を吸収するための抽象インターフェースを定義します。
アダプターは読み込み・接続・クエリといった失敗しうる処理をすべて担い、
完全な ConfigSource を返すか、例外を送出するかのどちらかです。
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..domain.models import ConfigSource


class SourceReadError(Exception):
    """
    設定ソース読み込みエラー例外

    アダプター層で発生するエラーの基底クラスです。
    """

    def __init__(self, message: str, source: Optional[str] = None):
        """
        Args:
            message: エラーメッセージ
            source: エラーが発生したソースの表示名
        """
        super().__init__(message)
        self.source = source


class CnfReadError(SourceReadError):
    """
    設定ファイル読み込みエラー例外

    ファイルが存在しない、読み込めない、構文が不正な場合を表します。
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        line: Optional[int] = None,
    ):
        """
        Args:
            message: エラーメッセージ
            path: 設定ファイルのパス
            line: 構文エラーの行番号（該当する場合）
        """
        super().__init__(message, source=path)
        self.path = path
        self.line = line


class DatabaseConnectionError(SourceReadError):
    """
    データベース接続エラー例外

    接続拒否、認証失敗、タイムアウトなどの接続関連エラーを表します。
    リトライ対象です。
    """

    def __init__(self, message: str, dsn: Optional[str] = None):
        """
        Args:
            message: エラーメッセージ
            dsn: 接続先の表示名（パスワードを含まない）
        """
        super().__init__(message, source=dsn)
        self.dsn = dsn


class QueryError(SourceReadError):
    """
    クエリ実行エラー例外

    接続後の SHOW VARIABLES が失敗した場合を表します。
    """

    def __init__(
        self,
        message: str,
        dsn: Optional[str] = None,
        query: Optional[str] = None,
    ):
        """
        Args:
            message: エラーメッセージ
            dsn: 接続先の表示名（パスワードを含まない）
            query: 失敗したクエリ
        """
        super().__init__(message, source=dsn)
        self.dsn = dsn
        self.query = query


class SourceAdapter(ABC):
    """
    設定ソースアダプター抽象基底クラス

    取得元ごとに異なる読み込み方法を吸収し、統一的なインターフェースで
    ConfigSource を構築するための抽象クラスです。
    """

    def __init__(self, name: str):
        """
        Args:
            name: ソースの表示名（ファイルパス、接続先など）
        """
        self.name = name

    @abstractmethod
    def load(self) -> ConfigSource:
        """
        設定ソースを読み込み

        Returns:
            ConfigSource: すべてのエントリが確定した設定ソース

        Raises:
            SourceReadError: 読み込み・接続・クエリに失敗した時
        """
        pass
