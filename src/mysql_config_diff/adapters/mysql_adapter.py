"""
稼働中サーバーアダプター

稼働中の MySQL サーバーから SHOW VARIABLES でシステム変数を取得するアダプターです。
"""

import logging
from typing import Any, Callable, Dict, Optional, Union

import pymysql

from .dsn import DsnConfig, parse_dsn
from .source_adapter import SourceAdapter, DatabaseConnectionError, QueryError
from ..domain.models import ConfigSource, ConfigValue, SourceKind


# テストでモックに差し替えられるよう、接続処理は注入可能にする
Connector = Callable[..., Any]


class MySQLAdapter(SourceAdapter):
    """
    稼働中の MySQL サーバー向け読み込み実装

    SHOW VARIABLES はサーバーが認識するすべての変数を列挙するため、
    設定ファイルよりもはるかに多くのキーを持つソースになります。
    """

    QUERY = "SHOW VARIABLES"

    # 接続タイムアウト（秒）
    CONNECT_TIMEOUT = 10

    def __init__(
        self,
        dsn: Union[str, DsnConfig],
        connector: Optional[Connector] = None,
        connect_timeout: int = CONNECT_TIMEOUT,
    ):
        """
        Args:
            dsn: 接続文字列または解析済みの接続設定
            connector: 接続関数。None の場合は pymysql.connect を使用
            connect_timeout: 接続タイムアウト（秒）

        Raises:
            DsnParseError: 接続文字列を解釈できない場合
        """
        self.dsn = dsn if isinstance(dsn, DsnConfig) else parse_dsn(dsn)
        super().__init__(name=self.dsn.display_name)
        self.connector = connector or pymysql.connect
        self.connect_timeout = connect_timeout
        self.logger = logging.getLogger(__name__)

    def load(self) -> ConfigSource:
        """
        システム変数を取得

        Returns:
            ConfigSource: kind=LIVE の設定ソース

        Raises:
            DatabaseConnectionError: 接続・疎通確認に失敗した時
            QueryError: SHOW VARIABLES の実行に失敗した時
        """
        connection = self._connect()
        try:
            entries = self._fetch_variables(connection)
        finally:
            self._close(connection)

        self.logger.info(
            f"Loaded {len(entries)} variables from {self.name}",
            extra={"dsn": self.name}
        )
        return ConfigSource(kind=SourceKind.LIVE, name=self.name, entries=entries)

    def _connect(self) -> Any:
        """
        接続を確立し疎通を確認

        Raises:
            DatabaseConnectionError: 接続に失敗した時
        """
        try:
            connection = self.connector(**self.dsn.connect_kwargs(self.connect_timeout))
        except pymysql.MySQLError as e:
            raise DatabaseConnectionError(f"データベースに接続できません ({self.name}): {e}", dsn=self.name)
        except OSError as e:
            raise DatabaseConnectionError(f"ネットワークエラー ({self.name}): {e}", dsn=self.name)

        try:
            connection.ping(reconnect=False)
        except (pymysql.MySQLError, OSError) as e:
            self._close(connection)
            raise DatabaseConnectionError(f"データベースが応答しません ({self.name}): {e}", dsn=self.name)

        return connection

    def _fetch_variables(self, connection: Any) -> Dict[str, ConfigValue]:
        """
        SHOW VARIABLES を実行

        Raises:
            QueryError: クエリの実行に失敗した時
        """
        entries: Dict[str, ConfigValue] = {}
        try:
            with connection.cursor() as cursor:
                cursor.execute(self.QUERY)
                rows = cursor.fetchall()
        except pymysql.MySQLError as e:
            raise QueryError(
                f"システム変数を取得できません ({self.name}): {e}",
                dsn=self.name,
                query=self.QUERY,
            )

        for row in rows:
            try:
                key, value = row
            except (TypeError, ValueError):
                # 想定外の行はスキップ
                self.logger.warning(f"Skipping malformed row from {self.name}: {row!r}")
                continue
            if isinstance(value, (bytes, bytearray)):
                value = value.decode("utf-8", errors="replace")
            entries[str(key)] = value

        return entries

    def _close(self, connection: Any) -> None:
        """接続を閉じる（失敗はログのみ）"""
        try:
            connection.close()
        except (pymysql.MySQLError, OSError) as e:
            self.logger.debug(f"Failed to close connection to {self.name}: {e}")
