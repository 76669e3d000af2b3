"""比較オーケストレーションサービス"""

from typing import Callable, List, Optional, TextIO
import logging
import time
from pydantic import BaseModel, Field

from ..adapters.cnf_adapter import CnfAdapter
from ..adapters.dsn import DsnParseError
from ..adapters.mysql_adapter import Connector, MySQLAdapter
from ..adapters.source_adapter import SourceReadError, DatabaseConnectionError
from ..domain.diff_detector import DiffDetector
from ..domain.models import ConfigSource, SourceKind
from ..domain.source_ordering import order_sources
from ..infrastructure.output_writer import OutputWriter


class ComparisonRequest(BaseModel):
    """
    比較リクエスト

    Attributes:
        cnf_paths: 設定ファイルのパス（指定順）
        dsns: 稼働中サーバーの接続文字列（指定順）
        base_kind: ベースラインにするソース種別（最初に指定された種別）
        section: 設定ファイルから読み込むセクション
    """
    cnf_paths: List[str] = Field(default_factory=list)
    dsns: List[str] = Field(default_factory=list)
    base_kind: SourceKind = SourceKind.FILE
    section: str = CnfAdapter.DEFAULT_SECTION


class ComparisonResult(BaseModel):
    """
    比較結果サマリー

    Attributes:
        success: 比較が成功したか
        diff_count: 差異のあったキー数
        source_count: 比較したソース数
        errors: エラーメッセージリスト
        execution_time_seconds: 実行時間（秒）
        output: 出力したテキスト
    """
    success: bool
    diff_count: int = 0
    source_count: int = 0
    errors: List[str] = []
    execution_time_seconds: float = 0.0
    output: str = ""


class ComparisonService:
    """
    比較プロセス全体のオーケストレーション

    Responsibilities:
    - アダプター呼び出し、比較ベース選択、差分検知、出力書き込みの調整
    - 接続エラーのリトライ
    - 構造化ログ出力

    すべてのソースを構築し終えてから差分検知を行います。
    1 つでも読み込みに失敗した場合は比較を行いません。
    """

    def __init__(
        self,
        output_writer: OutputWriter,
        diff_detector: Optional[DiffDetector] = None,
        connector: Optional[Connector] = None,
        connect_timeout: int = MySQLAdapter.CONNECT_TIMEOUT,
        max_retries: int = 3,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        ComparisonService を初期化

        Args:
            output_writer: 出力サービス
            diff_detector: 差分検知サービス（None の場合は新規作成）
            connector: データベース接続関数（None の場合は pymysql.connect）
            connect_timeout: 接続タイムアウト（秒）
            max_retries: 接続の最大試行回数
            sleep: リトライ待機関数
        """
        self.output_writer = output_writer
        self.diff_detector = diff_detector or DiffDetector()
        self.connector = connector
        self.connect_timeout = connect_timeout
        self.max_retries = max(1, max_retries)
        self.sleep = sleep
        self.logger = logging.getLogger(__name__)

    def run_comparison(
        self,
        request: ComparisonRequest,
        stream: Optional[TextIO] = None
    ) -> ComparisonResult:
        """
        比較処理を実行

        Args:
            request: 比較リクエスト
            stream: 出力先（None の場合は標準出力）

        Returns:
            ComparisonResult: 比較結果サマリー

        Postconditions: 成功時は差分が出力されている
        """
        start_time = time.time()

        try:
            self.logger.info(
                "Starting configuration comparison",
                extra={
                    "cnf_count": len(request.cnf_paths),
                    "dsn_count": len(request.dsns),
                    "base_kind": request.base_kind.value
                }
            )

            sources = self._load_sources(request)
            ordered = order_sources(sources, request.base_kind)

            if len(ordered) < 2:
                self.logger.warning(
                    f"At least two sources are required for a comparison, got {len(ordered)}"
                )

            diff_result = self.diff_detector.compare(ordered)
            output = self.output_writer.write(diff_result, stream)

            execution_time = time.time() - start_time
            self.logger.info(
                "Comparison completed",
                extra={
                    "source_count": len(ordered),
                    "diff_count": len(diff_result),
                    "execution_time_seconds": execution_time
                }
            )

            return ComparisonResult(
                success=True,
                diff_count=len(diff_result),
                source_count=len(ordered),
                execution_time_seconds=execution_time,
                output=output
            )

        except (SourceReadError, DsnParseError) as e:
            self.logger.error(f"Cannot get configs: {str(e)}")
            return ComparisonResult(
                success=False,
                errors=[str(e)],
                execution_time_seconds=time.time() - start_time
            )

        except Exception as e:
            self.logger.error(f"Comparison failed: {str(e)}", exc_info=True)
            return ComparisonResult(
                success=False,
                errors=[str(e)],
                execution_time_seconds=time.time() - start_time
            )

    def _load_sources(self, request: ComparisonRequest) -> List[ConfigSource]:
        """
        すべての設定ソースを順に構築

        Returns:
            List[ConfigSource]: 設定ファイル → 稼働中サーバー の順（並べ替え前）

        Raises:
            SourceReadError: いずれかのソースの構築に失敗した場合
            DsnParseError: 接続文字列を解釈できない場合
        """
        sources = []

        for path in request.cnf_paths:
            sources.append(CnfAdapter(path, section=request.section).load())

        for dsn in request.dsns:
            adapter = MySQLAdapter(
                dsn,
                connector=self.connector,
                connect_timeout=self.connect_timeout
            )
            sources.append(self._load_with_retry(adapter))

        return sources

    def _load_with_retry(self, adapter: MySQLAdapter) -> ConfigSource:
        """
        リトライ付き読み込み

        Args:
            adapter: 稼働中サーバーアダプター

        Returns:
            ConfigSource: 取得した設定ソース

        Raises:
            DatabaseConnectionError: 最大試行回数後も接続できない場合
            QueryError: クエリが失敗した場合（リトライなし）
        """
        retry_count = 0

        while True:
            try:
                return adapter.load()
            except DatabaseConnectionError as e:
                retry_count += 1
                if retry_count >= self.max_retries:
                    self.logger.error(
                        f"Max retries exceeded for {adapter.name}",
                        extra={"error": str(e)}
                    )
                    raise

                # 指数バックオフ
                sleep_time = 2 ** retry_count
                self.logger.warning(
                    f"Connection error, retrying in {sleep_time}s (attempt {retry_count}/{self.max_retries})",
                    extra={"error": str(e), "dsn": adapter.name}
                )
                self.sleep(sleep_time)
