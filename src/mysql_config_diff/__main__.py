"""CLI エントリーポイント"""

import argparse
import sys
import logging
import os
from typing import List, Optional

from .orchestration.comparison_service import ComparisonService, ComparisonRequest
from .adapters.cnf_adapter import CnfAdapter
from .adapters.dsn import DsnParseError, parse_dsn
from .adapters.mysql_adapter import MySQLAdapter
from .domain.models import SourceKind
from .infrastructure.output_writer import OutputWriter


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_MAX_RETRIES = 3


class SourceAction(argparse.Action):
    """
    --cnf / --dsn 用のアクション

    値をリストに追加し、最初に指定されたソース種別を base_kind として記録します。
    """

    def __call__(self, parser, namespace, values, option_string=None):
        items = list(getattr(namespace, self.dest, None) or [])
        items.append(values)
        setattr(namespace, self.dest, items)
        if getattr(namespace, "base_kind", None) is None:
            namespace.base_kind = self.const


def dsn_argument(value: str) -> str:
    """DSN 引数のバリデーション（どちらの形式でも解釈できること）"""
    try:
        parse_dsn(value)
    except DsnParseError as e:
        raise argparse.ArgumentTypeError(f"invalid DSN {value!r}: {e}")
    return value


def build_parser() -> argparse.ArgumentParser:
    """引数パーサーを生成"""
    parser = argparse.ArgumentParser(
        prog="mysql-config-diff",
        description=(
            "Compare MySQL option files and live server variables. "
            "The kind of the first source given (--cnf or --dsn) is used as the comparison base."
        ),
    )
    parser.add_argument(
        "-c", "--cnf",
        dest="cnf_paths",
        metavar="FILE",
        action=SourceAction,
        const=SourceKind.FILE,
        default=[],
        help="cnf file name (repeatable)",
    )
    parser.add_argument(
        "-d", "--dsn",
        dest="dsns",
        metavar="DSN",
        action=SourceAction,
        const=SourceKind.LIVE,
        type=dsn_argument,
        default=[],
        help="full db dsn, e.g. user:pass@tcp(127.1:3306)/ or h=127.1,P=3306,u=user (repeatable)",
    )
    parser.add_argument(
        "-o", "--output",
        dest="output_format",
        choices=OutputWriter.FORMATS,
        default=OutputWriter.DEFAULT_FORMAT,
        help="Output formatting. Could be json, prettyJson or plain.",
    )
    parser.add_argument(
        "--section",
        default=CnfAdapter.DEFAULT_SECTION,
        help="cnf section to read (default: %(default)s)",
    )
    parser.set_defaults(base_kind=None)
    return parser


def _env_int(name: str, default: int, logger: logging.Logger) -> int:
    """整数の環境変数を読み込み（不正な値は既定値）"""
    raw = os.environ.get(name, "")
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Invalid value for {name}: {raw!r}, using {default}")
        return default


def main(argv: Optional[List[str]] = None):
    """
    CLI エントリーポイント

    Usage:
        python -m mysql_config_diff --cnf /etc/my.cnf --dsn 'root:pass@tcp(127.0.0.1:3306)/'

    Exit codes:
        0: 成功（差分の有無によらない）
        1: 失敗
        2: 引数エラー
    """
    args = build_parser().parse_args(argv)

    level_name = os.environ.get("MYSQL_CONFIG_DIFF_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
    if not isinstance(logging.getLevelName(level_name), int):
        level_name = DEFAULT_LOG_LEVEL

    # ロギング設定（標準出力は差分専用のため stderr に出す）
    logging.basicConfig(
        level=level_name,
        format=LOG_FORMAT,
        stream=sys.stderr
    )
    logger = logging.getLogger(__name__)

    try:
        # 接続設定を環境変数から読み込み
        connect_timeout = _env_int(
            "MYSQL_CONFIG_DIFF_CONNECT_TIMEOUT", MySQLAdapter.CONNECT_TIMEOUT, logger
        )
        max_retries = _env_int("MYSQL_CONFIG_DIFF_MAX_RETRIES", DEFAULT_MAX_RETRIES, logger)

        output_writer = OutputWriter(args.output_format)
        service = ComparisonService(
            output_writer=output_writer,
            connect_timeout=connect_timeout,
            max_retries=max_retries
        )

        request = ComparisonRequest(
            cnf_paths=args.cnf_paths,
            dsns=args.dsns,
            base_kind=args.base_kind or SourceKind.FILE,
            section=args.section
        )
        result = service.run_comparison(request)

        if result.success:
            logger.info(
                f"Comparison completed successfully: "
                f"{result.source_count} sources compared, "
                f"{result.diff_count} differences"
            )
            sys.exit(0)
        else:
            logger.error(
                f"Comparison failed: {', '.join(result.errors)}"
            )
            sys.exit(1)

    except Exception as e:
        logger.error(f"Unexpected error: {str(e)}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
