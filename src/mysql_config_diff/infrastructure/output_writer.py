"""差分出力コンポーネント"""

import json
import sys
from typing import Callable, Dict, List, Optional, TextIO

from ..domain.models import DiffResult
from ..domain.normalizer import ValueNormalizer


class OutputWriter:
    """
    差分検知結果を運用者向けのテキストとして出力

    Responsibilities:
    - DiffResult をプレーンテキスト表または JSON に整形
    - 出力先ストリームへの書き込み

    対応形式:
    - plain: キー列と値列を揃えた表（差分なしの場合は何も出力しない）
    - json: 1 行の JSON オブジェクト
    - prettyJson: インデント付き JSON
    """

    FORMATS = ("plain", "json", "prettyJson")
    DEFAULT_FORMAT = "plain"

    COLUMN_SEPARATOR = "  "

    def __init__(self, output_format: str = DEFAULT_FORMAT):
        """
        OutputWriter を初期化

        Args:
            output_format: 出力形式

        Raises:
            ValueError: 未対応の出力形式が指定された場合
        """
        renderers: Dict[str, Callable[[DiffResult], str]] = {
            "plain": self._format_plain,
            "json": self._format_json,
            "prettyJson": self._format_pretty_json,
        }
        if output_format not in renderers:
            raise ValueError(
                f"未対応の出力形式です: {output_format} ({', '.join(self.FORMATS)} のいずれか)"
            )
        self.output_format = output_format
        self._render = renderers[output_format]

    def format(self, diff_result: DiffResult) -> str:
        """
        差分検知結果を整形

        Args:
            diff_result: 差分検知結果

        Returns:
            str: 整形済みテキスト
        """
        return self._render(diff_result)

    def write(self, diff_result: DiffResult, stream: Optional[TextIO] = None) -> str:
        """
        差分検知結果を整形してストリームに書き込み

        Args:
            diff_result: 差分検知結果
            stream: 出力先（None の場合は標準出力）

        Returns:
            str: 書き込んだテキスト
        """
        output = self.format(diff_result)
        stream = stream or sys.stdout
        stream.write(output)
        stream.flush()
        return output

    def _format_plain(self, diff_result: DiffResult) -> str:
        """キーと値を列揃えした表"""
        if diff_result.is_empty:
            return ""

        rows: List[List[str]] = [
            [key] + [ValueNormalizer.stringify(value) for value in diff_result.differences[key]]
            for key in diff_result.keys()
        ]
        column_count = max(len(row) for row in rows)
        widths = [
            max(len(row[i]) for row in rows if i < len(row))
            for i in range(column_count)
        ]

        lines = []
        for row in rows:
            cells = [cell.ljust(widths[i]) for i, cell in enumerate(row)]
            lines.append(self.COLUMN_SEPARATOR.join(cells).rstrip())
        return "\n".join(lines) + "\n"

    def _format_json(self, diff_result: DiffResult) -> str:
        """1 行の JSON"""
        return json.dumps(diff_result.differences, ensure_ascii=False, sort_keys=True) + "\n"

    def _format_pretty_json(self, diff_result: DiffResult) -> str:
        """インデント付き JSON"""
        return json.dumps(diff_result.differences, ensure_ascii=False, sort_keys=True, indent=2) + "\n"
