"""
差分検知ロジック

ベースラインの設定ソースと他の各ソースを双方向に比較し、
値の不一致・キーの欠損を DiffResult に集約します。
"""

import logging
from typing import Sequence

from .models import ConfigSource, DiffResult, MISSING, SourceKind
from .normalizer import ValueNormalizer


class DiffDetector:
    """
    差分検知ロジック

    sources[0] をベースラインとし、それ以外の各ソースと 1 組ずつ比較します。

    稼働中サーバー (SHOW VARIABLES) は設定ファイルよりもはるかに多くのキーを列挙するため、
    種別の異なる組では LIVE 側にしか存在しないキーを欠損として報告しません。
    """

    def __init__(self):
        """DiffDetector を初期化"""
        self.logger = logging.getLogger(__name__)

    def compare(self, sources: Sequence[ConfigSource]) -> DiffResult:
        """
        設定ソース間の差分を検知

        Args:
            sources: 比較する設定ソース (先頭がベースライン)

        Returns:
            DiffResult: 差異のあったキーと値の一覧。
                ソースが 2 つ未満の場合は空の結果

        Note:
            - 前方パス: ベースラインのキーを比較先で参照
            - 逆方向パス: 比較先にしかないキーを検出
            - 値は正規化後の文字列表現で比較する
        """
        result = DiffResult(sources=[source.name for source in sources])

        if len(sources) < 2:
            return result

        baseline = sources[0]
        for other in sources[1:]:
            before = len(result)
            self._compare_forward(baseline, other, result)
            self._compare_reverse(baseline, other, result)
            self.logger.debug(
                f"Compared {baseline.name or baseline.kind.value} with {other.name or other.kind.value}",
                extra={"new_keys": len(result) - before, "total_keys": len(result)}
            )

        return result

    def _compare_forward(
        self,
        baseline: ConfigSource,
        other: ConfigSource,
        result: DiffResult
    ) -> None:
        """ベースライン → 比較先の比較"""
        for key, baseline_value in baseline.entries.items():
            other_value, present = other.lookup(key)

            if not present:
                if self._reports_missing(baseline, other):
                    result.add(key, baseline_value, MISSING)
                continue

            baseline_value = ValueNormalizer.normalize(baseline_value)
            other_value = ValueNormalizer.normalize(other_value)

            if ValueNormalizer.stringify(baseline_value) != ValueNormalizer.stringify(other_value):
                result.add(key, baseline_value, other_value)

    def _compare_reverse(
        self,
        baseline: ConfigSource,
        other: ConfigSource,
        result: DiffResult
    ) -> None:
        """比較先 → ベースラインの比較 (比較先にしかないキーのみ)"""
        for key, other_value in other.entries.items():
            if key in baseline:
                continue
            if self._reports_missing(other, baseline):
                result.add(key, MISSING, other_value)

    @staticmethod
    def _reports_missing(owner: ConfigSource, counterpart: ConfigSource) -> bool:
        """
        owner にだけ存在するキーを欠損として報告するか

        Args:
            owner: キーを持っている側のソース
            counterpart: キーを持っていない側のソース

        Returns:
            bool: owner が LIVE かつ種別が異なる組の場合のみ False
        """
        return owner.kind != SourceKind.LIVE or owner.kind == counterpart.kind


def compare(sources: Sequence[ConfigSource]) -> DiffResult:
    """DiffDetector().compare の関数版"""
    return DiffDetector().compare(sources)
