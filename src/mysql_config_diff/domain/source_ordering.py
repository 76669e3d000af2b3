"""
比較ベース選択

どの種別のソースをベースラインにするかで非対称ルールの結果が変わるため、
運用者が最初に指定したソース種別に従ってソースを並べ替えます。
"""

from typing import List, Sequence

from .models import ConfigSource, SourceKind


def order_sources(
    sources: Sequence[ConfigSource],
    base_kind: SourceKind = SourceKind.FILE
) -> List[ConfigSource]:
    """
    ベース種別のソースを先頭に並べ替え

    Args:
        sources: 入力順の設定ソース
        base_kind: ベースラインにする種別 (最初に指定された種別)

    Returns:
        List[ConfigSource]: base_kind のソース → それ以外のソース の順。
            同じ種別内では入力順を保持する
    """
    leading = [source for source in sources if source.kind == base_kind]
    trailing = [source for source in sources if source.kind != base_kind]
    return leading + trailing
