"""
値正規化ロジック

表記が異なるだけで意味的に同じ設定値 (単位付きサイズ、数値表現、集合の並び順) を
同一の正規形に変換し、差分検知で誤検知しないようにします。
"""

import re
from typing import Callable, List

from .models import ConfigValue


class ValueNormalizer:
    """
    値正規化クラス

    サイズ → 数値 → 集合 の固定順パイプラインで値を正規化する静的メソッドを提供します。
    各段は認識できない入力をそのまま返し、例外を送出しません。
    """

    # 単位サフィックス (1024 のべき乗)
    _SIZE_UNITS = {
        "K": 1024,
        "M": 1024 ** 2,
        "G": 1024 ** 3,
        "T": 1024 ** 4,
        "P": 1024 ** 5,
        "E": 1024 ** 6,
    }

    _SIZE_PATTERN = re.compile(r'^\s*(\d+(?:\.\d+)?)\s*([KMGTPE])B?\s*$', re.IGNORECASE)
    _INTEGER_PATTERN = re.compile(r'^\s*[+-]?\d+\s*$')
    _DECIMAL_PATTERN = re.compile(r'^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?\s*$')

    _SET_SEPARATOR = ","

    @staticmethod
    def normalize(value: ConfigValue) -> ConfigValue:
        """
        値をパイプラインで正規化

        Args:
            value: 正規化前の値

        Returns:
            ConfigValue: 正規化済みの値 (冪等: 2 回適用しても結果は同じ)
        """
        for normalizer in ValueNormalizer.pipeline():
            value = normalizer(value)
        return value

    @staticmethod
    def pipeline() -> List[Callable[[ConfigValue], ConfigValue]]:
        """正規化の適用順 (サイズ → 数値 → 集合)"""
        return [
            ValueNormalizer._normalize_size,
            ValueNormalizer._normalize_number,
            ValueNormalizer._normalize_set,
        ]

    @staticmethod
    def stringify(value: ConfigValue) -> str:
        """
        等値比較に使う正規の文字列表現

        Args:
            value: 値

        Returns:
            str: None は空文字列、真偽値は "true"/"false"、整数値の float は整数表記
        """
        if value is None:
            return ""
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)

    @staticmethod
    def _normalize_size(value: ConfigValue) -> ConfigValue:
        """
        単位付きサイズをバイト数に変換

        対応形式:
        - "16K", "16M", "1G", "2T" など (大文字小文字を問わない)
        - "16MB" のような B 付き表記
        - "1.5G" のような小数表記

        Args:
            value: 正規化前の値

        Returns:
            ConfigValue: バイト数 (int)、認識できない場合は入力そのまま
        """
        if not isinstance(value, str):
            return value

        match = ValueNormalizer._SIZE_PATTERN.match(value)
        if not match:
            return value

        magnitude = float(match.group(1))
        multiplier = ValueNormalizer._SIZE_UNITS[match.group(2).upper()]
        return int(magnitude * multiplier)

    @staticmethod
    def _normalize_number(value: ConfigValue) -> ConfigValue:
        """
        数値らしい文字列を数値に変換

        対応形式:
        - "01", "+5", "-3" → int
        - "10.000000", "1e3" → 整数値なら int
        - "0.5" → float

        Args:
            value: 正規化前の値

        Returns:
            ConfigValue: 数値、認識できない場合は入力そのまま
        """
        # bool は int のサブクラスなので先に除外
        if isinstance(value, bool):
            return value

        if isinstance(value, float):
            return int(value) if value.is_integer() else value

        if not isinstance(value, str):
            return value

        if ValueNormalizer._INTEGER_PATTERN.match(value):
            return int(value)

        if ValueNormalizer._DECIMAL_PATTERN.match(value):
            number = float(value)
            # inf/nan は数値として扱わない
            if number != number or number in (float("inf"), float("-inf")):
                return value
            return int(number) if number.is_integer() else number

        return value

    @staticmethod
    def _normalize_set(value: ConfigValue) -> ConfigValue:
        """
        区切り文字付きの複数値をソート

        "a,b,c" と "c,a,b" を同一視するため、トークンを前後の空白を除いてソートし、
        "," で再結合します。空トークンは除外します。
        空トークンを除いて 1 つだけ残った場合 ("16M," など) は単一値として
        サイズ・数値の正規化を適用します。

        Args:
            value: 正規化前の値

        Returns:
            ConfigValue: ソート済みの文字列、区切り文字がない場合は入力そのまま
        """
        if not isinstance(value, str) or ValueNormalizer._SET_SEPARATOR not in value:
            return value

        tokens = [token.strip() for token in value.split(ValueNormalizer._SET_SEPARATOR)]
        tokens = sorted(token for token in tokens if token)

        if len(tokens) == 1:
            return ValueNormalizer._normalize_number(ValueNormalizer._normalize_size(tokens[0]))
        return ValueNormalizer._SET_SEPARATOR.join(tokens)


def normalize(value: ConfigValue) -> ConfigValue:
    """ValueNormalizer.normalize の関数版"""
    return ValueNormalizer.normalize(value)


def stringify(value: ConfigValue) -> str:
    """ValueNormalizer.stringify の関数版"""
    return ValueNormalizer.stringify(value)
