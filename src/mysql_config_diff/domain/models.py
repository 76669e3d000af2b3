"""
データモデル定義

このモジュールは mysql-config-diff のドメイン層のデータモデルを定義します:
- SourceKind: 設定ソースの種別 (設定ファイル / 稼働中サーバー)
- ConfigSource: 1 つの設定ソースから取得したキー・値の集合
- DiffResult: ソース間で差異のあったキーと値の一覧
"""

from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ソースが値を持たないことを表すセンチネル
MISSING = "<Missing>"

# 設定値はソースによって文字列・整数・真偽値のいずれかで届く
ConfigValue = Optional[Union[bool, int, float, str]]


class SourceKind(str, Enum):
    """設定ソース種別"""
    FILE = "cnf"
    LIVE = "mysql"


class ConfigSource(BaseModel):
    """
    設定ソース

    設定ファイル・稼働中サーバーのどちらから取得したかに関わらず、
    キー・値の集合を統一的な読み取り専用ビューとして提供します。
    構築時にすべてのエントリが確定し、以降は変更されません。
    """

    model_config = ConfigDict(frozen=True)

    kind: SourceKind = Field(..., description="ソース種別 (差分の非対称ルールに使用)")
    name: str = Field(default="", description="表示用ラベル (ファイルパスや接続先)")
    entries: Mapping[str, ConfigValue] = Field(
        default_factory=dict,
        validate_default=True,
        description="キー (大文字小文字を区別) から値へのマッピング"
    )

    @field_validator("entries")
    @classmethod
    def freeze_entries(cls, v: Mapping[str, ConfigValue]) -> Mapping[str, ConfigValue]:
        """
        エントリを読み取り専用ビューに変換

        構築時の辞書をコピーするため、呼び出し側が元の辞書を変更しても影響しません。
        """
        return MappingProxyType(dict(v))

    def lookup(self, key: str) -> Tuple[ConfigValue, bool]:
        """
        単一キーを参照

        Args:
            key: 設定キー

        Returns:
            Tuple[ConfigValue, bool]: (値, 存在するか)。
                存在しない場合はエラーではなく (None, False) を返す
        """
        if key in self.entries:
            return self.entries[key], True
        return None, False

    def __contains__(self, key: str) -> bool:
        return key in self.entries

    def __len__(self) -> int:
        return len(self.entries)


class DiffResult(BaseModel):
    """
    差分検知結果

    差異のあったキーごとに、比較したソースの値を順番に保持します。
    先頭要素は常に最初の不一致を記録した時点のベースラインの値です。
    """

    differences: Dict[str, List[ConfigValue]] = Field(
        default_factory=dict,
        description="キーから値リストへのマッピング (欠損は '<Missing>')"
    )
    sources: List[str] = Field(
        default_factory=list,
        description="比較したソースの表示名 (比較順)"
    )

    def add(self, key: str, baseline_value: ConfigValue, other_value: ConfigValue) -> None:
        """
        差異を追記

        初回はベースラインの値と比較先の値の両方を記録し、
        2 回目以降は比較先の値のみを末尾に追加します (上書きしない)。

        Args:
            key: 設定キー
            baseline_value: ベースライン側の値
            other_value: 比較先ソース側の値
        """
        if key not in self.differences:
            self.differences[key] = [baseline_value]
        self.differences[key].append(other_value)

    def keys(self) -> List[str]:
        """差異のあったキーをソートして返す"""
        return sorted(self.differences)

    @property
    def is_empty(self) -> bool:
        return not self.differences

    def __len__(self) -> int:
        return len(self.differences)
