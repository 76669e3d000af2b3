"""
設定ファイルアダプター

MySQL のオプションファイル (my.cnf) から指定セクションの設定を読み込むアダプターです。
"""

import configparser
import logging
from pathlib import Path
from typing import Dict, Union

from .source_adapter import SourceAdapter, CnfReadError
from ..domain.models import ConfigSource, ConfigValue, SourceKind


class CnfAdapter(SourceAdapter):
    """
    MySQL オプションファイル向け読み込み実装

    [mysqld] セクション (既定) のキーを読み込み、稼働中サーバーの
    SHOW VARIABLES と比較できる形のキー名に揃えます。
    """

    DEFAULT_SECTION = "mysqld"

    # 値なしキー (skip-name-resolve など) に割り当てる値
    BOOLEAN_KEY_VALUE = "true"

    # mysqld は未知のオプションを無視する接頭辞を受け付ける
    LOOSE_PREFIX = "loose_"

    # [DEFAULT] を通常のセクションとして扱うため、cnf に現れない名前を既定セクションにする
    _PARSER_DEFAULT_SECTION = "\x00"

    def __init__(self, path: Union[str, Path], section: str = DEFAULT_SECTION):
        """
        Args:
            path: オプションファイルのパス
            section: 読み込むセクション名
        """
        super().__init__(name=str(path))
        self.path = Path(path)
        self.section = section
        self.logger = logging.getLogger(__name__)

    def load(self) -> ConfigSource:
        """
        オプションファイルを読み込み

        Returns:
            ConfigSource: kind=FILE の設定ソース

        Raises:
            CnfReadError: ファイルが存在しない・読み込めない・構文が不正な時
        """
        text = self._read_text()
        parser = self._build_parser()

        try:
            parser.read_string(self._strip_directives(text), source=str(self.path))
        except configparser.MissingSectionHeaderError as e:
            raise CnfReadError(
                f"セクションヘッダーがありません: {self.path} (line {e.lineno})",
                path=str(self.path),
                line=e.lineno,
            )
        except configparser.ParsingError as e:
            line = e.errors[0][0] if e.errors else None
            raise CnfReadError(
                f"設定ファイルの構文エラー: {self.path} (line {line})",
                path=str(self.path),
                line=line,
            )
        except configparser.Error as e:
            raise CnfReadError(
                f"設定ファイルの読み込みエラー: {self.path}: {e}",
                path=str(self.path),
            )

        if not parser.has_section(self.section):
            self.logger.warning(
                f"Section [{self.section}] not found in {self.path}",
                extra={"path": str(self.path)}
            )
            return ConfigSource(kind=SourceKind.FILE, name=self.name, entries={})

        entries: Dict[str, ConfigValue] = {}
        for key, value in parser.items(self.section):
            entries[self._normalize_key(key)] = self._normalize_value(value)

        self.logger.info(
            f"Loaded {len(entries)} settings from {self.path}",
            extra={"path": str(self.path), "section": self.section}
        )
        return ConfigSource(kind=SourceKind.FILE, name=self.name, entries=entries)

    def _read_text(self) -> str:
        """
        ファイル内容を読み込み

        Raises:
            CnfReadError: ファイルが存在しない・読み込めない時
        """
        if not self.path.is_file():
            raise CnfReadError(f"設定ファイルが見つかりません: {self.path}", path=str(self.path))

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise CnfReadError(f"設定ファイルを読み込めません: {self.path}: {e}", path=str(self.path))

    @staticmethod
    def _build_parser() -> configparser.ConfigParser:
        """my.cnf の書式に合わせた ConfigParser を生成"""
        parser = configparser.ConfigParser(
            allow_no_value=True,
            strict=False,
            comment_prefixes=("#", ";"),
            inline_comment_prefixes=("#",),
            interpolation=None,
            default_section=CnfAdapter._PARSER_DEFAULT_SECTION,
        )
        # キーの大文字小文字を保持
        parser.optionxform = str
        return parser

    @staticmethod
    def _strip_directives(text: str) -> str:
        """
        !include / !includedir ディレクティブを除去

        行番号を維持するため、空行に置き換えます。
        """
        return "\n".join(
            "" if line.lstrip().startswith("!") else line
            for line in text.splitlines()
        )

    @classmethod
    def _normalize_key(cls, key: str) -> str:
        """
        オプション名をシステム変数名に揃える

        - "-" と "_" は mysqld では同一視されるため "_" に統一
        - "loose_" 接頭辞を除去
        """
        key = key.strip().replace("-", "_")
        if key.startswith(cls.LOOSE_PREFIX) and len(key) > len(cls.LOOSE_PREFIX):
            key = key[len(cls.LOOSE_PREFIX):]
        return key

    @classmethod
    def _normalize_value(cls, value: Union[str, None]) -> ConfigValue:
        """
        値を整形

        - 値なしキーは真偽値キーとして "true"
        - 前後の引用符を除去
        """
        if value is None:
            return cls.BOOLEAN_KEY_VALUE

        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
            value = value[1:-1]
        return value
