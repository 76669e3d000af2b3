"""
DiffDetector のユニットテスト

ベースラインと各ソースの双方向比較、種別による非対称ルール、
値の正規化を通した比較を検証します。
"""

import pytest

from src.mysql_config_diff.domain.diff_detector import DiffDetector, compare
from src.mysql_config_diff.domain.models import ConfigSource, DiffResult, MISSING, SourceKind


def create_source(kind: SourceKind, name: str = "", **entries) -> ConfigSource:
    """テスト用 ConfigSource を作成するヘルパー"""
    return ConfigSource(kind=kind, name=name, entries=entries)


def cnf(**entries) -> ConfigSource:
    return create_source(SourceKind.FILE, "my.cnf", **entries)


def live(**entries) -> ConfigSource:
    return create_source(SourceKind.LIVE, "root@127.0.0.1:3306", **entries)


class TestDegenerateInput:
    """ソースが 2 つ未満の場合のテスト"""

    def test_no_sources_yields_empty_diff(self):
        """ソースなしは空の結果"""
        result = DiffDetector().compare([])
        assert isinstance(result, DiffResult)
        assert result.is_empty

    def test_single_source_yields_empty_diff(self):
        """ソース 1 つは空の結果（エラーにならない）"""
        result = DiffDetector().compare([cnf(port="3306")])
        assert result.is_empty


class TestEqualSources:
    """同一ソースの比較テスト"""

    @pytest.mark.parametrize("kind", [SourceKind.FILE, SourceKind.LIVE])
    def test_identical_sources_yield_empty_diff(self, kind):
        """同じ種別・同じエントリの比較は差分なし"""
        a = create_source(kind, "a", port="3306", sql_mode="A,B")
        b = create_source(kind, "b", port="3306", sql_mode="A,B")
        assert compare([a, b]).is_empty

    def test_cosmetic_differences_are_ignored(self):
        """表記違いの同値は差分にならない"""
        a = cnf(key_buffer_size="16M", server_id="01", sql_mode="c,a,b")
        b = cnf(key_buffer_size="16777216", server_id="1", sql_mode="a,b,c")
        assert compare([a, b]).is_empty


class TestValueMismatch:
    """値の不一致検知のテスト"""

    def test_mismatch_records_normalized_values(self):
        """不一致は正規化後の値で記録されること"""
        result = compare([cnf(max_connections="0100"), cnf(max_connections="151")])
        assert result.differences == {"max_connections": [100, 151]}

    def test_mismatch_between_file_and_live(self):
        """種別の異なる組でも値の不一致は報告されること"""
        result = compare([cnf(binlog_format="ROW"), live(binlog_format="MIXED")])
        assert result.differences == {"binlog_format": ["ROW", "MIXED"]}


class TestBidirectionalMissingKeys:
    """双方向の欠損キー検知のテスト"""

    def test_missing_keys_in_both_directions(self):
        """ベースラインのみ・比較先のみのキーを両方検知すること"""
        baseline = cnf(a=1, b=2)
        other = cnf(a=1, c=3)

        result = compare([baseline, other])

        assert result.differences == {
            "b": [2, MISSING],
            "c": [MISSING, 3],
        }

    def test_missing_value_keeps_raw_baseline_value(self):
        """欠損時のベースライン値は正規化前のまま記録されること"""
        result = compare([cnf(key_buffer_size="16M"), cnf()])
        assert result.differences == {"key_buffer_size": ["16M", MISSING]}

    def test_live_vs_live_reports_absence(self):
        """同じ種別 (LIVE 同士) では欠損を常に報告すること"""
        result = compare([live(a="1", only_first="x"), live(a="1", only_second="y")])
        assert result.differences == {
            "only_first": ["x", MISSING],
            "only_second": [MISSING, "y"],
        }


class TestAsymmetryRule:
    """種別による非対称ルールのテスト"""

    def test_live_baseline_key_missing_in_file_is_excused(self):
        """LIVE ベースラインにしかないキーは FILE との比較で報告しない"""
        result = compare([live(port="3306", wait_timeout="28800"), cnf(port="3306")])
        assert "wait_timeout" not in result.differences
        assert result.is_empty

    def test_file_baseline_key_missing_in_live_is_reported(self):
        """FILE ベースラインにしかないキーは LIVE との比較で必ず報告する"""
        result = compare([cnf(port="3306", skip_name_resolve="true"), live(port="3306")])
        assert result.differences == {"skip_name_resolve": ["true", MISSING]}

    def test_live_only_key_in_comparison_is_excused(self):
        """比較先 LIVE にしかないキーは FILE ベースラインとの比較で報告しない"""
        result = compare([cnf(port="3306"), live(port="3306", wait_timeout="28800")])
        assert result.is_empty

    def test_file_only_key_in_comparison_is_reported(self):
        """比較先 FILE にしかないキーは LIVE ベースラインとの比較でも報告する"""
        result = compare([live(port="3306"), cnf(port="3306", innodb_foo="1")])
        assert result.differences == {"innodb_foo": [MISSING, "1"]}

    def test_rule_uses_kind_of_each_compared_pair(self):
        """非対称ルールは各比較の組の種別で判定されること"""
        baseline = live(port="3306", wait_timeout="28800")
        same_kind = live(port="3306")
        other_kind = cnf(port="3306")

        result = compare([baseline, other_kind, same_kind])

        assert result.differences == {"wait_timeout": ["28800", MISSING]}


class TestScenario:
    """FILE ベースラインと LIVE の比較シナリオ"""

    def test_numeric_representations_and_live_only_keys(self):
        """型の異なる数値表現は一致し、LIVE のみのキーは除外されること"""
        sources = [
            cnf(port=3306, max_connections="100"),
            live(port="3306", max_connections=100, wait_timeout=28800),
        ]
        assert compare(sources).is_empty


class TestAccumulation:
    """複数ソース比較時の値の蓄積テスト"""

    def test_values_accumulate_across_rounds(self):
        """複数の比較先での不一致が同じキーに追記されること"""
        baseline = cnf(max_connections="100")
        result = compare([
            baseline,
            cnf(max_connections="151"),
            cnf(max_connections="200"),
        ])
        assert result.differences == {"max_connections": [100, 151, 200]}

    def test_key_first_seen_in_later_round(self):
        """後の比較で初めて不一致になったキーはその時点で先頭にベースライン値を持つこと"""
        result = compare([
            cnf(a="1", b="2"),
            cnf(a="1", b="2"),
            cnf(a="1", b="3"),
        ])
        assert result.differences == {"b": [2, 3]}

    def test_sources_names_are_recorded(self):
        """比較したソースの表示名が順に記録されること"""
        result = compare([cnf(a="1"), live(a="1")])
        assert result.sources == ["my.cnf", "root@127.0.0.1:3306"]
