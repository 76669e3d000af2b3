"""DSN 解析のユニットテスト"""

import pytest

from src.mysql_config_diff.adapters.dsn import (
    DsnConfig,
    DsnParseError,
    parse_dsn,
    parse_driver_dsn,
    parse_legacy_dsn,
)


class TestParseDriverDsn:
    """Go MySQL ドライバー形式の解析テスト"""

    def test_full_dsn(self):
        """ユーザー・パスワード・アドレス・DB・パラメーターを解析"""
        dsn = parse_driver_dsn("root:secret@tcp(10.0.0.1:3307)/mysql?charset=utf8mb4")
        assert dsn.user == "root"
        assert dsn.password == "secret"
        assert dsn.net == "tcp"
        assert dsn.host == "10.0.0.1"
        assert dsn.port == 3307
        assert dsn.database == "mysql"
        assert dsn.params == {"charset": "utf8mb4"}

    def test_minimal_dsn_uses_defaults(self):
        """'/' のみの DSN は既定の接続先"""
        dsn = parse_driver_dsn("/")
        assert dsn.net == "tcp"
        assert dsn.address == "127.0.0.1:3306"
        assert dsn.user == ""

    def test_address_without_port_gets_default_port(self):
        """ポートなしのアドレスには 3306 を補う"""
        dsn = parse_driver_dsn("root@tcp(db.example.com)/")
        assert dsn.address == "db.example.com:3306"

    def test_password_may_contain_at_sign(self):
        """パスワードに '@' を含められること"""
        dsn = parse_driver_dsn("root:p@ss@tcp(127.0.0.1:3306)/")
        assert dsn.user == "root"
        assert dsn.password == "p@ss"

    def test_unix_socket(self):
        """unix ソケット接続"""
        dsn = parse_driver_dsn("root@unix(/var/run/mysqld/mysqld.sock)/")
        assert dsn.net == "unix"
        assert dsn.address == "/var/run/mysqld/mysqld.sock"

    def test_ipv6_address(self):
        """IPv6 アドレス"""
        dsn = parse_driver_dsn("root@tcp([::1]:3307)/")
        assert dsn.host == "::1"
        assert dsn.port == 3307

    def test_unbracketed_ipv6_address_gets_default_port(self):
        """括弧なしの IPv6 アドレスは括弧で囲んでポートを補う"""
        dsn = parse_driver_dsn("root@tcp(::1)/")
        assert dsn.address == "[::1]:3306"
        assert dsn.host == "::1"
        assert dsn.port == 3306
        assert dsn.connect_kwargs()["host"] == "::1"

    def test_bracketed_ipv6_address_without_port(self):
        """括弧付きで IPv6 アドレスにポートがない場合も補う"""
        dsn = parse_driver_dsn("root@tcp([fe80::1])/")
        assert dsn.address == "[fe80::1]:3306"
        assert dsn.host == "fe80::1"

    @pytest.mark.parametrize("value", [
        "h=127.0.0.1,P=3306",
        "root@tcp(127.0.0.1:3306/",
        "root@localhost:3306/db",
        "root@udp(127.0.0.1)/",
    ])
    def test_invalid_driver_dsn_raises(self, value):
        """ドライバー形式として不正な DSN は DsnParseError"""
        with pytest.raises(DsnParseError):
            parse_driver_dsn(value)


class TestParseLegacyDsn:
    """レガシー形式の解析テスト"""

    def test_full_legacy_dsn(self):
        """すべてのキーを解析"""
        dsn = parse_legacy_dsn("h=10.0.0.1,P=3307,u=root,p=secret,D=mysql")
        assert dsn.host == "10.0.0.1"
        assert dsn.port == 3307
        assert dsn.user == "root"
        assert dsn.password == "secret"
        assert dsn.database == "mysql"

    def test_non_numeric_port_is_ignored(self):
        """数値でないポートは無視して既定値"""
        dsn = parse_legacy_dsn("h=10.0.0.1,P=abc")
        assert dsn.port == 3306

    def test_key_order_does_not_matter(self):
        """P が h より先でもポートが保持されること"""
        dsn = parse_legacy_dsn("P=3307,h=10.0.0.1")
        assert dsn.address == "10.0.0.1:3307"

    def test_socket_selects_unix(self):
        """S を指定すると unix 接続"""
        dsn = parse_legacy_dsn("S=/tmp/mysql.sock,u=root")
        assert dsn.net == "unix"
        assert dsn.address == "/tmp/mysql.sock"

    def test_short_parts_are_skipped(self):
        """3 文字未満の要素は無視されること"""
        dsn = parse_legacy_dsn("h=db1,x,P=")
        assert dsn.host == "db1"
        assert dsn.port == 3306

    def test_unrecognized_legacy_dsn_raises(self):
        """認識できるキーがない場合は DsnParseError"""
        with pytest.raises(DsnParseError):
            parse_legacy_dsn("not a dsn")


class TestParseDsn:
    """parse_dsn のテスト"""

    def test_driver_format_is_tried_first(self):
        """ドライバー形式として解析できればそれを使う"""
        dsn = parse_dsn("root:secret@tcp(127.0.0.1:3306)/")
        assert dsn.user == "root"

    def test_falls_back_to_legacy_format(self):
        """ドライバー形式で失敗した場合はレガシー形式"""
        dsn = parse_dsn("h=127.0.0.1,P=3306,u=root")
        assert dsn.user == "root"
        assert dsn.address == "127.0.0.1:3306"

    def test_unparseable_dsn_raises_value_error(self):
        """どちらでも解析できない場合は ValueError 互換の DsnParseError"""
        with pytest.raises(ValueError):
            parse_dsn("garbage")


class TestDsnConfig:
    """DsnConfig のテスト"""

    def test_connect_kwargs_tcp(self):
        """TCP 接続の connect() 引数"""
        dsn = DsnConfig(user="root", password="secret", address="10.0.0.1:3307",
                        database="mysql", params={"charset": "utf8mb4"})
        assert dsn.connect_kwargs(connect_timeout=5) == {
            "user": "root",
            "password": "secret",
            "database": "mysql",
            "connect_timeout": 5,
            "host": "10.0.0.1",
            "port": 3307,
            "charset": "utf8mb4",
        }

    def test_connect_kwargs_unix(self):
        """unix ソケット接続の connect() 引数"""
        dsn = DsnConfig(net="unix", address="/tmp/mysql.sock")
        kwargs = dsn.connect_kwargs()
        assert kwargs["unix_socket"] == "/tmp/mysql.sock"
        assert "host" not in kwargs
        assert kwargs["user"] is None
        assert kwargs["database"] is None

    def test_display_name_hides_password(self):
        """表示名にパスワードを含まないこと"""
        dsn = parse_dsn("root:secret@tcp(127.0.0.1:3306)/")
        assert dsn.display_name == "root@127.0.0.1:3306"
        assert "secret" not in dsn.display_name

    def test_display_name_without_user(self):
        """ユーザーなしの表示名"""
        assert DsnConfig(address="db1:3306").display_name == "db1:3306"
