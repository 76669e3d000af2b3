"""
DSN 解析

接続文字列を DsnConfig に変換します。次の 2 形式に対応します:
- Go MySQL ドライバー形式: [user[:password]@][net[(addr)]]/dbname[?param=value&...]
- レガシー形式: h=host,P=port,u=user,p=pass,D=db,S=socket
"""

from typing import Any, Dict, Optional
from urllib.parse import parse_qsl

from pydantic import BaseModel, Field


DEFAULT_PORT = 3306
DEFAULT_TCP_ADDRESS = f"127.0.0.1:{DEFAULT_PORT}"
DEFAULT_UNIX_ADDRESS = "/tmp/mysql.sock"

_SUPPORTED_NETS = ("tcp", "unix")


class DsnParseError(ValueError):
    """
    DSN 解析エラー例外

    どちらの形式としても解釈できない接続文字列を表します。
    """

    def __init__(self, message: str, dsn: Optional[str] = None):
        """
        Args:
            message: エラーメッセージ
            dsn: 解析に失敗した接続文字列
        """
        super().__init__(message)
        self.dsn = dsn


class DsnConfig(BaseModel):
    """
    接続設定

    PyMySQL の connect() に渡す接続パラメーターを保持します。
    """

    user: str = Field(default="", description="ユーザー名")
    password: str = Field(default="", description="パスワード")
    net: str = Field(default="tcp", description="接続方式 ('tcp' または 'unix')")
    address: str = Field(default=DEFAULT_TCP_ADDRESS, description="host:port またはソケットパス")
    database: str = Field(default="", description="データベース名")
    params: Dict[str, str] = Field(default_factory=dict, description="追加パラメーター")

    @property
    def host(self) -> str:
        """TCP 接続のホスト名"""
        host, _, _ = self._split_address()
        return host

    @property
    def port(self) -> int:
        """TCP 接続のポート番号"""
        _, _, port = self._split_address()
        return int(port) if port else DEFAULT_PORT

    @property
    def display_name(self) -> str:
        """ログ・出力用の表示名 (パスワードを含まない)"""
        target = f"{self.host}:{self.port}" if self.net == "tcp" else self.address
        return f"{self.user}@{target}" if self.user else target

    def connect_kwargs(self, connect_timeout: int = 10) -> Dict[str, Any]:
        """
        PyMySQL の connect() 用キーワード引数を生成

        Args:
            connect_timeout: 接続タイムアウト (秒)

        Returns:
            Dict[str, Any]: connect() に渡す引数
        """
        kwargs: Dict[str, Any] = {
            "user": self.user or None,
            "password": self.password,
            "database": self.database or None,
            "connect_timeout": connect_timeout,
        }
        if self.net == "unix":
            kwargs["unix_socket"] = self.address
        else:
            kwargs["host"] = self.host
            kwargs["port"] = self.port
        if "charset" in self.params:
            kwargs["charset"] = self.params["charset"]
        return kwargs

    def _split_address(self):
        # "[::1]:3306" のような IPv6 表記に対応
        if self.address.startswith("["):
            host, _, rest = self.address[1:].partition("]")
            return host, ":", rest.lstrip(":")
        if self.address.count(":") == 1:
            return self.address.partition(":")
        return self.address, "", ""


def parse_dsn(value: str) -> DsnConfig:
    """
    接続文字列を解析

    まず Go MySQL ドライバー形式として解析し、失敗した場合はレガシー形式として解析します。

    Args:
        value: 接続文字列

    Returns:
        DsnConfig: 接続設定

    Raises:
        DsnParseError: どちらの形式としても解釈できない場合
    """
    try:
        return parse_driver_dsn(value)
    except DsnParseError:
        return parse_legacy_dsn(value)


def parse_driver_dsn(value: str) -> DsnConfig:
    """
    Go MySQL ドライバー形式の DSN を解析

    例: "root:secret@tcp(127.0.0.1:3306)/mysql?charset=utf8mb4"

    Raises:
        DsnParseError: 形式が不正な場合
    """
    slash = value.rfind("/")
    if slash < 0:
        raise DsnParseError("データベース名の区切り '/' がありません", dsn=value)

    head, tail = value[:slash], value[slash + 1:]
    database, _, query = tail.partition("?")

    user = password = ""
    at = head.rfind("@")
    if at >= 0:
        user, _, password = head[:at].partition(":")
        head = head[at + 1:]

    net, address = head, ""
    paren = head.find("(")
    if paren >= 0:
        if not head.endswith(")"):
            raise DsnParseError("アドレスの括弧が閉じていません", dsn=value)
        net, address = head[:paren], head[paren + 1:-1]
    elif "@" in head or ":" in head:
        raise DsnParseError("接続方式が不正です", dsn=value)

    net = net or "tcp"
    if net not in _SUPPORTED_NETS:
        raise DsnParseError(f"未対応の接続方式です: {net}", dsn=value)

    if not address:
        address = DEFAULT_TCP_ADDRESS if net == "tcp" else DEFAULT_UNIX_ADDRESS
    elif net == "tcp" and not _has_port(address):
        # 括弧なしの IPv6 アドレスは括弧で囲んでからポートを補う
        if ":" in address and not address.startswith("["):
            address = f"[{address}]"
        address = f"{address}:{DEFAULT_PORT}"

    try:
        params = dict(parse_qsl(query, keep_blank_values=True, strict_parsing=bool(query)))
    except ValueError:
        raise DsnParseError("パラメーターの形式が不正です", dsn=value)

    return DsnConfig(
        user=user,
        password=password,
        net=net,
        address=address,
        database=database,
        params=params,
    )


def parse_legacy_dsn(value: str) -> DsnConfig:
    """
    レガシー形式の DSN を解析

    対応キー:
    - h: ホスト
    - P: ポート (数値以外は無視)
    - u: ユーザー
    - p: パスワード
    - D: データベース
    - S: ソケットパス (指定時は unix 接続)

    3 文字未満の要素は無視します。

    Raises:
        DsnParseError: 認識できるキーが 1 つもない場合
    """
    fields: Dict[str, str] = {}
    for part in value.split(","):
        if len(part) < 3 or part[1] != "=":
            continue
        fields[part[0]] = part[2:]

    if not any(key in fields for key in ("h", "P", "u", "p", "D", "S")):
        raise DsnParseError("DSN を解釈できません", dsn=value)

    if "S" in fields:
        net, address = "unix", fields["S"]
    else:
        host = fields.get("h", "127.0.0.1")
        port = fields.get("P", "")
        if not port.isdigit():
            port = str(DEFAULT_PORT)
        net, address = "tcp", f"[{host}]:{port}" if ":" in host else f"{host}:{port}"

    return DsnConfig(
        user=fields.get("u", ""),
        password=fields.get("p", ""),
        net=net,
        address=address,
        database=fields.get("D", ""),
    )


def _has_port(address: str) -> bool:
    if address.startswith("["):
        return "]:" in address
    return address.count(":") == 1
