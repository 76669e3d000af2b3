"""
インフラストラクチャ層

差分検知結果の整形・出力などの外部システム依存を提供します。
"""

from .output_writer import OutputWriter

__all__ = ["OutputWriter"]
