"""
アプリケーション固有の例外定義モジュール。

レベル取得、レスポンス解析、分類テーブル参照などの処理で発生する例外を
分類して扱うために、基底例外および派生例外を定義する。
"""


class GDStatsError(Exception):
    """統計レポート生成システム全体の基底例外。"""


class FetchError(GDStatsError):
    """レベルサーバーからの取得処理に起因する例外。"""


class ParseError(GDStatsError):
    """レベルサーバーのレスポンスが想定フォーマットを満たさない場合の例外。"""


class UnmappedValueError(GDStatsError, LookupError):
    """
    閉じた列挙値(難易度ティア/ソートコード)がテーブルに存在しない場合の例外。

    テーブルは固定で網羅的であるため、この例外はプログラム不整合を意味し、
    実行を中断させる。
    """
