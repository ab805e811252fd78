"""Geometry Dash のレベル一覧から統計レポートを生成するパッケージ。"""
