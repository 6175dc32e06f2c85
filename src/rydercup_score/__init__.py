"""ライダーカップ形式ゴルフ旅行のマッチプレー集計ライブラリ

ホールごとの結果からマッチ状態を算出し、セッションを跨いだチームポイント、
個人成績、マジックナンバーを集計する。
"""

__version__ = "0.1.0"
