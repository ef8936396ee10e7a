"""
Shared fixtures: sample pages from the three sources.
"""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))


WIKI_PAGE = """{{カレンダー 5月}}
'''5月1日'''は[[グレゴリオ暦]]で年始から121日目にあたる。

== できごと ==
[[ファイル:May Day.jpg|thumb|メーデーの様子]]
* [[紀元前305年]] - [[プトレマイオス1世]]が[[エジプト]]の王を名乗り始める。
* [[1707年]] - [[イングランド王国]]と[[スコットランド王国]]が合同し[[グレートブリテン王国]]が成立する。
* [[1851年]]（[[嘉永]]4年） - [[ロンドン]]で第1回[[国際博覧会|万国博覧会]]が開幕する。<ref>{{Cite web|title=Expo}}</ref>
* [[1990年]] - 短い。
* [[2000年]] - [[File:Example.png|thumb|説明文が長いけれども画像の行なので除外される]]
* 本文に年がない行は対象外のできごととして扱われないはずである。

== 誕生日 ==
* [[1769年]] - [[アーサー・ウェルズリー (初代ウェリントン公爵)|ウェリントン公爵]]、軍人、政治家（+ [[1852年]]）
* [[1852年]] - [[サンティアゴ・ラモン・イ・カハール]]、神経解剖学者（+ [[1934年]]）
* [[1946年]] - [[ジョアンナ・ラムレイ]]、女優
* [[1980年]] - X

== 忌日 ==
* [[2000年]] - [[サービス終了した製品]]（サービス開始 [[1990年]]）
=== 人物 ===
* [[1873年]] - [[デイヴィッド・リヴィングストン]]、探検家（* [[1813年]]）
* [[1904年]] - [[アントニン・ドヴォルザーク]]、作曲家（* [[1841年]]）

== 記念日・年中行事 ==
* [[メーデー]]
"""


PHP_PAGE = """<html>
<head>
<title>今日は何の日 5月1日</title>
<style>.today { color: red; }</style>
</head>
<body>
<!-- 記念日・行事・お祭り ●コメント内の項目 -->
<h2>記念日・行事・お祭り</h2>
<p>●メーデー,●恋と革命のインドカリーの日（新宿中村屋）,●扇の日（京都扇子団扇商工協同組合）,●&nbsp;日本赤十字社創立記念日&amp;その他,●</p>
<h2>歴史上の出来事</h2>
<p>▼1851年 ロンドン万国博覧会開催</p>
<h2>今日の誕生日</h2>
<p>▼1769年 ウェリントン公爵</p>
</body>
</html>
"""


def make_response(status_code=200, json_data=None, text="", raise_error=None):
    """Build a stand-in for requests.Response."""
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    response.encoding = 'utf-8'
    response.json.return_value = json_data
    if raise_error is not None:
        response.raise_for_status.side_effect = raise_error
    return response


@pytest.fixture
def wiki_page():
    return WIKI_PAGE


@pytest.fixture
def php_page():
    return PHP_PAGE
