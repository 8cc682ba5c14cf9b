# -*- coding: utf-8 -*-
"""단기 목표 분할 테스트"""

import pytest

from esdm_docx.table.goal_split import split_short_goals


def test_range_with_unit():
    assert split_short_goals("Con thực hiện 10-14 lần") == [
        "Con thực hiện 8-12 lần",
        "Con thực hiện 9-13 lần",
        "Con thực hiện 10-14 lần",
    ]


def test_range_unit_is_case_insensitive():
    result = split_short_goals("Nói 4 - 6 Câu")
    assert result[:2] == ["Nói 2-4 Câu", "Nói 3-5 Câu"]


def test_range_respects_lower_bounds():
    assert split_short_goals("làm 1-3 lần") == ["làm 1-2 lần", "làm 1-2 lần", "làm 1-3 lần"]


def test_ratio():
    assert split_short_goals("đúng 4/5 cơ hội") == ["đúng 2/5 cơ hội", "đúng 3/5 cơ hội", "đúng 4/5 cơ hội"]


def test_percent_rounds_half_up():
    assert split_short_goals("đạt 80% cơ hội")[:2] == ["đạt 27% cơ hội", "đạt 53% cơ hội"]
    assert split_short_goals("đạt 3%")[:2] == ["đạt 1%", "đạt 2%"]
    assert split_short_goals("đạt 75%")[:2] == ["đạt 25%", "đạt 50%"]


def test_count():
    assert split_short_goals("bắt chước 5 loại động tác") == [
        "bắt chước 3 loại động tác",
        "bắt chước 4 loại động tác",
        "bắt chước 5 loại động tác",
    ]


def test_count_floor_is_one():
    assert split_short_goals("ngồi 2 lần")[:2] == ["ngồi 1 lần", "ngồi 1 lần"]


@pytest.mark.parametrize('text', [
    "đếm 14-10 lần",    # 범위 역순
    "đúng 6/5 cơ hội",  # 분자가 큼
])
def test_failed_guard_returns_original(text):
    assert split_short_goals(text) == [text] * 3


def test_failed_range_guard_does_not_fall_through_to_count():
    text = "thực hiện 5-5 lần, 3 lần mỗi ngày"
    assert split_short_goals(text) == [text] * 3


def test_no_numeric_pattern():
    text = "Con chơi cùng bạn"
    assert split_short_goals(text) == [text] * 3


def test_smart_splitting_disabled():
    text = "Con thực hiện 10-14 lần"
    assert split_short_goals(text, smart_splitting=False) == [text] * 3


def test_always_three_items():
    for text in ["", "10-14", "1/2", "5%", "9 bậc"]:
        assert len(split_short_goals(text)) == 3
