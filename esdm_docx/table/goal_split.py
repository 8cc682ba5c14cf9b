# -*- coding: utf-8 -*-
"""
장기 목표 -> 단기 목표 3단계 분할

장기 목표 문장의 수치를 찾아 점점 커지는 단기 목표 두 개를 만들고,
세 번째는 장기 목표 원문을 그대로 씁니다.

패턴 (순서대로, 처음 일치한 것만 사용):
1. 범위 a-b [단위]: (a-2, b-2), (a-1, b-1)   (b > a 일 때만)
2. 비율 x/y:         (x-2)/y, (x-1)/y        (x <= y 일 때만)
3. 백분율 x%:        x/3 %, 2x/3 %
4. 횟수 x 단위:      x-2, x-1

모든 하한은 1. 패턴이 일치했지만 조건(b > a, x <= y)을 만족하지 못하면
뒤 패턴을 시도하지 않고 원문 3개를 반환합니다.

예:
    split_short_goals("Con thực hiện 10-14 lần")
    # ["Con thực hiện 8-12 lần", "Con thực hiện 9-13 lần", "Con thực hiện 10-14 lần"]
"""

import logging
import math
import re
from typing import List, Optional


logger = logging.getLogger(__name__)

RANGE_RE = re.compile(r'(\d{1,2})\s*-\s*(\d{1,2})(\s+(?:lần|bậc|loại|câu|từ|chữ))?', re.IGNORECASE)
RATIO_RE = re.compile(r'(\d{1,3})\s*/\s*(\d{1,3})')
PERCENT_RE = re.compile(r'(\d+)\s*%')
COUNT_RE = re.compile(r'(\d+)\s+(lần|bậc|loại)', re.IGNORECASE)

SHORT_GOAL_COUNT = 3


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _substitute(text: str, match: re.Match, replacement: str) -> str:
    return text[:match.start()] + replacement + text[match.end():]


def _split_range(text: str, match: re.Match) -> Optional[List[str]]:
    a, b = int(match.group(1)), int(match.group(2))
    unit = match.group(3) or ''
    if b <= a:
        return None
    a1 = max(1, a - 2)
    b1 = max(a1 + 1, b - 2)
    a2 = max(1, a - 1)
    b2 = max(a2 + 1, b - 1)
    return [
        _substitute(text, match, f"{a1}-{b1}{unit}"),
        _substitute(text, match, f"{a2}-{b2}{unit}"),
        text,
    ]


def _split_ratio(text: str, match: re.Match) -> Optional[List[str]]:
    x, y = int(match.group(1)), int(match.group(2))
    if x > y:
        return None
    return [
        _substitute(text, match, f"{max(1, x - 2)}/{y}"),
        _substitute(text, match, f"{max(1, x - 1)}/{y}"),
        text,
    ]


def _split_percent(text: str, match: re.Match) -> Optional[List[str]]:
    x = int(match.group(1))
    return [
        _substitute(text, match, f"{_round_half_up(x / 3)}%"),
        _substitute(text, match, f"{_round_half_up(x * 2 / 3)}%"),
        text,
    ]


def _split_count(text: str, match: re.Match) -> Optional[List[str]]:
    x = int(match.group(1))
    unit = match.group(2)
    return [
        _substitute(text, match, f"{max(1, x - 2)} {unit}"),
        _substitute(text, match, f"{max(1, x - 1)} {unit}"),
        text,
    ]


# (이름, 패턴, 분할 함수)
EXTRACTORS = [
    ('range', RANGE_RE, _split_range),
    ('ratio', RATIO_RE, _split_ratio),
    ('percent', PERCENT_RE, _split_percent),
    ('count', COUNT_RE, _split_count),
]


def split_short_goals(text: str, smart_splitting: bool = True) -> List[str]:
    """
    장기 목표 문장으로 단기 목표 3개 생성

    Args:
        text: 장기 목표 원문
        smart_splitting: False 면 원문 3개를 그대로 반환

    Returns:
        [단기 1, 단기 2, 원문]
    """
    unchanged = [text] * SHORT_GOAL_COUNT
    if not smart_splitting:
        return unchanged

    for name, pattern, split in EXTRACTORS:
        match = pattern.search(text)
        if not match:
            continue
        result = split(text, match)
        if result is None:
            logger.warning("%s 패턴이 조건을 만족하지 않아 원문을 사용합니다: %s", name, match.group(0))
            return unchanged
        return result

    logger.warning("수치 패턴이 없어 원문을 사용합니다: %s", text)
    return unchanged
