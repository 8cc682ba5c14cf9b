# -*- coding: utf-8 -*-
"""
field 모듈 - 평가 보고서 서식 채우기

- filler: 라벨 문단 / 기술 평가 표 / 요약 문단 / {태그} 치환
"""

from .filler import (
    StudentInfo,
    fill_report,
    fill_labels,
    fill_skill_table,
    fill_summary,
    fill_placeholders,
    placeholder_values,
    format_percent,
)

__all__ = [
    'StudentInfo',
    'fill_report',
    'fill_labels',
    'fill_skill_table',
    'fill_summary',
    'fill_placeholders',
    'placeholder_values',
    'format_percent',
]
