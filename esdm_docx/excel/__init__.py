# -*- coding: utf-8 -*-
"""
excel 모듈 - IEP 목표 엑셀 파싱 (openpyxl)

- goal_workbook: 시트별 단계 -> 영역 -> 목표 계층 로드
"""

from .goal_workbook import (
    load_goal_workbook,
    parse_sheet_rows,
    is_goal_row_indicator,
    is_table_header,
    is_domain_label,
    normalize_goal_id,
    natural_key,
)

__all__ = [
    'load_goal_workbook',
    'parse_sheet_rows',
    'is_goal_row_indicator',
    'is_table_header',
    'is_domain_label',
    'normalize_goal_id',
    'natural_key',
]
