# -*- coding: utf-8 -*-
"""
core 모듈 - 공통 클래스 및 유틸리티

단위 변환, 텍스트 정규화, 날짜/나이 계산 등 프로젝트 전체에서 사용되는 공통 코드
"""

from .unit import Unit
from .text import collapse_whitespace, fold_diacritics, normalize_text
from .dates import format_date_vi, calculate_age, AGE_ERROR_TEXT

__all__ = [
    'Unit',
    'collapse_whitespace',
    'fold_diacritics',
    'normalize_text',
    'format_date_vi',
    'calculate_age',
    'AGE_ERROR_TEXT',
]
