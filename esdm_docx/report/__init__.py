# -*- coding: utf-8 -*-
"""
report 모듈 - 월간 진도 보고서 (서식 없이 새 문서 생성)

- models: 아동 정보, 영역별 목표 달성률 입력
- progress: 결과 표시(+, +/-, -), 제안 문단, 진도 표/문서 생성
"""

from .models import ChildInfo, FieldGroup, ProgressGoal, ProgressReportInput
from .progress import (
    RESULT_MARKS,
    build_progress_report,
    build_progress_table,
    parse_rich_text,
    result_mark,
)

__all__ = [
    'ChildInfo',
    'FieldGroup',
    'ProgressGoal',
    'ProgressReportInput',
    'RESULT_MARKS',
    'build_progress_report',
    'build_progress_table',
    'parse_rich_text',
    'result_mark',
]
