# -*- coding: utf-8 -*-
"""
workflow 모듈 - 바이트 입출력 단위의 통합 작업
"""

from .pipelines import (
    DocumentOutput,
    analyze_tables,
    fix_tables,
    extract_results,
    generate_report,
    generate_iep,
    suggest_progress,
    generate_progress_report,
)

__all__ = [
    'DocumentOutput',
    'analyze_tables',
    'fix_tables',
    'extract_results',
    'generate_report',
    'generate_iep',
    'suggest_progress',
    'generate_progress_report',
]
