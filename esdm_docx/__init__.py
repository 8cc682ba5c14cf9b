# -*- coding: utf-8 -*-
"""
esdm_docx - ESDM 평가 보고서 / IEP 문서(docx) 처리

모듈 구성:
- docxml: DOCX 패키지 로드/저장, WordprocessingML 요소 헬퍼
- table: 표 판별/분석/병합/수리, IEP 목표 표 생성
- field: 평가 보고서 서식 채우기
- excel: IEP 목표 엑셀 파싱
- agent: 평가표 내용 추출, 월간 보고서 제안 작성 (Gemini)
- report: 월간 진도 보고서 생성
- workflow: 바이트 입출력 통합 작업
"""

__version__ = '0.1.0'

from .errors import EsdmDocxError, DocxStructureError, ExtractionError
from .docxml import DocxPackage, DocumentTree
from .table import (
    TableInfo,
    TableOptions,
    TableIssue,
    analyze_document,
    fix_document,
    replace_goal_table,
    split_short_goals,
)
from .field import StudentInfo, fill_report
from .report import ProgressReportInput, build_progress_report
from .workflow import analyze_tables, fix_tables, generate_report, generate_iep, generate_progress_report

__all__ = [
    '__version__',
    'EsdmDocxError',
    'DocxStructureError',
    'ExtractionError',
    'DocxPackage',
    'DocumentTree',
    'TableInfo',
    'TableOptions',
    'TableIssue',
    'analyze_document',
    'fix_document',
    'replace_goal_table',
    'split_short_goals',
    'StudentInfo',
    'fill_report',
    'analyze_tables',
    'fix_tables',
    'generate_report',
    'generate_iep',
    'ProgressReportInput',
    'build_progress_report',
    'generate_progress_report',
]
