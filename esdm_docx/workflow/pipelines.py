# -*- coding: utf-8 -*-
"""
통합 작업 흐름

바이트 입력 -> 바이트 출력 단위의 작업입니다. 작업마다 새 트리를 로드하고
저장 후 버리므로 작업 사이에 공유 상태가 없습니다.

작업:
- analyze_tables: 표 결함 분석 (TableInfo 목록)
- fix_tables: 선택한 옵션으로 표 병합/수리 -> <이름>_fixed.docx
- extract_results: 평가표 파일에서 결과 추출 (Gemini)
- generate_report: 보고서 서식 채우기 -> <이름>_Fix<n>.docx
- generate_iep: 목표 표 생성 -> <이름>_fix1.docx
- suggest_progress: 월간 보고서 목표별 제안 작성 (Gemini)
- generate_progress_report: 월간 진도 보고서 생성 -> Bao_Cao_<이름>_<월>.docx
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ..agent.extraction import GeminiExtractor, ProgressCallback, SourceFile
from ..agent.models import ExtractionResult, ProgressSuggestions
from ..agent.suggestion import GeminiProgressWriter
from ..config import fixed_filename, iep_filename, progress_report_filename, report_filename
from ..config_loader import Settings, load_settings
from ..docxml.package import DocxPackage
from ..field.filler import StudentInfo, fill_report
from ..report.models import ProgressReportInput
from ..report.progress import build_progress_report
from ..table.analyzer import analyze_document
from ..table.models import GoalLevel, GoalSelection, TableInfo, resolve_selections
from ..table.repair import fix_document
from ..table.synthesizer import replace_goal_table


logger = logging.getLogger(__name__)


@dataclass
class DocumentOutput:
    """작업 결과 문서"""
    data: bytes
    filename: str

    def save(self, directory: Union[str, Path] = '.') -> Path:
        path = Path(directory) / self.filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.data)
        logger.info("저장 완료: %s", path)
        return path


def _settings(settings: Optional[Settings]) -> Settings:
    return settings if settings is not None else load_settings()


def analyze_tables(data: bytes, source_name: str = '', settings: Optional[Settings] = None) -> List[TableInfo]:
    """표 결함 분석"""
    settings = _settings(settings)
    pkg = DocxPackage.from_bytes(data, source_name=source_name)
    return analyze_document(pkg, gap_limit=settings.fixer.merge_gap_limit)


def fix_tables(
    data: bytes,
    configs: List[TableInfo],
    source_name: str = '',
    settings: Optional[Settings] = None,
) -> DocumentOutput:
    """표 병합/수리"""
    settings = _settings(settings)
    pkg = DocxPackage.from_bytes(data, source_name=source_name)
    fixed = fix_document(pkg, configs, settings.fixer)
    return DocumentOutput(data=fixed, filename=fixed_filename(source_name or 'doc.docx'))


def extract_results(
    files: Sequence[SourceFile],
    levels: Sequence[int],
    columns: Sequence[int],
    extractor: Optional[GeminiExtractor] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> ExtractionResult:
    """평가표 결과 추출"""
    extractor = extractor or GeminiExtractor()
    return extractor.extract(files, levels, columns, on_progress=on_progress)


def generate_report(
    template: bytes,
    student: StudentInfo,
    result: ExtractionResult,
    levels: Sequence[int],
    source_name: str = '',
    fix_counter: int = 1,
    settings: Optional[Settings] = None,
) -> DocumentOutput:
    """보고서 서식 채우기"""
    settings = _settings(settings)
    pkg = DocxPackage.from_bytes(template, source_name=source_name)
    fill_report(pkg, student, result, levels, settings.filler)
    return DocumentOutput(data=pkg.to_bytes(), filename=report_filename(source_name, fix_counter))


def generate_iep(
    template: bytes,
    selections: List[GoalSelection],
    goal_levels: List[GoalLevel],
    smart_splitting: bool = True,
    source_name: str = '',
    settings: Optional[Settings] = None,
) -> DocumentOutput:
    """
    IEP 목표 표 생성

    Raises:
        DocxStructureError: 목표 계획 표가 없음
    """
    settings = _settings(settings)
    goals = resolve_selections(selections, goal_levels)
    pkg = DocxPackage.from_bytes(template, source_name=source_name)
    replace_goal_table(pkg.tree, goals, smart_splitting, settings.synthesizer)
    return DocumentOutput(data=pkg.to_bytes(), filename=iep_filename(source_name))


def suggest_progress(
    report_input: ProgressReportInput,
    writer: Optional[GeminiProgressWriter] = None,
) -> ProgressSuggestions:
    """월간 보고서 목표별 평가 문장/제안, 총평 작성"""
    writer = writer or GeminiProgressWriter()
    return writer.suggest(report_input)


def generate_progress_report(
    report_input: ProgressReportInput,
    suggestions: Optional[ProgressSuggestions] = None,
    settings: Optional[Settings] = None,
) -> DocumentOutput:
    """
    월간 진도 보고서 생성

    suggestions 가 없으면 목표마다 기본 평가 문장, 기본 총평을 씁니다.
    """
    settings = _settings(settings)
    pkg = build_progress_report(report_input, suggestions or ProgressSuggestions(), settings.report)
    child = report_input.child
    return DocumentOutput(data=pkg.to_bytes(), filename=progress_report_filename(child.name, child.report_month))
