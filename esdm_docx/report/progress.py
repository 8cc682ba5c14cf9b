# -*- coding: utf-8 -*-
"""
월간 진도 보고서 생성 모듈

서식 파일 없이 새 문서를 만듭니다.

문서 구성:
    센터 머리글 (가운데, 줄바꿈으로 연결)
    Họ và tên trẻ: ...        Ngày sinh: ...
    Tháng báo cáo: ...
    | LĨNH VỰC | MỤC TIÊU | KẾT QUẢ (+ | +/- | -) | ĐỀ XUẤT GIA ĐÌNH |   <- 2행 헤더 (70AD47)
    | 1. 영역  | 목표     |  표시               | 평가 문장 + 제안 |   <- 영역 셀은 vMerge
    | TỔNG KẾT CHUNG | 총평 (5칸 병합)                              |   <- FFC000

결과 표시: 달성률 70 이상 "+", 50 이상 "+/-", 그 외 "-"

사용 예:
    pkg = build_progress_report(report_input, suggestions)
    pkg.save(progress_report_filename(child.name, child.report_month))
"""

import logging
import re
import xml.etree.ElementTree as ET
from typing import List, Optional, Tuple

from ..agent.models import ProgressSuggestions
from ..config_loader import ReportSettings
from ..core.unit import Unit
from ..docxml.elements import (
    P_PR_ORDER,
    TBL_PR_ORDER,
    TC_PR_ORDER,
    W_P,
    W_TBL,
    W_TC,
    W_TR,
    RunStyle,
    ensure_pr,
    make_break_run,
    make_rpr,
    make_run,
    make_w,
    set_child_in_order,
    w,
)
from ..docxml.package import DocxPackage
from .models import ProgressGoal, ProgressReportInput


logger = logging.getLogger(__name__)

RESULT_MARKS = ('+', '+/-', '-')

HEADER_TITLES = ('LĨNH VỰC', 'MỤC TIÊU', 'KẾT QUẢ', 'ĐỀ XUẤT GIA ĐÌNH')
SUMMARY_TITLE = 'TỔNG KẾT CHUNG'

# A4 (dxa)
PAGE_WIDTH = 11906
PAGE_HEIGHT = 16838

_LINE_BREAK_RE = re.compile(r'<br\s*/?>|\n', re.IGNORECASE)
_BOLD_SPLIT_RE = re.compile(r'(<b>.*?</b>)')
_BOLD_TAG_RE = re.compile(r'</?b>')

# (텍스트, 굵게 여부)
Segment = Tuple[str, bool]


# ============================================================
# 결과 표시 / 문장
# ============================================================

def result_mark(percentage: float, settings: Optional[ReportSettings] = None) -> str:
    """달성률 -> '+', '+/-', '-'"""
    settings = settings or ReportSettings()
    if percentage >= settings.achieved_percent:
        return RESULT_MARKS[0]
    if percentage >= settings.emerging_percent:
        return RESULT_MARKS[1]
    return RESULT_MARKS[2]


def format_percentage(value: float) -> str:
    """70.0 -> '70', 62.5 -> '62.5'"""
    return str(int(value)) if float(value).is_integer() else str(value)


def default_assessment(goal: ProgressGoal) -> str:
    return f"+ ĐẠT {format_percentage(goal.percentage)}% MỤC TIÊU."


def parse_rich_text(text: str) -> List[List[Segment]]:
    """
    <b>, <br/> 표기 텍스트를 줄 단위 조각 목록으로 변환

    빈 줄은 버리고, <b>...</b> 조각은 태그를 떼고 굵게 표시합니다.
    """
    lines = []
    for line in _LINE_BREAK_RE.split(text or ''):
        if not line.strip():
            continue
        segments: List[Segment] = []
        for part in _BOLD_SPLIT_RE.split(line):
            if part.startswith('<b>') and part.endswith('</b>'):
                segments.append((_BOLD_TAG_RE.sub('', part), True))
            elif part:
                segments.append((part, False))
        lines.append(segments)
    return lines


# ============================================================
# 요소 생성
# ============================================================

class ProgressReportBuilder:
    """보고서 문단/표 요소 생성기"""

    def __init__(self, settings: Optional[ReportSettings] = None):
        self.settings = settings or ReportSettings()

    def style(self, bold: bool = False, italic: bool = False) -> RunStyle:
        return RunStyle(font=self.settings.font, size=self.settings.font_size, bold=bold, italic=italic)

    def run(self, text: str, bold: bool = False, italic: bool = False) -> ET.Element:
        return make_run(text, self.style(bold, italic))

    def tab_run(self, count: int = 1) -> ET.Element:
        """w:tab 만 담은 run"""
        r = ET.Element(w('r'))
        r.append(make_rpr(self.style()))
        for _ in range(count):
            r.append(ET.Element(w('tab')))
        return r

    def paragraph(
        self,
        runs: List[ET.Element],
        align: Optional[str] = None,
        before: Optional[int] = None,
        after: Optional[int] = None,
        tab_stop: Optional[int] = None,
    ) -> ET.Element:
        p = ET.Element(W_P)
        p_pr = ensure_pr(p, 'pPr')
        if tab_stop is not None:
            tabs = ET.Element(w('tabs'))
            tabs.append(make_w('tab', val='left', pos=tab_stop))
            set_child_in_order(p_pr, tabs, P_PR_ORDER)
        if before is not None or after is not None:
            spacing = make_w('spacing')
            if before is not None:
                spacing.set(w('before'), str(before))
            if after is not None:
                spacing.set(w('after'), str(after))
            set_child_in_order(p_pr, spacing, P_PR_ORDER)
        if align:
            set_child_in_order(p_pr, make_w('jc', val=align), P_PR_ORDER)
        if not len(p_pr):
            p.remove(p_pr)
        p.extend(runs)
        return p

    def title_paragraph(self, text: str) -> ET.Element:
        return self.paragraph([self.run(text, bold=True)], align='center')

    def rich_paragraphs(self, text: str) -> List[ET.Element]:
        """<b>/<br/> 제안 텍스트 -> 문단 목록"""
        return [
            self.paragraph(
                [self.run(segment, bold=bold) for segment, bold in segments],
                after=self.settings.paragraph_after,
            )
            for segments in parse_rich_text(text)
        ]

    def cell(
        self,
        paragraphs: List[ET.Element],
        v_align: str = 'top',
        v_merge: Optional[str] = None,
        grid_span: int = 1,
        fill: Optional[str] = None,
    ) -> ET.Element:
        """
        셀 생성

        Args:
            paragraphs: 문단 목록 (비어 있으면 빈 문단 하나)
            v_merge: 'restart' / 'continue' / None
            grid_span: 가로 병합 칸 수
            fill: 배경색 (RRGGBB)
        """
        tc = ET.Element(W_TC)
        tc_pr = ensure_pr(tc, 'tcPr')
        if grid_span > 1:
            set_child_in_order(tc_pr, make_w('gridSpan', val=grid_span), TC_PR_ORDER)
        if v_merge == 'restart':
            set_child_in_order(tc_pr, make_w('vMerge', val='restart'), TC_PR_ORDER)
        elif v_merge == 'continue':
            set_child_in_order(tc_pr, make_w('vMerge'), TC_PR_ORDER)
        if fill:
            set_child_in_order(tc_pr, make_w('shd', val='clear', color='auto', fill=fill), TC_PR_ORDER)
        set_child_in_order(tc_pr, make_w('vAlign', val=v_align), TC_PR_ORDER)
        tc.extend(paragraphs or [ET.Element(W_P)])
        return tc

    def header_cell(self, text: str = '', v_merge: Optional[str] = None, grid_span: int = 1) -> ET.Element:
        paragraphs = [self.title_paragraph(text)] if v_merge != 'continue' else []
        return self.cell(paragraphs, v_align='center', v_merge=v_merge, grid_span=grid_span,
                         fill=self.settings.header_fill)

    def row(self, cells: List[ET.Element]) -> ET.Element:
        tr = ET.Element(W_TR)
        tr.extend(cells)
        return tr

    def table(self, rows: List[ET.Element]) -> ET.Element:
        """전체 너비, 6변 테두리, 고정 열 너비 표"""
        tbl = ET.Element(W_TBL)
        tbl_pr = ensure_pr(tbl, 'tblPr')
        set_child_in_order(tbl_pr, make_w('tblW', w=Unit.percent_to_pct(100), type='pct'), TBL_PR_ORDER)
        borders = ET.Element(w('tblBorders'))
        for side in ('top', 'left', 'bottom', 'right', 'insideH', 'insideV'):
            borders.append(make_w(side, val='single', sz=self.settings.border_size, space=0, color='000000'))
        set_child_in_order(tbl_pr, borders, TBL_PR_ORDER)

        grid = ET.SubElement(tbl, w('tblGrid'))
        for width in self.settings.column_widths:
            grid.append(make_w('gridCol', w=width))
        tbl.extend(rows)
        return tbl


# ============================================================
# 표 / 문서
# ============================================================

def build_header_rows(builder: ProgressReportBuilder) -> List[ET.Element]:
    """2행 헤더 (LĨNH VỰC / MỤC TIÊU / ĐỀ XUẤT 는 세로 병합, KẾT QUẢ 는 3칸)"""
    domain, goal, result, suggestion = HEADER_TITLES
    first = builder.row([
        builder.header_cell(domain, v_merge='restart'),
        builder.header_cell(goal, v_merge='restart'),
        builder.header_cell(result, grid_span=len(RESULT_MARKS)),
        builder.header_cell(suggestion, v_merge='restart'),
    ])
    second = builder.row(
        [builder.header_cell(v_merge='continue'), builder.header_cell(v_merge='continue')]
        + [builder.header_cell(mark) for mark in RESULT_MARKS]
        + [builder.header_cell(v_merge='continue')]
    )
    return [first, second]


def build_goal_row(
    builder: ProgressReportBuilder,
    goal: ProgressGoal,
    domain_title: str,
    domain_start: bool,
    suggestions: ProgressSuggestions,
) -> ET.Element:
    """목표 한 행 (영역 셀은 영역 첫 행에서 restart, 이후 continue)"""
    settings = builder.settings
    if domain_start:
        domain_cell = builder.cell([builder.title_paragraph(domain_title)], v_merge='restart')
    else:
        domain_cell = builder.cell([], v_merge='continue')

    mark = result_mark(goal.percentage, settings)
    mark_cells = [
        builder.cell([builder.paragraph([builder.run(mark if m == mark else '')], align='center')],
                     v_align='center')
        for m in RESULT_MARKS
    ]

    suggestion = suggestions.get(goal.id)
    assessment = (suggestion.assessment if suggestion else '') or default_assessment(goal)
    details = suggestion.details if suggestion else ''

    paragraphs = [builder.paragraph([builder.run(assessment, bold=True)], after=settings.paragraph_after)]
    paragraphs.extend(builder.rich_paragraphs(details))
    if goal.note:
        paragraphs.append(builder.paragraph(
            [builder.run(f"(Ghi chú: {goal.note})", italic=True)],
            before=settings.paragraph_after,
        ))

    return builder.row(
        [domain_cell, builder.cell([builder.paragraph([builder.run(goal.goal)])])]
        + mark_cells
        + [builder.cell(paragraphs)]
    )


def build_progress_table(
    report_input: ProgressReportInput,
    suggestions: ProgressSuggestions,
    settings: Optional[ReportSettings] = None,
) -> ET.Element:
    """
    진도 표 생성

    영역 번호는 입력 순서 그대로 매깁니다 (목표 없는 영역은 행 없이 번호만 차지).
    """
    builder = ProgressReportBuilder(settings)
    rows = build_header_rows(builder)

    for g_idx, group in enumerate(report_input.field_groups):
        title = f"{g_idx + 1}. {group.field_name}"
        for i, goal in enumerate(group.goals):
            rows.append(build_goal_row(builder, goal, title, i == 0, suggestions))

    summary_fill = builder.settings.summary_fill
    rows.append(builder.row([
        builder.cell([builder.title_paragraph(SUMMARY_TITLE)], v_align='center', fill=summary_fill),
        builder.cell(
            [builder.paragraph([builder.run(suggestions.general_summary)])],
            v_align='center', grid_span=len(RESULT_MARKS) + 2, fill=summary_fill,
        ),
    ]))
    return builder.table(rows)


def _set_page_layout(pkg: DocxPackage, settings: ReportSettings):
    """A4, 사방 여백"""
    sect_pr = pkg.tree.body.find(w('sectPr'))
    if sect_pr is None:
        sect_pr = ET.SubElement(pkg.tree.body, w('sectPr'))
    sect_pr.append(make_w('pgSz', w=PAGE_WIDTH, h=PAGE_HEIGHT))
    margin = settings.page_margin
    sect_pr.append(make_w('pgMar', top=margin, right=margin, bottom=margin, left=margin,
                          header=720, footer=720, gutter=0))


def build_progress_report(
    report_input: ProgressReportInput,
    suggestions: ProgressSuggestions,
    settings: Optional[ReportSettings] = None,
) -> DocxPackage:
    """
    월간 진도 보고서 문서 생성

    Args:
        report_input: 아동 정보와 영역별 목표 달성률
        suggestions: 목표별 평가 문장/제안, 총평 (없는 목표는 기본 문장)
        settings: 보고서 설정 (기본값: ReportSettings())

    Returns:
        새 DocxPackage
    """
    settings = settings or ReportSettings()
    builder = ProgressReportBuilder(settings)
    child = report_input.child
    pkg = DocxPackage.new()
    tree = pkg.tree

    header_runs: List[ET.Element] = []
    for idx, line in enumerate(settings.header_lines):
        if idx:
            header_runs.append(make_break_run(builder.style()))
        header_runs.append(builder.run(line))
    tree.append_block(builder.paragraph(header_runs, align='center', after=settings.paragraph_after * 4))

    tree.append_block(builder.paragraph(
        [
            builder.run("Họ và tên trẻ: ", bold=True),
            builder.run(child.name),
            builder.tab_run(2),
            builder.run("Ngày sinh: ", bold=True),
            builder.run(child.dob),
        ],
        after=settings.paragraph_after * 2,
        tab_stop=settings.info_tab_stop,
    ))
    tree.append_block(builder.paragraph(
        [builder.run("Tháng báo cáo: ", bold=True), builder.run(child.report_month)],
        after=settings.paragraph_after * 4,
    ))

    tree.append_block(build_progress_table(report_input, suggestions, settings))
    tree.append_block(ET.Element(W_P))
    _set_page_layout(pkg, settings)

    goals = report_input.all_goals()
    logger.info("월간 보고서 생성: 영역 %d개, 목표 %d개", len(report_input.field_groups), len(goals))
    return pkg
