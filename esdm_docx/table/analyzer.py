# -*- coding: utf-8 -*-
"""
표 결함 분석 모듈

문서의 모든 표(중첩 표 포함, 문서 순서)를 검사하여 TableInfo 목록을 만듭니다.

검사 항목:
- 테두리 누락: tblPr 에 tblBorders 가 없음
- 테두리 불완전: top/left/bottom/right/insideH/insideV 중 하나라도 없음
  (left/right 대신 start/end 도 인정)
- 병합 가능: 표 뒤 형제가 빈 문단뿐이고, 그 개수가 MERGE_GAP_LIMIT 미만이며,
  다음 표에 도달함

분석은 트리를 변경하지 않습니다. 모든 옵션은 꺼진 상태로 반환되며,
사용자가 켠 옵션을 수리 단계(repair.fix_document)에 다시 넘깁니다.
"""

import html
import logging
import xml.etree.ElementTree as ET
from typing import List, Optional, Tuple

from ..docxml.elements import (
    W_TBL,
    cell_text,
    find_child,
    get_pr,
    is_empty_paragraph,
    row_cells,
    table_rows,
    w,
)
from ..docxml.package import DocumentTree, DocxPackage
from .models import TableInfo, TableIssue, TableOptions


logger = logging.getLogger(__name__)

MERGE_GAP_LIMIT = 5

# (필수 변, 대체 이름)
REQUIRED_BORDER_SIDES = [
    ('top', None),
    ('left', 'start'),
    ('bottom', None),
    ('right', 'end'),
    ('insideH', None),
    ('insideV', None),
]

PREVIEW_UNAVAILABLE = "<p class='preview-empty'>Không thể tạo bản xem trước</p>"


# ============================================================
# 표 사이 간격 탐색
# ============================================================

def scan_gap(tree: DocumentTree, tbl: ET.Element) -> Tuple[List[ET.Element], Optional[ET.Element]]:
    """
    표 뒤의 빈 문단들과 그 다음 표를 찾습니다.

    빈 문단이 아닌 요소(텍스트 문단, 구역 나누기, 그림 등)를 만나면 탐색을 멈추고
    다음 표는 None 으로 반환합니다.

    Returns:
        (빈 문단 목록, 다음 표 또는 None)
    """
    gap: List[ET.Element] = []
    for sibling in tree.next_siblings(tbl):
        if sibling.tag == W_TBL:
            return gap, sibling
        if is_empty_paragraph(sibling):
            gap.append(sibling)
            continue
        break
    return gap, None


def can_merge_with_next(tree: DocumentTree, tbl: ET.Element, gap_limit: int = MERGE_GAP_LIMIT) -> bool:
    """다음 표와 병합 가능한지 확인 (빈 문단 gap_limit 개 미만)"""
    gap, next_tbl = scan_gap(tree, tbl)
    return next_tbl is not None and len(gap) < gap_limit


# ============================================================
# 테두리 검사
# ============================================================

def border_issue(tbl: ET.Element) -> Optional[TableIssue]:
    """테두리 결함 (없으면 None)"""
    tbl_pr = get_pr(tbl, 'tblPr')
    borders = find_child(tbl_pr, 'tblBorders') if tbl_pr is not None else None
    if borders is None:
        return TableIssue.MISSING_BORDERS

    for side, alias in REQUIRED_BORDER_SIDES:
        if find_child(borders, side) is not None:
            continue
        if alias and find_child(borders, alias) is not None:
            continue
        return TableIssue.INCOMPLETE_BORDERS
    return None


# ============================================================
# 미리보기
# ============================================================

def preview_html(tbl: ET.Element) -> str:
    """표 텍스트의 간단한 HTML 렌더링"""
    rows = table_rows(tbl)
    if not rows:
        return PREVIEW_UNAVAILABLE

    parts = ['<table>']
    for tr in rows:
        parts.append('<tr>')
        for tc in row_cells(tr):
            span = 1
            tc_pr = get_pr(tc, 'tcPr')
            grid_span = find_child(tc_pr, 'gridSpan') if tc_pr is not None else None
            if grid_span is not None:
                try:
                    span = int(grid_span.get(w('val'), '1'))
                except ValueError:
                    span = 1
            attr = f' colspan="{span}"' if span > 1 else ''
            parts.append(f'<td{attr}>{html.escape(cell_text(tc).strip())}</td>')
        parts.append('</tr>')
    parts.append('</table>')
    return ''.join(parts)


# ============================================================
# 분석
# ============================================================

def analyze_table(
    tree: DocumentTree,
    tbl: ET.Element,
    index: int,
    gap_limit: int = MERGE_GAP_LIMIT,
) -> TableInfo:
    """표 하나 분석"""
    issues: List[TableIssue] = []

    issue = border_issue(tbl)
    if issue is not None:
        issues.append(issue)

    mergeable = can_merge_with_next(tree, tbl, gap_limit)
    if mergeable:
        issues.append(TableIssue.MERGEABLE)

    return TableInfo(
        id=index,
        index=index,
        preview_html=preview_html(tbl),
        issues=issues,
        can_merge_next=mergeable,
        is_merge_target=False,
        options=TableOptions(),
        element=tbl,
    )


def analyze_tree(tree: DocumentTree, gap_limit: int = MERGE_GAP_LIMIT) -> List[TableInfo]:
    """트리의 모든 표 분석 (문서 순서)"""
    return [analyze_table(tree, tbl, idx, gap_limit) for idx, tbl in enumerate(tree.tables())]


def analyze_document(pkg: DocxPackage, gap_limit: int = MERGE_GAP_LIMIT) -> List[TableInfo]:
    """
    문서의 모든 표 분석

    Args:
        pkg: DOCX 패키지
        gap_limit: 병합 가능 판정 빈 문단 상한 (미만)

    Returns:
        TableInfo 목록 (index 순)
    """
    infos = analyze_tree(pkg.tree, gap_limit)
    issue_count = sum(len(info.issues) for info in infos)
    logger.info("표 분석 완료: 표 %d개, 결함 %d건", len(infos), issue_count)
    return infos


def mark_merge_targets(tree: DocumentTree, infos: List[TableInfo]) -> List[TableInfo]:
    """merge_next 가 켜진 표에 흡수될 다음 표를 병합 대상으로 표시"""
    by_element = {id(info.element): info for info in infos if info.element is not None}
    for info in infos:
        info.is_merge_target = False
    for info in infos:
        if not (info.options.merge_next and info.element is not None):
            continue
        _, next_tbl = scan_gap(tree, info.element)
        target = by_element.get(id(next_tbl)) if next_tbl is not None else None
        if target is not None:
            target.is_merge_target = True
    return infos
