# -*- coding: utf-8 -*-
"""
표 수리 파이프라인

표마다 TableOptions 로 켜진 단계만 순서대로 적용합니다.

단계 (순서 고정):
1. borders: tblBorders 를 6변 단일 실선으로 교체
2. autofit: 표 너비를 페이지 대비 비율(pct)로, 가운데 정렬, tblLayout 제거
3. spacing: 셀 안쪽 여백 설정, 다음 표와의 간격을 빈 문단 하나로 정리
4. align: 셀 문단 들여쓰기/글머리 내어쓰기/왼쪽 정렬 (autofit 상태를 읽으므로 마지막)

병합(merge_next)은 이 단계들보다 먼저 merger 에서 처리합니다.
하위 요소가 없으면 새로 만들고, 처리할 수 없는 표는 경고 후 건너뜁니다.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Callable, List, Optional, Tuple

from ..config_loader import FixerSettings
from ..core.unit import Unit
from ..docxml.elements import (
    BORDER_ORDER,
    CELL_MAR_ORDER,
    P_PR_ORDER,
    TBL_PR_ORDER,
    W_P,
    W_TC,
    ensure_child,
    ensure_pr,
    find_child,
    get_pr,
    make_w,
    paragraph_text,
    remove_children,
    set_child_in_order,
    set_w_attrs,
    table_rows,
    w,
)
from ..docxml.package import DocumentTree, DocxPackage
from .analyzer import scan_gap
from .merger import merge_tables, resolve_configs
from .models import TableInfo, TableOptions


logger = logging.getLogger(__name__)

BORDER_SIDES = ['top', 'left', 'bottom', 'right', 'insideH', 'insideV']


def _table_properties(tbl: ET.Element) -> ET.Element:
    """tblPr 반환 (없으면 생성 + 경고)"""
    tbl_pr = get_pr(tbl, 'tblPr')
    if tbl_pr is None:
        logger.warning("tblPr 이 없어 새로 생성합니다")
        tbl_pr = ensure_pr(tbl, 'tblPr')
    return tbl_pr


# ============================================================
# 단계별 수리
# ============================================================

def fix_borders(tree: DocumentTree, tbl: ET.Element, options: TableOptions, settings: FixerSettings):
    """기존 테두리를 버리고 6변 테두리를 새로 설정"""
    tbl_pr = _table_properties(tbl)

    borders = ET.Element(w('tblBorders'))
    for side in sorted(BORDER_SIDES, key=BORDER_ORDER.index):
        borders.append(make_w(
            side,
            val=settings.border_val,
            sz=settings.border_size,
            space=settings.border_space,
            color=settings.border_color,
        ))
    set_child_in_order(tbl_pr, borders, TBL_PR_ORDER)


def autofit(tree: DocumentTree, tbl: ET.Element, options: TableOptions, settings: FixerSettings):
    """표 너비를 페이지 대비 비율로 고정하고 가운데 정렬"""
    tbl_pr = _table_properties(tbl)

    width = Unit.percent_to_pct(settings.autofit_percent)
    set_w_attrs(ensure_child(tbl_pr, 'tblW', TBL_PR_ORDER), w=width, type='pct')
    set_w_attrs(ensure_child(tbl_pr, 'jc', TBL_PR_ORDER), val='center')
    remove_children(tbl_pr, 'tblLayout')


def fix_spacing(tree: DocumentTree, tbl: ET.Element, options: TableOptions, settings: FixerSettings):
    """셀 안쪽 여백 + 다음 표와의 간격 정리"""
    tbl_pr = _table_properties(tbl)

    cell_mar = ensure_child(tbl_pr, 'tblCellMar', TBL_PR_ORDER)
    margins = {
        'top': settings.cell_margin_top,
        'left': settings.cell_margin_left,
        'bottom': settings.cell_margin_bottom,
        'right': settings.cell_margin_right,
    }
    for side, value in margins.items():
        set_w_attrs(ensure_child(cell_mar, side, CELL_MAR_ORDER), w=value, type='dxa')

    if not options.merge_next:
        normalize_gap(tree, tbl)


def normalize_gap(tree: DocumentTree, tbl: ET.Element) -> int:
    """
    다음 표와의 사이를 빈 문단 정확히 하나로 맞춤

    다음 표가 없거나 사이에 내용이 있으면 아무것도 하지 않습니다.

    Returns:
        빈 문단 개수 변화 (+1 삽입, -n 삭제, 0 변화 없음)
    """
    gap, next_tbl = scan_gap(tree, tbl)
    if next_tbl is None:
        return 0

    if not gap:
        tree.insert_after(tbl, ET.Element(W_P))
        return 1

    for node in gap[1:]:
        tree.remove(node)
    return -(len(gap) - 1)


def fix_align(tree: DocumentTree, tbl: ET.Element, options: TableOptions, settings: FixerSettings):
    """셀 문단 정렬, 글머리 내어쓰기, (autofit 시) 셀 너비 해제"""
    if options.autofit:
        for tc in tbl.iter(W_TC):
            tc_pr = get_pr(tc, 'tcPr')
            tc_w = find_child(tc_pr, 'tcW') if tc_pr is not None else None
            if tc_w is not None:
                set_w_attrs(tc_w, type='auto', w=0)

    bullets = tuple(settings.bullet_chars)
    for p in tbl.iter(W_P):
        p_pr = ensure_pr(p, 'pPr')
        remove_children(p_pr, 'ind')

        if paragraph_text(p).strip().startswith(bullets):
            ind = make_w('ind', left=settings.bullet_indent, hanging=settings.bullet_indent)
            set_child_in_order(p_pr, ind, P_PR_ORDER)

        if options.fix_spacing:
            spacing = ensure_child(p_pr, 'spacing', P_PR_ORDER)
            set_w_attrs(spacing, before=settings.paragraph_spacing, after=settings.paragraph_spacing)

        set_w_attrs(ensure_child(p_pr, 'jc', P_PR_ORDER), val='left')


# ============================================================
# 파이프라인
# ============================================================

RepairStage = Callable[[DocumentTree, ET.Element, TableOptions, FixerSettings], None]

# (옵션 속성명, 단계 함수)
REPAIR_STAGES: List[Tuple[str, RepairStage]] = [
    ('fix_borders', fix_borders),
    ('autofit', autofit),
    ('fix_spacing', fix_spacing),
    ('fix_align', fix_align),
]


def apply_repairs(
    tree: DocumentTree,
    tbl: ET.Element,
    options: TableOptions,
    settings: Optional[FixerSettings] = None,
) -> List[str]:
    """
    표 하나에 켜진 단계를 순서대로 적용

    Returns:
        적용된 단계 이름 목록
    """
    settings = settings or FixerSettings()
    if not table_rows(tbl):
        logger.warning("행이 없는 표는 수리하지 않습니다")
        return []

    applied = []
    for flag, stage in REPAIR_STAGES:
        if getattr(options, flag):
            stage(tree, tbl, options, settings)
            applied.append(flag)
    return applied


def fix_tree(
    tree: DocumentTree,
    configs: List[TableInfo],
    settings: Optional[FixerSettings] = None,
) -> int:
    """
    병합 후 표별 수리 적용

    Returns:
        수리 단계가 적용된 표 수
    """
    settings = settings or FixerSettings()
    resolved = resolve_configs(tree, configs)
    merge_tables(tree, resolved)

    repaired = 0
    for tbl, conf in resolved:
        if not tree.contains(tbl) or not conf.options.any():
            continue
        if apply_repairs(tree, tbl, conf.options, settings):
            repaired += 1
    logger.info("표 수리 완료: %d개", repaired)
    return repaired


def fix_document(
    pkg: DocxPackage,
    configs: List[TableInfo],
    settings: Optional[FixerSettings] = None,
) -> bytes:
    """
    문서 표 수리 후 DOCX 바이트 반환

    Args:
        pkg: DOCX 패키지 (트리가 변경됨)
        configs: 분석 결과에 사용자가 옵션을 켠 TableInfo 목록
        settings: 수리 설정 (기본값: FixerSettings())
    """
    fix_tree(pkg.tree, configs, settings)
    return pkg.to_bytes()
