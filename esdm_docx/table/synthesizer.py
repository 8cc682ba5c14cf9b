# -*- coding: utf-8 -*-
"""
IEP 목표 표 생성 모듈

선택된 목표로 목표 계획 표의 본문 행을 새로 만들어, 헤더 행 뒤를 교체합니다.

행 구성 (목표 하나당 3행):
    | [STT] | 영역 제목        | 장기 목표          | 단기 목표 n.g.1 |
    |       | (vMerge 계속)    | (vMerge 계속)      | 단기 목표 n.g.2 |
    |       | (vMerge 계속)    | (vMerge 계속)      | 단기 목표 n.g.3 |

- 영역 셀(과 STT 셀)은 영역의 첫 행에서 restart, 이후 continue
- 장기 목표 셀은 목표마다 첫 행에서 restart, 2/3행 continue
- 접미 태그(MTNT 등)는 장기 목표 셀에만 줄바꿈 후 굵게 표시

사용 예:
    goals = resolve_selections(selections, levels)
    replace_goal_table(pkg.tree, goals, smart_splitting=True)
"""

import logging
import re
import xml.etree.ElementTree as ET
from typing import Dict, List, Optional

from ..config_loader import SynthesizerSettings
from ..docxml.elements import (
    P_PR_ORDER,
    TC_PR_ORDER,
    W_P,
    W_TC,
    W_TR,
    RunStyle,
    ensure_pr,
    make_break_run,
    make_run,
    make_w,
    set_child_in_order,
    table_rows,
)
from ..docxml.package import DocumentTree
from ..errors import DocxStructureError
from .classifier import classify_table
from .goal_split import SHORT_GOAL_COUNT, split_short_goals
from .models import GoalPlanRole, ProcessedGoal


logger = logging.getLogger(__name__)

_LEVEL_NUMBER_RE = re.compile(r'\d+')


# ============================================================
# 셀/행 생성
# ============================================================

class GoalRowBuilder:
    """목표 표 행 생성기"""

    def __init__(self, settings: Optional[SynthesizerSettings] = None):
        self.settings = settings or SynthesizerSettings()

    def style(self, bold: bool = False) -> RunStyle:
        return RunStyle(font=self.settings.font, size=self.settings.font_size, bold=bold)

    def make_cell(
        self,
        runs: List[ET.Element],
        bold: bool = False,
        v_merge: Optional[str] = None,
        align: str = 'left',
        fill: Optional[str] = None,
    ) -> ET.Element:
        """
        셀 생성

        Args:
            runs: 문단에 넣을 run 목록
            bold: 제목 셀 여부 (가운데 세로 정렬, 문단 뒤 간격 없음)
            v_merge: 'restart' / 'continue' / None
            align: 문단 가로 정렬
            fill: 배경색 (RRGGBB)
        """
        tc = ET.Element(W_TC)
        tc_pr = ensure_pr(tc, 'tcPr')
        if v_merge == 'restart':
            set_child_in_order(tc_pr, make_w('vMerge', val='restart'), TC_PR_ORDER)
        elif v_merge == 'continue':
            # val 생략 = continue
            set_child_in_order(tc_pr, make_w('vMerge'), TC_PR_ORDER)
        if fill:
            set_child_in_order(tc_pr, make_w('shd', val='clear', color='auto', fill=fill), TC_PR_ORDER)
        set_child_in_order(tc_pr, make_w('vAlign', val='center' if bold else 'top'), TC_PR_ORDER)

        p = ET.SubElement(tc, W_P)
        p_pr = ensure_pr(p, 'pPr')
        if not bold:
            set_child_in_order(p_pr, make_w('spacing', after=self.settings.paragraph_after), P_PR_ORDER)
        set_child_in_order(p_pr, make_w('jc', val=align), P_PR_ORDER)
        p.extend(runs)
        return tc

    def text_cell(self, text: str, bold: bool = False, v_merge: Optional[str] = None,
                  align: str = 'left') -> ET.Element:
        return self.make_cell([make_run(text, self.style(bold))], bold=bold, v_merge=v_merge, align=align)

    def make_row(self, cells: List[ET.Element]) -> ET.Element:
        tr = ET.Element(W_TR)
        tr_pr = ensure_pr(tr, 'trPr')
        tr_pr.append(make_w('trHeight', val=self.settings.row_height))
        tr.extend(cells)
        return tr

    def long_term_runs(self, goal_num: str, goal: ProcessedGoal) -> List[ET.Element]:
        """장기 목표 셀 run (접미 태그는 줄바꿈 후 굵게)"""
        runs = [make_run(f"{goal_num}. {goal.long_term_goal}", self.style())]
        if goal.suffix:
            runs.append(make_break_run())
            runs.append(make_run(f" {goal.suffix}", self.style(bold=True)))
        return runs


# ============================================================
# 번호/제목
# ============================================================

def group_by_domain(goals: List[ProcessedGoal]) -> Dict[str, List[ProcessedGoal]]:
    """영역별 묶음 (처음 등장한 순서 유지)"""
    groups: Dict[str, List[ProcessedGoal]] = {}
    for goal in goals:
        groups.setdefault(goal.domain_name, []).append(goal)
    return groups


def short_level_name(level_name: str) -> str:
    """'Cấp độ 2' -> 'CĐ2' (숫자가 없으면 그대로)"""
    match = _LEVEL_NUMBER_RE.search(level_name)
    return f"CĐ{match.group(0)}" if match else level_name


def domain_title(domain_num: int, domain_name: str, goals: List[ProcessedGoal]) -> str:
    """'1. Giao tiếp (CĐ1-M1-M3, CĐ2-M5)'"""
    by_level: Dict[str, List[str]] = {}
    for goal in goals:
        by_level.setdefault(goal.level_name, []).append(goal.goal_id)
    parts = [f"{short_level_name(level)}-{'-'.join(ids)}" for level, ids in by_level.items()]
    return f"{domain_num}. {domain_name} ({', '.join(parts)})"


# ============================================================
# 행 생성 / 표 교체
# ============================================================

def build_goal_rows(
    goals: List[ProcessedGoal],
    has_ordinal: bool = False,
    smart_splitting: bool = True,
    settings: Optional[SynthesizerSettings] = None,
) -> List[ET.Element]:
    """
    목표 목록으로 표 본문 행 생성

    Args:
        goals: resolve_selections 결과 (선택 순서)
        has_ordinal: STT 열 포함 여부
        smart_splitting: 단기 목표 수치 분할 여부

    Returns:
        w:tr 요소 목록 (목표당 3행)
    """
    builder = GoalRowBuilder(settings)
    rows: List[ET.Element] = []

    for d_idx, (domain_name, domain_goals) in enumerate(group_by_domain(goals).items()):
        domain_num = d_idx + 1
        title = domain_title(domain_num, domain_name, domain_goals)

        for g_idx, goal in enumerate(domain_goals):
            goal_num = f"{domain_num}.{g_idx + 1}"
            short_goals = split_short_goals(goal.long_term_goal, smart_splitting)

            for i in range(SHORT_GOAL_COUNT):
                domain_start = g_idx == 0 and i == 0
                goal_start = i == 0
                domain_merge = 'restart' if domain_start else 'continue'
                cells = []

                if has_ordinal:
                    cells.append(builder.text_cell(
                        str(domain_num) if domain_start else '',
                        bold=True, v_merge=domain_merge, align='center',
                    ))
                cells.append(builder.text_cell(
                    title if domain_start else '',
                    bold=True, v_merge=domain_merge,
                ))

                long_runs = builder.long_term_runs(goal_num, goal) if goal_start else [make_run('', builder.style())]
                cells.append(builder.make_cell(long_runs, v_merge='restart' if goal_start else 'continue'))

                cells.append(builder.text_cell(f"{goal_num}.{i + 1} {short_goals[i]}"))
                rows.append(builder.make_row(cells))

    logger.debug("목표 표 행 생성: 목표 %d개, 행 %d개", len(goals), len(rows))
    return rows


def find_goal_table(tree: DocumentTree):
    """첫 번째 목표 계획 표와 역할 반환 (없으면 (None, None))"""
    for tbl in tree.tables():
        role = classify_table(tbl)
        if isinstance(role, GoalPlanRole):
            return tbl, role
    return None, None


def replace_goal_table(
    tree: DocumentTree,
    goals: List[ProcessedGoal],
    smart_splitting: bool = True,
    settings: Optional[SynthesizerSettings] = None,
) -> ET.Element:
    """
    목표 계획 표의 헤더 행 뒤를 새 행으로 교체

    Raises:
        DocxStructureError: 목표 계획 표가 없음

    Returns:
        교체된 표 요소
    """
    tbl, role = find_goal_table(tree)
    if tbl is None:
        raise DocxStructureError("목표 계획 표(Lĩnh vực / Mục tiêu dài hạn / Mục tiêu ngắn hạn)를 찾을 수 없습니다")

    header = table_rows(tbl)[role.header_row]
    keep = list(tbl).index(header) + 1
    rows = build_goal_rows(goals, role.has_ordinal_column, smart_splitting, settings)
    tree.replace_children(tbl, keep, rows)

    logger.info("목표 표 교체 완료: 목표 %d개 (STT 열: %s)", len(goals), role.has_ordinal_column)
    return tbl
