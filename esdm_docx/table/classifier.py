# -*- coding: utf-8 -*-
"""
표 역할 판별 모듈

처음 몇 행의 헤더 텍스트로 표의 역할을 결정합니다.

판별 순서 (행 단위, 먼저 걸리는 행이 헤더):
- 목표 계획 표: 행 텍스트(성조 제거)에 'linh vuc', 'muc tieu dai han',
  'muc tieu ngan han' 이 모두 포함
- 기술 평가 표: 행 첫 셀에 'kỹ năng' 포함, 이후 셀에서 단계 열 매핑
- 그 외: GenericRole
"""

import re
import xml.etree.ElementTree as ET
from typing import Dict, List, Optional

from ..core.text import normalize_text
from ..docxml.elements import cell_text, row_cells, row_text, table_rows
from .models import GenericRole, GoalPlanRole, SkillResultRole, TableRole


HEADER_SCAN_ROWS = 5

GOAL_HEADER_MARKERS = ('linh vuc', 'muc tieu dai han', 'muc tieu ngan han')
ORDINAL_MARKERS = ('stt', 'no.')
SKILL_HEADER_MARKER = 'kỹ năng'

LEVEL_COLUMN_RE = re.compile(r'(?:cấp độ|level)\s*(\d+)')
LEVEL_DIGIT_RE = re.compile(r'(?:cấp độ|level)\s*(\d)')


def is_goal_header(tr: ET.Element) -> bool:
    """목표 계획 표 헤더 행인지 확인"""
    text = normalize_text(row_text(tr))
    return all(marker in text for marker in GOAL_HEADER_MARKERS)


def is_skill_header(tr: ET.Element) -> bool:
    """기술 평가 표 헤더 행인지 확인 (첫 셀 기준)"""
    cells = row_cells(tr)
    if not cells:
        return False
    return SKILL_HEADER_MARKER in normalize_text(cell_text(cells[0]), fold=False)


def level_column_map(tr: ET.Element) -> Dict[int, int]:
    """
    헤더 행에서 단계 번호 -> 열 인덱스 매핑

    'Cấp độ 12' 처럼 두 자리 이상이 붙으면 첫 자리만 단계 번호로 봅니다.
    """
    column_map: Dict[int, int] = {}
    cells = row_cells(tr)
    for col in range(1, len(cells)):
        text = normalize_text(cell_text(cells[col]), fold=False)
        match = LEVEL_COLUMN_RE.search(text)
        if not match:
            continue
        level = int(match.group(1))
        if level >= 10:
            digit = LEVEL_DIGIT_RE.search(text)
            if not digit:
                continue
            level = int(digit.group(1))
        column_map[level] = col
    return column_map


def classify_rows(rows: List[ET.Element]) -> TableRole:
    """행 목록으로 역할 판별"""
    for idx, tr in enumerate(rows[:HEADER_SCAN_ROWS]):
        if not row_cells(tr):
            continue
        if is_goal_header(tr):
            text = normalize_text(row_text(tr))
            has_ordinal = any(marker in text for marker in ORDINAL_MARKERS)
            return GoalPlanRole(header_row=idx, has_ordinal_column=has_ordinal)
        if is_skill_header(tr):
            return SkillResultRole(header_row=idx, column_map=level_column_map(tr))
    return GenericRole()


def classify_table(tbl: ET.Element) -> TableRole:
    """표 요소의 역할 판별"""
    return classify_rows(table_rows(tbl))


def find_first(tables: List[ET.Element], role_type: type) -> Optional[ET.Element]:
    """주어진 역할로 판별되는 첫 번째 표"""
    for tbl in tables:
        if isinstance(classify_table(tbl), role_type):
            return tbl
    return None
