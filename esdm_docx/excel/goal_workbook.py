# -*- coding: utf-8 -*-
"""
IEP 목표 엑셀 파싱 모듈

시트 하나가 단계(level) 하나입니다. 각 시트의 첫 열을 위에서부터 읽으며
영역 라벨과 목표 행을 구분해 GoalLevel -> GoalDomain -> Goal 계층을 만듭니다.

판정 (첫 열 값 기준, 순서대로):
- is_goal_row_indicator: 'M1', '2', '1.2.' 같은 목표 번호 -> 현재 영역에 목표 추가
- is_domain_label: 목표 번호도, 표 헤더도, 숫자도 아닌 텍스트 -> 영역 시작
- 그 외 (헤더 등): 무시

목표 본문은 'Mục tiêu SMART' 열(처음 30행에서 탐색)에서, 없으면 첫 번째
5자 초과 셀에서 가져옵니다.

사용 예:
    levels = load_goal_workbook("esdm_goals.xlsx")
    for level in levels:
        print(level.name, [d.name for d in level.domains])
"""

import logging
import re
from io import BytesIO
from pathlib import Path
from typing import Any, List, Optional, Sequence, Union

from openpyxl import load_workbook

from ..table.models import Goal, GoalDomain, GoalLevel


logger = logging.getLogger(__name__)

GOAL_ROW_RE = re.compile(r'^(M|m)?\d+(\.\d+)*\.?$')
BARE_NUMBER_RE = re.compile(r'^\d+$')

HEADER_STOP_WORDS = [
    'stt', 'no.', 'mục tiêu smart', 'mục tiêu', 'nội dung', 'lĩnh vực', 'mã', 'code',
    'mô tả', 'ghi chú', 'nhận xét', 'kết quả', 'đạt', 'chưa đạt', 'ngày',
]

SMART_HEADER_SCAN_ROWS = 30
MIN_GOAL_TEXT_LENGTH = 5


# ============================================================
# 판정 함수
# ============================================================

def is_goal_row_indicator(value: Any) -> bool:
    """목표 번호 셀인지 확인 ('M1', 'm2.', '3', '1.2')"""
    text = cell_str(value)
    return bool(text) and bool(GOAL_ROW_RE.match(text))


def is_table_header(text: str) -> bool:
    """표 헤더 셀인지 확인 (중단어와 같거나 '중단어 ' 로 시작)"""
    lower = (text or '').lower()
    return any(lower == word or lower.startswith(word + ' ') for word in HEADER_STOP_WORDS)


def _is_number(text: str) -> bool:
    try:
        float(text)
    except ValueError:
        return False
    return True


def is_domain_label(value: Any) -> bool:
    """영역 라벨 셀인지 확인"""
    text = cell_str(value)
    if not text:
        return False
    if is_goal_row_indicator(text):
        return False
    if is_table_header(text):
        return False
    if _is_number(text) and ' ' not in text:
        return False
    return True


# ============================================================
# 셀 값 / 정규화
# ============================================================

def cell_str(value: Any) -> str:
    """셀 값을 문자열로 (정수형 실수는 소수점 없이)"""
    if value is None:
        return ''
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def normalize_goal_id(text: str) -> str:
    """'m3.' -> 'M3', '7' -> 'M7'"""
    goal_id = re.sub(r'\.$', '', text.strip()).upper()
    if BARE_NUMBER_RE.match(goal_id):
        goal_id = f"M{goal_id}"
    return goal_id


def natural_key(name: str):
    """자연 정렬 키 ('Cấp độ 2' < 'Cấp độ 10')"""
    return [int(part) if part.isdigit() else part.lower() for part in re.split(r'(\d+)', name)]


def find_smart_column(rows: Sequence[Sequence[Any]]) -> int:
    """SMART 목표 열 인덱스 (없으면 -1)"""
    for row in rows[:SMART_HEADER_SCAN_ROWS]:
        for idx, value in enumerate(row or ()):
            text = cell_str(value).lower()
            if 'mục tiêu smart' in text or text in ('smart', 'smart goal'):
                return idx
    return -1


def goal_text(row: Sequence[Any], smart_col: int) -> str:
    """목표 본문 추출"""
    if 0 <= smart_col < len(row) and cell_str(row[smart_col]):
        return cell_str(row[smart_col])
    for value in row[1:]:
        text = cell_str(value)
        if len(text) > MIN_GOAL_TEXT_LENGTH:
            return text
    return ''


# ============================================================
# 파싱
# ============================================================

def parse_sheet_rows(name: str, rows: Sequence[Sequence[Any]]) -> Optional[GoalLevel]:
    """
    시트 행 목록으로 단계 하나 파싱

    Returns:
        GoalLevel (목표가 있는 영역이 없으면 None)
    """
    smart_col = find_smart_column(rows)
    domains: List[GoalDomain] = []
    current: Optional[GoalDomain] = None

    for row in rows:
        if not row:
            continue
        first = cell_str(row[0])
        if not first:
            continue

        if is_goal_row_indicator(first):
            if current is None:
                continue
            goal_id = normalize_goal_id(first)
            text = goal_text(row, smart_col)
            if text and current.find_goal(goal_id) is None:
                current.goals.append(Goal(id=goal_id, text=text))
        elif is_domain_label(first):
            current = next((d for d in domains if d.name.lower() == first.lower()), None)
            if current is None:
                current = GoalDomain(name=first)
                domains.append(current)

    valid = [d for d in domains if d.goals]
    if not valid:
        logger.debug("목표가 없는 시트 건너뜀: %s", name)
        return None
    return GoalLevel(name=name, domains=valid)


def load_goal_workbook(source: Union[str, Path, bytes]) -> List[GoalLevel]:
    """
    엑셀 파일(또는 바이트)에서 목표 계층 로드

    Returns:
        단계 목록 (시트 이름 자연 정렬)
    """
    stream = BytesIO(source) if isinstance(source, bytes) else str(source)
    wb = load_workbook(stream, read_only=True, data_only=True)
    try:
        levels = []
        for ws in wb.worksheets:
            rows = [list(row) for row in ws.iter_rows(values_only=True)]
            if not rows:
                continue
            level = parse_sheet_rows(ws.title, rows)
            if level is not None:
                levels.append(level)
    finally:
        wb.close()

    levels.sort(key=lambda level: natural_key(level.name))
    logger.info("목표 엑셀 로드: 단계 %d개", len(levels))
    return levels
