# -*- coding: utf-8 -*-
"""
평가 보고서 필드 채우기 모듈

추출 결과와 학생 정보를 보고서 서식(docx)에 채웁니다.

처리 순서:
1. 라벨 문단: "Họ và tên: ..." 처럼 라벨로 시작하는 문단의 값 교체
2. 기술 평가 표: 첫 번째 기술 평가 표의 단계 열에 결과 기입
3. 요약 문단: "Nhận định chung về kết quả" 문단을 단계별 백분율 문장으로 재작성
4. 자리표시자: {name}, {p1} 같은 태그 치환 (run 경계를 넘어도 처리)

서식 보존:
- 라벨/표 셀은 첫 run 의 텍스트만 바꾸고, 나머지 run 은 rPr 을 남긴 채 텍스트만 비움
- 요약 문단은 pPr 만 남기고 run 을 새로 만듦

사용 예:
    pkg = DocxPackage.from_file("mau.docx")
    fill_report(pkg, student, result, levels=[1, 2])
    pkg.save("mau_Fix1.docx")
"""

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from ..agent.models import ExtractionResult
from ..config_loader import FillerSettings
from ..core.dates import format_date_vi
from ..core.text import normalize_text
from ..core.unit import Unit
from ..docxml.elements import (
    P_PR_ORDER,
    TBL_PR_ORDER,
    W_P,
    W_R,
    W_T,
    XML_SPACE,
    RunStyle,
    cell_text,
    ensure_child,
    ensure_pr,
    make_run,
    make_text,
    paragraph_text,
    row_cells,
    set_w_attrs,
    table_rows,
)
from ..docxml.package import DocumentTree, DocxPackage
from ..table.classifier import classify_table
from ..table.models import SkillResultRole


logger = logging.getLogger(__name__)

PLACEHOLDER_RE = re.compile(r'\{(\w+)\}')

SUMMARY_PREFIX_RE_TEMPLATE = r'(.*?{marker}.*?[:：])(.*?)(Tuổi phát triển.*|$)'
NO_LEVEL_TEXT = " Chưa chọn cấp độ nào để đánh giá."


@dataclass
class StudentInfo:
    """학생 정보 (날짜는 입력 그대로, 표시할 때 dd/mm/yyyy 로 변환)"""
    name: str = ""
    dob: str = ""
    eval_date: str = ""
    age: str = ""
    gender: str = ""
    student_id: str = ""

    def field_values(self) -> Dict[str, str]:
        """라벨 필드명 -> 표시 값"""
        return {
            'name': self.name or "",
            'dob': format_date_vi(self.dob),
            'eval_date': format_date_vi(self.eval_date),
            'age': self.age or "",
            'gender': self.gender or "",
            'student_id': self.student_id or "",
        }


def format_percent(value: float) -> str:
    """소수 한 자리, 쉼표 구분 (12.5 -> '12,5')"""
    return f"{value:.1f}".replace('.', ',')


def _text_nodes(p: ET.Element) -> List[ET.Element]:
    return list(p.iter(W_T))


def _set_text(t: ET.Element, text: str):
    t.text = text
    if text:
        t.set(XML_SPACE, 'preserve')


# ============================================================
# 1. 라벨 문단
# ============================================================

def compile_label_patterns(labels: Sequence[Tuple[str, str]]) -> List[Tuple[str, str, re.Pattern]]:
    """(라벨, 필드명, 패턴) 목록"""
    return [
        (label, field_name, re.compile(rf'^\s*{re.escape(label)}\s*[:：]', re.IGNORECASE))
        for label, field_name in labels
    ]


def fill_label_paragraph(p: ET.Element, patterns, values: Dict[str, str]) -> Optional[str]:
    """
    라벨 문단 한 개 처리

    Returns:
        적용된 라벨 (해당 없으면 None)
    """
    nodes = _text_nodes(p)
    if not nodes:
        return None
    full_text = ''.join(t.text or '' for t in nodes)

    for label, field_name, pattern in patterns:
        value = values.get(field_name, '')
        if not value:
            continue
        if pattern.match(full_text):
            _set_text(nodes[0], f"{label}: {value}")
            for t in nodes[1:]:
                t.text = ''
            return label
    return None


def fill_labels(tree: DocumentTree, values: Dict[str, str], settings: Optional[FillerSettings] = None) -> int:
    """모든 문단에 라벨 치환 적용, 치환된 문단 수 반환"""
    settings = settings or FillerSettings()
    patterns = compile_label_patterns(settings.labels)
    filled = 0
    for p in tree.paragraphs():
        if fill_label_paragraph(p, patterns, values):
            filled += 1
    logger.debug("라벨 문단 %d개 치환", filled)
    return filled


# ============================================================
# 2. 기술 평가 표
# ============================================================

def _row_title(tr: ET.Element) -> str:
    cells = row_cells(tr)
    return normalize_text(cell_text(cells[0]), fold=False) if cells else ''


def write_cell_value(tc: ET.Element, value: str):
    """셀의 첫 문단 첫 run 에 값 기록, 나머지 텍스트는 비움"""
    paragraphs = list(tc.iter(W_P))
    if not paragraphs:
        p = ET.SubElement(tc, W_P)
        p.append(make_run(value))
        return

    p = paragraphs[0]
    r = next(p.iter(W_R), None)
    if r is None:
        r = ET.SubElement(p, W_R)
    t = r.find(W_T)
    if t is None:
        t = make_text('')
        r.append(t)
    _set_text(t, value)

    for other in _text_nodes(p):
        if other is not t:
            other.text = ''
    for other_p in paragraphs[1:]:
        for other in _text_nodes(other_p):
            other.text = ''


def fill_skill_table(
    tree: DocumentTree,
    result: ExtractionResult,
    levels: Sequence[int],
    settings: Optional[FillerSettings] = None,
) -> int:
    """
    첫 번째 기술 평가 표에 단계별 결과 기록

    Returns:
        값이 기록된 행 수 (기술 평가 표가 없으면 0)
    """
    settings = settings or FillerSettings()
    for tbl in tree.tables():
        role = classify_table(tbl)
        if isinstance(role, SkillResultRole):
            break
    else:
        logger.warning("기술 평가 표(Kỹ năng)를 찾지 못해 표 채우기를 건너뜁니다")
        return 0

    tbl_pr = ensure_pr(tbl, 'tblPr')
    width = Unit.percent_to_pct(settings.skill_table_percent)
    set_w_attrs(ensure_child(tbl_pr, 'tblW', TBL_PR_ORDER), w=width, type='pct')
    set_w_attrs(ensure_child(tbl_pr, 'jc', TBL_PR_ORDER), val='center')

    selected = set(levels)
    filled = 0
    for tr in table_rows(tbl)[role.header_row + 1:]:
        title = _row_title(tr)
        if not title:
            continue
        matched = result.find_row(title, lambda s: normalize_text(s, fold=False))
        if matched is None:
            continue

        cells = row_cells(tr)
        for level, col in role.column_map.items():
            if level not in selected or col >= len(cells):
                continue
            value = matched.values.get(level)
            write_cell_value(cells[col], settings.missing_value if value is None else value)
        filled += 1

    logger.debug("기술 평가 표 %d행 기록", filled)
    return filled


# ============================================================
# 3. 요약 문단
# ============================================================

def summary_prefix(full_text: str, settings: FillerSettings) -> str:
    """기존 문단에서 'Nhận định chung về kết quả ...:' 부분 추출"""
    marker = re.escape(settings.summary_marker)
    pattern = re.compile(SUMMARY_PREFIX_RE_TEMPLATE.format(marker=marker), re.IGNORECASE)
    match = pattern.match(full_text)
    return match.group(1).strip() if match else settings.summary_default_prefix


def build_summary_runs(
    prefix: str,
    result: ExtractionResult,
    levels: Sequence[int],
    settings: FillerSettings,
) -> List[ET.Element]:
    """요약 문단 run 목록"""
    size = settings.summary_font_size
    plain = RunStyle(size=size)
    highlight = RunStyle(size=size, bold=True, color=settings.highlight_color)

    runs = [make_run(prefix + " ", RunStyle(size=size, bold=True))]
    if not levels:
        runs.append(make_run(NO_LEVEL_TEXT, plain))
        return runs

    for idx, level in enumerate(levels):
        new_value = format_percent(result.percent(level))
        runs.append(make_run(f"cấp độ {level} con đạt ", plain))
        if result.percents_old is not None and level in result.percents_old:
            old_value = format_percent(result.percents_old[level])
            runs.append(make_run(f"{old_value}% => {new_value}%", highlight))
        else:
            runs.append(make_run(f"{new_value}%", highlight))
        runs.append(make_run(". Và " if idx < len(levels) - 1 else ".", plain))
    return runs


def fill_summary(
    tree: DocumentTree,
    result: ExtractionResult,
    levels: Sequence[int],
    settings: Optional[FillerSettings] = None,
) -> int:
    """요약 문단 재작성, 처리된 문단 수 반환"""
    settings = settings or FillerSettings()
    marker = settings.summary_marker.lower()
    rebuilt = 0

    for p in tree.paragraphs():
        full_text = paragraph_text(p)
        if not _text_nodes(p) or marker not in full_text.lower():
            continue

        p_pr = ensure_pr(p, 'pPr')
        set_w_attrs(ensure_child(p_pr, 'jc', P_PR_ORDER), val='center')
        prefix = summary_prefix(full_text, settings)

        for child in list(p):
            if child is not p_pr:
                p.remove(child)
        p.extend(build_summary_runs(prefix, result, levels, settings))
        rebuilt += 1

    if not rebuilt:
        logger.warning("요약 문단(%s)을 찾지 못했습니다", settings.summary_marker)
    return rebuilt


# ============================================================
# 4. 자리표시자
# ============================================================

def placeholder_values(student: StudentInfo, result: ExtractionResult) -> Dict[str, str]:
    """{태그} -> 값"""
    values = student.field_values()
    values['summary'] = ''
    values['nhan_xet'] = ''
    for level in range(5):
        values[f'p{level}'] = f"{result.percent(level):.1f}%"
    return values


def _replace_span(texts: List[str], start: int, end: int, value: str):
    """run 텍스트 목록에서 [start, end) 구간을 value 로 교체 (시작 run 에 값 기록)"""
    pos = 0
    first = True
    for i, text in enumerate(texts):
        node_start, node_end = pos, pos + len(text)
        pos = node_end
        if node_end <= start or node_start >= end:
            continue
        local_start = max(start, node_start) - node_start
        local_end = min(end, node_end) - node_start
        if first:
            texts[i] = text[:local_start] + value + text[local_end:]
            first = False
        else:
            texts[i] = text[:local_start] + text[local_end:]


def fill_placeholders_in_paragraph(p: ET.Element, values: Dict[str, str]) -> int:
    """문단 안의 {태그} 치환, 치환 개수 반환 (모르는 태그는 빈 문자열)"""
    nodes = _text_nodes(p)
    if not nodes:
        return 0
    texts = [t.text or '' for t in nodes]
    matches = list(PLACEHOLDER_RE.finditer(''.join(texts)))
    if not matches:
        return 0

    for match in reversed(matches):
        _replace_span(texts, match.start(), match.end(), values.get(match.group(1), ''))
    for t, text in zip(nodes, texts):
        if (t.text or '') != text:
            _set_text(t, text)
    return len(matches)


def fill_placeholders(tree: DocumentTree, values: Dict[str, str]) -> int:
    replaced = 0
    for p in tree.paragraphs():
        replaced += fill_placeholders_in_paragraph(p, values)
    return replaced


# ============================================================
# 전체
# ============================================================

def fill_report(
    pkg: DocxPackage,
    student: StudentInfo,
    result: ExtractionResult,
    levels: Sequence[int],
    settings: Optional[FillerSettings] = None,
) -> DocxPackage:
    """
    보고서 채우기 (라벨 -> 기술 표 -> 요약 -> 자리표시자)

    Args:
        pkg: 보고서 서식 패키지 (트리가 변경됨)
        student: 학생 정보
        result: 추출 결과
        levels: 선택된 단계 (요약 문장 순서)
        settings: 필드 채우기 설정

    Returns:
        같은 패키지
    """
    settings = settings or FillerSettings()
    tree = pkg.tree
    levels = list(levels)

    labels = fill_labels(tree, student.field_values(), settings)
    rows = fill_skill_table(tree, result, levels, settings)
    summaries = fill_summary(tree, result, levels, settings)
    tags = fill_placeholders(tree, placeholder_values(student, result))

    logger.info("보고서 채우기 완료: 라벨 %d, 표 행 %d, 요약 %d, 태그 %d", labels, rows, summaries, tags)
    return pkg
