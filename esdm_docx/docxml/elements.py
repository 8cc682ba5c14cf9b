# -*- coding: utf-8 -*-
"""
WordprocessingML 요소 헬퍼

개요:
- w(): w: 네임스페이스 태그 생성
- paragraph_text / cell_text: 텍스트 추출
- is_empty_paragraph: 간격용 빈 문단 판정
- ensure_pr / set_child_in_order: 속성 요소를 스키마 순서대로 생성/교체
- RunStyle / make_run: 서식이 지정된 run 생성
"""

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Dict, List, Optional


# XML 네임스페이스
W_NS = 'http://schemas.openxmlformats.org/wordprocessingml/2006/main'
XML_NS = 'http://www.w3.org/XML/1998/namespace'

NAMESPACES = {
    'w': W_NS,
    'r': 'http://schemas.openxmlformats.org/officeDocument/2006/relationships',
    'wp': 'http://schemas.openxmlformats.org/drawingml/2006/wordprocessingDrawing',
    'mc': 'http://schemas.openxmlformats.org/markup-compatibility/2006',
}

for prefix, uri in NAMESPACES.items():
    ET.register_namespace(prefix, uri)


def w(tag: str) -> str:
    """w: 네임스페이스 태그 (Clark 표기)"""
    return f'{{{W_NS}}}{tag}'


def local_name(tag: str) -> str:
    """'{ns}tbl' -> 'tbl'"""
    return tag.split('}')[-1] if isinstance(tag, str) else ''


W_TBL = w('tbl')
W_TR = w('tr')
W_TC = w('tc')
W_P = w('p')
W_R = w('r')
W_T = w('t')
XML_SPACE = f'{{{XML_NS}}}space'

# 텍스트가 없어도 내용이 있는 것으로 보는 요소
_NON_TEXT_CONTENT = (
    w('drawing'), w('pict'), w('object'), w('sectPr'),
    '{http://schemas.openxmlformats.org/markup-compatibility/2006}AlternateContent',
)


# ============================================================
# 스키마 순서 (CT_TblPr, CT_TcPr, CT_PPr, CT_RPr 일부)
# ============================================================

TBL_PR_ORDER = [
    'tblStyle', 'tblpPr', 'tblOverlap', 'bidiVisual', 'tblStyleRowBandSize',
    'tblStyleColBandSize', 'tblW', 'jc', 'tblCellSpacing', 'tblInd',
    'tblBorders', 'shd', 'tblLayout', 'tblCellMar', 'tblLook',
    'tblCaption', 'tblDescription', 'tblPrChange',
]

TC_PR_ORDER = [
    'cnfStyle', 'tcW', 'gridSpan', 'hMerge', 'vMerge', 'tcBorders', 'shd',
    'noWrap', 'tcMar', 'textDirection', 'tcFitText', 'vAlign', 'hideMark',
]

P_PR_ORDER = [
    'pStyle', 'keepNext', 'keepLines', 'pageBreakBefore', 'framePr',
    'widowControl', 'numPr', 'suppressLineNumbers', 'pBdr', 'shd', 'tabs',
    'suppressAutoHyphens', 'kinsoku', 'wordWrap', 'overflowPunct',
    'topLinePunct', 'autoSpaceDE', 'autoSpaceDN', 'bidi', 'adjustRightInd',
    'snapToGrid', 'spacing', 'ind', 'contextualSpacing', 'mirrorIndents',
    'suppressOverlap', 'jc', 'textDirection', 'textAlignment',
    'textboxTightWrap', 'outlineLvl', 'divId', 'cnfStyle', 'rPr', 'sectPr',
    'pPrChange',
]

BORDER_ORDER = ['top', 'left', 'start', 'bottom', 'right', 'end', 'insideH', 'insideV']

CELL_MAR_ORDER = ['top', 'left', 'start', 'bottom', 'right', 'end']

# 부모의 첫 자식 자리에 오는 속성 컨테이너
_PR_CONTAINERS = ('tblPr', 'tcPr', 'pPr', 'rPr', 'trPr')


# ============================================================
# 텍스트 추출
# ============================================================

def paragraph_text(p: ET.Element) -> str:
    """문단의 전체 텍스트 (run 텍스트 연결)"""
    return ''.join(t.text or '' for t in p.iter(W_T))


def cell_paragraphs(tc: ET.Element) -> List[ET.Element]:
    """셀의 모든 문단 (중첩 표 포함, 문서 순서)"""
    return list(tc.iter(W_P))


def cell_text(tc: ET.Element) -> str:
    """셀 텍스트 (문단 사이는 공백으로 연결)"""
    paragraphs = cell_paragraphs(tc)
    if not paragraphs:
        return ''.join(t.text or '' for t in tc.iter(W_T))
    return ' '.join(paragraph_text(p) for p in paragraphs)


def row_cells(tr: ET.Element) -> List[ET.Element]:
    """행의 직접 자식 셀"""
    return [child for child in tr if child.tag == W_TC]


def table_rows(tbl: ET.Element) -> List[ET.Element]:
    """표의 직접 자식 행"""
    return [child for child in tbl if child.tag == W_TR]


def row_text(tr: ET.Element) -> str:
    """행 전체 텍스트"""
    return ' '.join(cell_text(tc) for tc in row_cells(tr))


def is_empty_paragraph(elem: ET.Element) -> bool:
    """텍스트가 없고 그림/구역 나누기도 없는 문단인지 확인"""
    if elem.tag != W_P:
        return False
    if paragraph_text(elem).strip():
        return False
    for tag in _NON_TEXT_CONTENT:
        if elem.find(f'.//{tag}') is not None:
            return False
    return True


# ============================================================
# 속성 요소 조작
# ============================================================

def find_child(parent: ET.Element, local: str) -> Optional[ET.Element]:
    """직접 자식 w:<local> 요소"""
    return parent.find(w(local))


def set_child_in_order(parent: ET.Element, child: ET.Element, order: List[str]) -> ET.Element:
    """
    같은 태그의 기존 자식을 교체하거나, 스키마 순서에 맞는 위치에 삽입

    Args:
        parent: 부모 요소
        child: 넣을 요소
        order: 부모 안에서의 자식 로컬 이름 순서
    """
    name = local_name(child.tag)
    existing = parent.find(child.tag)
    if existing is not None:
        idx = list(parent).index(existing)
        parent.remove(existing)
        parent.insert(idx, child)
        return child

    rank = order.index(name) if name in order else len(order)
    insert_at = len(parent)
    for idx, sibling in enumerate(parent):
        sibling_name = local_name(sibling.tag)
        if sibling_name in order and order.index(sibling_name) > rank:
            insert_at = idx
            break
    parent.insert(insert_at, child)
    return child


def ensure_child(parent: ET.Element, local: str, order: List[str]) -> ET.Element:
    """w:<local> 자식을 찾고, 없으면 순서에 맞게 생성"""
    existing = parent.find(w(local))
    if existing is not None:
        return existing
    return set_child_in_order(parent, ET.Element(w(local)), order)


def get_pr(elem: ET.Element, pr_local: str) -> Optional[ET.Element]:
    """속성 컨테이너(tblPr, tcPr, pPr, rPr, trPr) 반환"""
    return elem.find(w(pr_local))


def ensure_pr(elem: ET.Element, pr_local: str) -> ET.Element:
    """
    속성 컨테이너를 찾고, 없으면 첫 자식으로 생성

    tblPr/tcPr/pPr/rPr/trPr 는 항상 부모의 첫 자식 자리입니다.
    """
    if pr_local not in _PR_CONTAINERS:
        raise ValueError(f"지원하지 않는 속성 컨테이너: {pr_local}")
    pr = elem.find(w(pr_local))
    if pr is None:
        pr = ET.Element(w(pr_local))
        elem.insert(0, pr)
    return pr


def set_w_attrs(elem: ET.Element, **attrs) -> ET.Element:
    """w: 네임스페이스 속성 일괄 설정"""
    for key, value in attrs.items():
        elem.set(w(key), str(value))
    return elem


def make_w(local: str, **attrs) -> ET.Element:
    """w:<local> 요소 생성 + 속성 설정"""
    return set_w_attrs(ET.Element(w(local)), **attrs)


def remove_children(parent: ET.Element, local: str) -> int:
    """w:<local> 직접 자식 모두 제거, 제거 개수 반환"""
    targets = parent.findall(w(local))
    for target in targets:
        parent.remove(target)
    return len(targets)


# ============================================================
# Run 생성
# ============================================================

@dataclass
class RunStyle:
    """run 서식"""
    font: Optional[str] = None
    size: Optional[int] = None  # half-point (24 = 12pt)
    bold: bool = False
    italic: bool = False
    color: Optional[str] = None  # RRGGBB


def make_rpr(style: RunStyle) -> Optional[ET.Element]:
    """RunStyle -> w:rPr (스키마 순서: rFonts, b, bCs, i, iCs, color, sz, szCs)"""
    children: List[ET.Element] = []
    if style.font:
        children.append(make_w('rFonts', ascii=style.font, hAnsi=style.font,
                               eastAsia=style.font, cs=style.font))
    if style.bold:
        children.append(make_w('b'))
        children.append(make_w('bCs'))
    if style.italic:
        children.append(make_w('i'))
        children.append(make_w('iCs'))
    if style.color:
        children.append(make_w('color', val=style.color))
    if style.size:
        children.append(make_w('sz', val=style.size))
        children.append(make_w('szCs', val=style.size))
    if not children:
        return None
    rpr = ET.Element(w('rPr'))
    rpr.extend(children)
    return rpr


def make_text(text: str) -> ET.Element:
    """xml:space="preserve" 가 지정된 w:t"""
    t = ET.Element(W_T)
    t.set(XML_SPACE, 'preserve')
    t.text = text
    return t


def make_run(text: str, style: Optional[RunStyle] = None) -> ET.Element:
    """텍스트 run 생성"""
    r = ET.Element(W_R)
    if style is not None:
        rpr = make_rpr(style)
        if rpr is not None:
            r.append(rpr)
    r.append(make_text(text))
    return r


def make_break_run(style: Optional[RunStyle] = None) -> ET.Element:
    """줄바꿈(w:br) run 생성"""
    r = ET.Element(W_R)
    if style is not None:
        rpr = make_rpr(style)
        if rpr is not None:
            r.append(rpr)
    r.append(ET.Element(w('br')))
    return r


def attr_snapshot(elem: Optional[ET.Element]) -> Dict[str, str]:
    """w: 속성을 로컬 이름 딕셔너리로 (테스트/비교용)"""
    if elem is None:
        return {}
    return {local_name(k): v for k, v in elem.attrib.items()}
