# -*- coding: utf-8 -*-
"""WordprocessingML 요소 헬퍼 테스트"""

import xml.etree.ElementTree as ET

from esdm_docx.docxml.elements import (
    P_PR_ORDER,
    TBL_PR_ORDER,
    RunStyle,
    attr_snapshot,
    cell_text,
    ensure_child,
    ensure_pr,
    is_empty_paragraph,
    local_name,
    make_run,
    make_w,
    set_child_in_order,
    w,
)

from tests.docx_builders import W_NS, cell, para


def _parse(fragment: str) -> ET.Element:
    return ET.fromstring(f'<root xmlns:w="{W_NS}">{fragment}</root>')[0]


def test_set_child_in_order_inserts_by_schema_rank():
    tbl_pr = ET.Element(w('tblPr'))
    tbl_pr.append(make_w('tblStyle', val='Grid'))
    tbl_pr.append(make_w('tblLook', val='04A0'))

    set_child_in_order(tbl_pr, ET.Element(w('tblBorders')), TBL_PR_ORDER)
    set_child_in_order(tbl_pr, make_w('tblW', w=0, type='auto'), TBL_PR_ORDER)

    assert [local_name(c.tag) for c in tbl_pr] == ['tblStyle', 'tblW', 'tblBorders', 'tblLook']


def test_set_child_in_order_replaces_in_place():
    p_pr = ET.Element(w('pPr'))
    p_pr.append(make_w('spacing', after=0))
    p_pr.append(make_w('jc', val='right'))

    set_child_in_order(p_pr, make_w('spacing', after=100), P_PR_ORDER)

    assert [local_name(c.tag) for c in p_pr] == ['spacing', 'jc']
    assert attr_snapshot(p_pr[0]) == {'after': '100'}


def test_ensure_child_reuses_existing():
    p_pr = ET.Element(w('pPr'))
    first = ensure_child(p_pr, 'jc', P_PR_ORDER)
    assert ensure_child(p_pr, 'jc', P_PR_ORDER) is first
    assert len(p_pr) == 1


def test_ensure_pr_goes_first():
    p = _parse(para('abc'))
    p_pr = ensure_pr(p, 'pPr')
    assert p[0] is p_pr
    assert ensure_pr(p, 'pPr') is p_pr


def test_is_empty_paragraph():
    assert is_empty_paragraph(_parse('<w:p/>'))
    assert is_empty_paragraph(_parse(para('   ')))
    assert not is_empty_paragraph(_parse(para('chữ')))
    assert not is_empty_paragraph(_parse('<w:p><w:r><w:drawing/></w:r></w:p>'))
    assert not is_empty_paragraph(_parse('<w:p><w:pPr><w:sectPr/></w:pPr></w:p>'))
    assert not is_empty_paragraph(_parse('<w:tbl/>'))


def test_cell_text_joins_paragraphs_with_space():
    tc = _parse('<w:tc>' + para('Giao tiếp') + para('tiếp nhận') + '</w:tc>')
    assert cell_text(tc) == 'Giao tiếp tiếp nhận'
    assert cell_text(_parse(cell(''))) == ''


def test_make_run_style_order():
    r = make_run(' x ', RunStyle(font='Times New Roman', size=24, bold=True, color='FF0000'))
    rpr = r.find(w('rPr'))
    assert [local_name(c.tag) for c in rpr] == ['rFonts', 'b', 'bCs', 'color', 'sz', 'szCs']
    assert r.find(w('t')).text == ' x '
    assert r.find(w('t')).get('{http://www.w3.org/XML/1998/namespace}space') == 'preserve'


def test_make_run_without_style_has_no_rpr():
    assert make_run('a').find(w('rPr')) is None
    assert make_run('a', RunStyle()).find(w('rPr')) is None
