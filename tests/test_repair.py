# -*- coding: utf-8 -*-
"""표 수리 파이프라인 테스트"""

import logging

from esdm_docx.config_loader import FixerSettings
from esdm_docx.docxml.elements import (
    W_P,
    W_TBL,
    attr_snapshot,
    find_child,
    get_pr,
    local_name,
    table_rows,
    w,
)
from esdm_docx.docxml.package import DocxPackage
from esdm_docx.table.analyzer import analyze_document, scan_gap
from esdm_docx.table.models import TableInfo, TableOptions
from esdm_docx.table.repair import (
    apply_repairs,
    autofit,
    fix_borders,
    fix_document,
    fix_tree,
    normalize_gap,
)

from tests.docx_builders import gap, make_docx, para, table


def _first_table(pkg):
    return pkg.tree.tables()[0]


def _tbl_pr_child(tbl, name):
    return find_child(get_pr(tbl, 'tblPr'), name)


# ============================================================
# 단계별
# ============================================================

def test_fix_borders_sets_six_sides(load_docx):
    pkg = load_docx(table([['a']], borders='<w:tblBorders><w:top w:val="dotted"/></w:tblBorders>'))
    tbl = _first_table(pkg)
    fix_borders(pkg.tree, tbl, TableOptions(fix_borders=True), FixerSettings())

    borders = _tbl_pr_child(tbl, 'tblBorders')
    assert [local_name(c.tag) for c in borders] == ['top', 'left', 'bottom', 'right', 'insideH', 'insideV']
    assert attr_snapshot(borders[0]) == {'val': 'single', 'sz': '4', 'space': '0', 'color': 'auto'}


def test_fix_borders_is_idempotent(load_docx):
    pkg = load_docx(table([['a']], borders=None))
    tbl = _first_table(pkg)
    options = TableOptions(fix_borders=True)

    apply_repairs(pkg.tree, tbl, options)
    once = pkg.main_xml_bytes()
    apply_repairs(pkg.tree, tbl, options)
    assert pkg.main_xml_bytes() == once
    assert len(get_pr(tbl, 'tblPr').findall(w('tblBorders'))) == 1


def test_autofit_width_center_and_layout_removed(load_docx):
    pkg = load_docx(table(
        [['a']],
        tblpr_extra='<w:tblW w:w="9000" w:type="dxa"/><w:tblLayout w:type="fixed"/>',
    ))
    tbl = _first_table(pkg)
    autofit(pkg.tree, tbl, TableOptions(autofit=True), FixerSettings())

    assert attr_snapshot(_tbl_pr_child(tbl, 'tblW')) == {'w': '4250', 'type': 'pct'}
    assert attr_snapshot(_tbl_pr_child(tbl, 'jc')) == {'val': 'center'}
    assert _tbl_pr_child(tbl, 'tblLayout') is None


def test_table_without_tblpr_gets_one(load_docx, caplog):
    pkg = load_docx('<w:tbl><w:tr><w:tc><w:p/></w:tc></w:tr></w:tbl>')
    tbl = _first_table(pkg)
    with caplog.at_level(logging.WARNING, logger='esdm_docx'):
        apply_repairs(pkg.tree, tbl, TableOptions(fix_borders=True))
    assert local_name(tbl[0].tag) == 'tblPr'
    assert 'tblPr' in caplog.text


def test_table_without_rows_is_skipped(load_docx, caplog):
    pkg = load_docx('<w:tbl><w:tblPr/></w:tbl>')
    with caplog.at_level(logging.WARNING, logger='esdm_docx'):
        applied = apply_repairs(pkg.tree, _first_table(pkg), TableOptions(fix_borders=True, autofit=True))
    assert applied == []
    assert not pkg.is_modified()
    assert '행이 없는 표' in caplog.text


# ============================================================
# 간격 정리
# ============================================================

def _gap_after_first(load_docx, count):
    pkg = load_docx(table([['a']]), gap(count), table([['b']]))
    tbl = _first_table(pkg)
    normalize_gap(pkg.tree, tbl)
    nodes, next_tbl = scan_gap(pkg.tree, tbl)
    return nodes, next_tbl


def test_normalize_gap_inserts_one_paragraph(load_docx):
    nodes, next_tbl = _gap_after_first(load_docx, 0)
    assert len(nodes) == 1
    assert next_tbl is not None


def test_normalize_gap_keeps_single_paragraph(load_docx):
    nodes, _ = _gap_after_first(load_docx, 1)
    assert len(nodes) == 1


def test_normalize_gap_collapses_many(load_docx):
    nodes, _ = _gap_after_first(load_docx, 5)
    assert len(nodes) == 1


def test_normalize_gap_without_next_table(load_docx):
    pkg = load_docx(table([['a']]), para('kết thúc'))
    assert normalize_gap(pkg.tree, _first_table(pkg)) == 0
    assert not pkg.is_modified()


def test_fix_spacing_sets_cell_margins(load_docx):
    pkg = load_docx(table([['a']]), table([['b']]))
    tbl = _first_table(pkg)
    apply_repairs(pkg.tree, tbl, TableOptions(fix_spacing=True))

    margins = _tbl_pr_child(tbl, 'tblCellMar')
    assert {local_name(c.tag): attr_snapshot(c)['w'] for c in margins} == {
        'top': '50', 'left': '100', 'bottom': '50', 'right': '100',
    }
    nodes, _ = scan_gap(pkg.tree, tbl)
    assert len(nodes) == 1


def test_fix_spacing_with_merge_next_keeps_gap(load_docx):
    pkg = load_docx(table([['a']]), gap(3), table([['b']]))
    tbl = _first_table(pkg)
    apply_repairs(pkg.tree, tbl, TableOptions(fix_spacing=True, merge_next=True))

    nodes, next_tbl = scan_gap(pkg.tree, tbl)
    assert len(nodes) == 3
    assert next_tbl is not None
    assert _tbl_pr_child(tbl, 'tblCellMar') is not None


def test_refused_merge_leaves_gap_untouched(load_docx, caplog):
    pkg = load_docx(table([['a']]), gap(2), para('chen giữa'), table([['b']]))
    configs = analyze_document(pkg)
    assert not configs[0].can_merge_next
    configs[0].options = TableOptions(merge_next=True, fix_spacing=True)

    with caplog.at_level(logging.WARNING, logger='esdm_docx'):
        fix_tree(pkg.tree, configs)

    tables = pkg.tree.tables()
    assert len(tables) == 2
    assert [len(table_rows(t)) for t in tables] == [1, 1]
    body = [local_name(c.tag) for c in pkg.tree.body]
    assert body[:5] == ['tbl', 'p', 'p', 'p', 'tbl']
    nodes, next_tbl = scan_gap(pkg.tree, tables[0])
    assert len(nodes) == 2
    assert next_tbl is None
    assert '병합을 건너뜁니다' in caplog.text


# ============================================================
# 정렬
# ============================================================

BULLET_CELL = (
    '<w:tc><w:tcPr><w:tcW w:w="3000" w:type="dxa"/></w:tcPr>'
    '<w:p><w:pPr><w:ind w:left="720"/><w:jc w:val="both"/></w:pPr>'
    '<w:r><w:t>- mục một</w:t></w:r></w:p>'
    '<w:p><w:pPr><w:ind w:firstLine="360"/></w:pPr><w:r><w:t>thường</w:t></w:r></w:p>'
    '</w:tc>'
)


def test_fix_align_bullets_and_cell_width(load_docx):
    pkg = load_docx('<w:tbl><w:tblPr/><w:tr>' + BULLET_CELL + '</w:tr></w:tbl>')
    tbl = _first_table(pkg)
    apply_repairs(pkg.tree, tbl, TableOptions(autofit=True, fix_spacing=True, fix_align=True))

    bullet_p, plain_p = tbl.iter(W_P)
    bullet_ppr = get_pr(bullet_p, 'pPr')
    plain_ppr = get_pr(plain_p, 'pPr')

    assert attr_snapshot(find_child(bullet_ppr, 'ind')) == {'left': '425', 'hanging': '425'}
    assert find_child(plain_ppr, 'ind') is None
    assert attr_snapshot(find_child(bullet_ppr, 'jc')) == {'val': 'left'}
    assert attr_snapshot(find_child(plain_ppr, 'spacing')) == {'before': '40', 'after': '40'}
    assert [local_name(c.tag) for c in bullet_ppr] == ['spacing', 'ind', 'jc']

    tc_w = tbl.find('.//' + w('tcW'))
    assert attr_snapshot(tc_w) == {'w': '0', 'type': 'auto'}


def test_fix_align_without_autofit_keeps_cell_width(load_docx):
    pkg = load_docx('<w:tbl><w:tblPr/><w:tr>' + BULLET_CELL + '</w:tr></w:tbl>')
    tbl = _first_table(pkg)
    apply_repairs(pkg.tree, tbl, TableOptions(fix_align=True))

    assert attr_snapshot(tbl.find('.//' + w('tcW'))) == {'w': '3000', 'type': 'dxa'}
    assert tbl.find('.//' + w('spacing')) is None


# ============================================================
# 전체
# ============================================================

def test_fix_tree_merges_then_repairs(load_docx):
    pkg = load_docx(table([['a']], borders=None), gap(2), table([['b']], borders=None), para('x'), table([['c']]))
    configs = analyze_document(pkg)
    configs[0].options = TableOptions(merge_next=True, fix_borders=True, autofit=True)
    configs[2].options = TableOptions(fix_borders=True)

    assert fix_tree(pkg.tree, configs) == 2

    tables = pkg.tree.tables()
    assert len(tables) == 2
    assert len(table_rows(tables[0])) == 2
    assert _tbl_pr_child(tables[0], 'tblBorders') is not None
    assert attr_snapshot(_tbl_pr_child(tables[0], 'tblW'))['w'] == '4250'


def test_fix_document_returns_loadable_docx():
    data = make_docx(table([['a']], borders=None))
    pkg = DocxPackage.from_bytes(data, source_name='a.docx')
    configs = [TableInfo(index=0, options=TableOptions(fix_borders=True))]

    out = DocxPackage.from_bytes(fix_document(pkg, configs))
    assert out.tree.tables()[0].find('.//' + w('tblBorders')) is not None
    assert [c.tag for c in out.tree.body].count(W_TBL) == 1


def test_no_options_leaves_document_unchanged():
    data = make_docx(table([['a']], borders=None), gap(3), table([['b']]))
    pkg = DocxPackage.from_bytes(data)
    configs = analyze_document(pkg)
    fixed = fix_document(pkg, configs)
    assert DocxPackage.from_bytes(fixed).main_xml_bytes() == DocxPackage.from_bytes(data).main_xml_bytes()


def test_fix_tree_counts_only_tables_with_options():
    """옵션이 하나도 켜지지 않은 표는 수리 대상에서 빠짐"""
    pkg = DocxPackage.from_bytes(make_docx(table([['a']], borders=None), para('x'), table([['b']], borders=None)))
    configs = analyze_document(pkg)
    configs[1].options.fix_borders = True

    assert not configs[0].options.any()
    assert fix_tree(pkg.tree, configs) == 1
    first, second = pkg.tree.tables()
    assert get_pr(first, 'tblPr').find(w('tblBorders')) is None
    assert get_pr(second, 'tblPr').find(w('tblBorders')) is not None
