# -*- coding: utf-8 -*-
"""표 병합 테스트"""

import logging

from esdm_docx.docxml.elements import W_P, W_TBL, table_rows
from esdm_docx.table.analyzer import analyze_document
from esdm_docx.table.merger import merge_next_table, merge_tables, resolve_configs
from esdm_docx.table.models import TableInfo, TableOptions

from tests.docx_builders import gap, para, table


def _body_tags(pkg):
    return [child.tag for child in pkg.tree.body]


def test_merge_moves_rows_and_removes_gap(load_docx):
    pkg = load_docx(table([['a1'], ['a2']]), gap(3), table([['b1'], ['b2'], ['b3']]))
    tbl = pkg.tree.tables()[0]

    assert merge_next_table(pkg.tree, tbl)

    assert len(pkg.tree.tables()) == 1
    assert len(table_rows(tbl)) == 5
    assert W_P not in _body_tags(pkg)


def test_merge_keeps_absorbed_row_order(load_docx):
    pkg = load_docx(table([['a']]), table([['b'], ['c']]))
    tbl = pkg.tree.tables()[0]
    merge_next_table(pkg.tree, tbl)
    texts = [tr.findtext('.//{*}t') for tr in table_rows(tbl)]
    assert texts == ['a', 'b', 'c']


def test_content_between_tables_is_skipped_with_warning(load_docx, caplog):
    pkg = load_docx(table([['a']]), para('Ghi chú'), table([['b']]))
    tbl = pkg.tree.tables()[0]

    with caplog.at_level(logging.WARNING, logger='esdm_docx'):
        assert not merge_next_table(pkg.tree, tbl)

    assert len(pkg.tree.tables()) == 2
    assert not pkg.is_modified()
    assert '병합을 건너뜁니다' in caplog.text


def test_chain_merge_in_descending_order(load_docx):
    pkg = load_docx(table([['a']]), gap(1), table([['b']]), gap(2), table([['c']]))
    configs = analyze_document(pkg)
    for info in configs:
        info.options.merge_next = info.can_merge_next

    merged = merge_tables(pkg.tree, resolve_configs(pkg.tree, configs))

    assert merged == 2
    tables = pkg.tree.tables()
    assert len(tables) == 1
    assert len(table_rows(tables[0])) == 3
    assert _body_tags(pkg).count(W_TBL) == 1


def test_resolve_configs_skips_out_of_range(load_docx, caplog):
    pkg = load_docx(table([['a']]))
    configs = [
        TableInfo(index=0, options=TableOptions(merge_next=True)),
        TableInfo(index=7, options=TableOptions(merge_next=True)),
    ]
    with caplog.at_level(logging.WARNING, logger='esdm_docx'):
        resolved = resolve_configs(pkg.tree, configs)

    assert len(resolved) == 1
    assert resolved[0][0] is pkg.tree.tables()[0]
    assert configs[0].element is resolved[0][0]
    assert '범위를 벗어났습니다' in caplog.text


def test_merge_without_next_table_is_noop(load_docx):
    pkg = load_docx(table([['a']]))
    configs = [TableInfo(index=0, options=TableOptions(merge_next=True))]
    assert merge_tables(pkg.tree, resolve_configs(pkg.tree, configs)) == 0
    assert not pkg.is_modified()
