# -*- coding: utf-8 -*-
"""평가 보고서 필드 채우기 테스트"""

import logging

import pytest

from esdm_docx.agent.models import ExtractionResult, SkillResult
from esdm_docx.config_loader import FillerSettings
from esdm_docx.docxml.elements import W_P, W_R, W_T, attr_snapshot, find_child, get_pr, paragraph_text, row_cells, table_rows, w
from esdm_docx.docxml.package import DocxPackage
from esdm_docx.field.filler import (
    StudentInfo,
    fill_labels,
    fill_placeholders,
    fill_report,
    fill_skill_table,
    fill_summary,
    format_percent,
    placeholder_values,
)

from tests.docx_builders import para, table


@pytest.fixture
def student() -> StudentInfo:
    return StudentInfo(
        name='Nguyễn Văn A',
        dob='2020-05-03',
        eval_date='2023-08-10',
        age='3 tuổi 3 tháng',
        student_id='HS01',
    )


@pytest.fixture
def result() -> ExtractionResult:
    return ExtractionResult(
        rows=[
            SkillResult('Giao tiếp tiếp nhận', {1: '2/4', 2: '1/3'}),
            SkillResult('Kỹ năng xã hội', {1: '3/3'}),
        ],
        percents={1: 50.0, 2: 25.0},
        summary='Tốt',
    )


def _cell_texts(tbl):
    return [[paragraph_text(tc.find(W_P)) for tc in row_cells(tr)] for tr in table_rows(tbl)]


# ============================================================
# 라벨
# ============================================================

def test_label_paragraph_replaced_and_other_runs_emptied(load_docx, student):
    pkg = load_docx(para(runs=['Họ và tên học sinh', ': ', 'cũ']))
    assert fill_labels(pkg.tree, student.field_values()) == 1

    p = pkg.tree.paragraphs()[0]
    texts = [t.text for t in p.iter(W_T)]
    assert texts == ['Họ và tên học sinh: Nguyễn Văn A', '', '']
    assert len(list(p.iter(W_R))) == 3


def test_label_order_prefers_longer_label(load_docx, student):
    pkg = load_docx(
        para('Họ và tên: ...'),
        para('Tuổi thực: ...'),
        para('Ngày sinh: ...'),
        para('NGÀY LƯỢNG GIÁ ： ...'),
        para('Mã HS: ...'),
    )
    fill_labels(pkg.tree, student.field_values())

    assert pkg.paragraph_texts() == [
        'Họ và tên: Nguyễn Văn A',
        'Tuổi thực: 3 tuổi 3 tháng',
        'Ngày sinh: 03/05/2020',
        'Ngày lượng giá: 10/08/2023',
        'Mã HS: HS01',
    ]


def test_label_with_empty_value_is_left_alone(load_docx, student):
    pkg = load_docx(para('Giới tính: Nam'), para('Ghi chú Họ và tên: x'))
    assert fill_labels(pkg.tree, student.field_values()) == 0
    assert not pkg.is_modified()


def test_custom_labels(load_docx, student):
    settings = FillerSettings(labels=[('Học sinh', 'name')])
    pkg = load_docx(para('Học sinh: ?'), para('Họ và tên: ?'))
    fill_labels(pkg.tree, student.field_values(), settings)
    assert pkg.paragraph_texts() == ['Học sinh: Nguyễn Văn A', 'Họ và tên: ?']


# ============================================================
# 기술 평가 표
# ============================================================

SKILL_ROWS = [
    ['Kỹ năng', 'Cấp độ 1', 'Cấp độ 2', 'Cấp độ 3'],
    ['Giao tiếp tiếp nhận', '', '', ''],
    ['Kỹ năng xã hội', '', '', ''],
    ['Chơi', 'x', 'x', 'x'],
]


def test_skill_table_filled_for_selected_levels(load_docx, result):
    pkg = load_docx(table([['a']]), table(SKILL_ROWS), table(SKILL_ROWS))
    assert fill_skill_table(pkg.tree, result, [1, 2]) == 2

    first_skill, second_skill = pkg.tree.tables()[1:]
    assert _cell_texts(first_skill)[1:] == [
        ['Giao tiếp tiếp nhận', '2/4', '1/3', ''],
        ['Kỹ năng xã hội', '3/3', '-', ''],
        ['Chơi', 'x', 'x', 'x'],
    ]
    assert _cell_texts(second_skill) == SKILL_ROWS

    tbl_pr = get_pr(first_skill, 'tblPr')
    assert attr_snapshot(find_child(tbl_pr, 'tblW')) == {'w': '4500', 'type': 'pct'}
    assert attr_snapshot(find_child(tbl_pr, 'jc')) == {'val': 'center'}


def test_skill_row_matches_by_prefix(load_docx):
    pkg = load_docx(table([['Kỹ năng', 'Cấp độ 1'], ['Chơi (độc lập)', '']]))
    result = ExtractionResult(rows=[SkillResult('Chơi', {1: '4/5'})])
    fill_skill_table(pkg.tree, result, [1])
    assert _cell_texts(pkg.tree.tables()[0])[1] == ['Chơi (độc lập)', '4/5']


def test_skill_cell_keeps_first_run_format(load_docx):
    cell_xml = (
        '<w:tc><w:p><w:r><w:rPr><w:b/></w:rPr><w:t>cũ</w:t></w:r>'
        '<w:r><w:t>thêm</w:t></w:r></w:p></w:tc>'
    )
    header = '<w:tr>' + '<w:tc><w:p><w:r><w:t>Kỹ năng</w:t></w:r></w:p></w:tc>' \
             '<w:tc><w:p><w:r><w:t>Cấp độ 1</w:t></w:r></w:p></w:tc></w:tr>'
    body = '<w:tr><w:tc><w:p><w:r><w:t>Chơi</w:t></w:r></w:p></w:tc>' + cell_xml + '</w:tr>'
    pkg = load_docx('<w:tbl><w:tblPr/>' + header + body + '</w:tbl>')

    fill_skill_table(pkg.tree, ExtractionResult(rows=[SkillResult('Chơi', {1: '1/2'})]), [1])

    value_cell = row_cells(table_rows(pkg.tree.tables()[0])[1])[1]
    runs = list(value_cell.iter(W_R))
    assert runs[0].find(w('rPr')).find(w('b')) is not None
    assert [r.find(W_T).text for r in runs] == ['1/2', '']


def test_no_skill_table_warns(load_docx, result, caplog):
    pkg = load_docx(table([['a', 'b']]))
    with caplog.at_level(logging.WARNING, logger='esdm_docx'):
        assert fill_skill_table(pkg.tree, result, [1]) == 0
    assert 'Kỹ năng' in caplog.text


# ============================================================
# 요약 문단
# ============================================================

def _summary_pkg(load_docx):
    return load_docx(para(
        runs=['Nhận định chung về kết quả', ' lượng giá: ', 'cũ'],
        ppr='<w:pPr><w:spacing w:after="120"/></w:pPr>',
    ))


def test_summary_rebuilt_with_levels(load_docx, result):
    pkg = _summary_pkg(load_docx)
    assert fill_summary(pkg.tree, result, [1, 2]) == 1

    p = pkg.tree.paragraphs()[0]
    assert paragraph_text(p) == (
        'Nhận định chung về kết quả lượng giá: '
        'cấp độ 1 con đạt 50,0%. Và cấp độ 2 con đạt 25,0%.'
    )

    p_pr = get_pr(p, 'pPr')
    assert find_child(p_pr, 'spacing') is not None
    assert attr_snapshot(find_child(p_pr, 'jc')) == {'val': 'center'}

    runs = list(p.iter(W_R))
    assert runs[0].find(w('rPr')).find(w('b')) is not None
    highlight = runs[2].find(w('rPr'))
    assert attr_snapshot(highlight.find(w('color'))) == {'val': 'FF0000'}
    assert attr_snapshot(highlight.find(w('sz'))) == {'val': '26'}


def test_summary_with_previous_percents(load_docx, result):
    result.percents_old = {1: 40.0, 2: 12.5}
    pkg = _summary_pkg(load_docx)
    fill_summary(pkg.tree, result, [2])

    assert paragraph_text(pkg.tree.paragraphs()[0]).endswith('cấp độ 2 con đạt 12,5% => 25,0%.')


def test_summary_without_levels(load_docx, result):
    pkg = _summary_pkg(load_docx)
    fill_summary(pkg.tree, result, [])
    assert paragraph_text(pkg.tree.paragraphs()[0]) == (
        'Nhận định chung về kết quả lượng giá:  Chưa chọn cấp độ nào để đánh giá.'
    )


def test_summary_missing_uses_nothing_and_warns(load_docx, result, caplog):
    pkg = load_docx(para('Kết luận'))
    with caplog.at_level(logging.WARNING, logger='esdm_docx'):
        assert fill_summary(pkg.tree, result, [1]) == 0
    assert not pkg.is_modified()
    assert 'nhận định chung' in caplog.text


# ============================================================
# 자리표시자
# ============================================================

def test_placeholders_across_runs(load_docx, student, result):
    pkg = load_docx(
        para(runs=['Tên: {na', 'me}', ' - {p1} / {p', '3}']),
        para('{unknown} ở đây'),
    )
    count = fill_placeholders(pkg.tree, placeholder_values(student, result))

    assert count == 4
    first, second = pkg.tree.paragraphs()
    assert paragraph_text(first) == 'Tên: Nguyễn Văn A - 50.0% / 0.0%'
    assert [t.text for t in first.iter(W_T)][0] == 'Tên: Nguyễn Văn A'
    assert paragraph_text(second) == ' ở đây'


def test_format_percent():
    assert format_percent(12.5) == '12,5'
    assert format_percent(0) == '0,0'
    assert format_percent(66.666) == '66,7'


# ============================================================
# 전체
# ============================================================

def test_fill_report_end_to_end(skill_template, student, result):
    pkg = DocxPackage.from_bytes(skill_template, source_name='mau.docx')
    fill_report(pkg, student, result, [1, 2])

    reloaded = DocxPackage.from_bytes(pkg.to_bytes())
    texts = reloaded.paragraph_texts()
    assert 'Họ và tên học sinh: Nguyễn Văn A' in texts
    assert 'Ngày sinh: 03/05/2020' in texts
    assert 'Cấp độ 1: 50.0%' in texts
    assert any(t.startswith('Nhận định chung về kết quả lượng giá: cấp độ 1 con đạt 50,0%') for t in texts)

    skill_rows = _cell_texts(reloaded.tree.tables()[0])
    assert skill_rows[2] == ['Kỹ năng xã hội', '3/3', '-', '']
