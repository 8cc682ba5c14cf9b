# -*- coding: utf-8 -*-
"""평가표 내용 추출 테스트 (Gemini 클라이언트는 가짜로 주입)"""

import json
from types import SimpleNamespace

import httpx
import pytest
from google.genai import errors as genai_errors
from google.genai import types

from esdm_docx.agent.extraction import (
    GeminiExtractor,
    SourceFile,
    build_prompt,
    build_response_schema,
    file_to_part,
    parse_extraction_json,
    strip_code_fence,
)
from esdm_docx.agent.models import ExtractionResult, SkillResult
from esdm_docx.errors import ExtractionError

from tests.docx_builders import make_docx, para


RESPONSE = {
    'table': [
        {'skill': 'Giao tiếp tiếp nhận', 'level1': '2/4', 'level2': '1/3'},
        {'skill': 'Chơi', 'level1': '3/3', 'level2': None},
    ],
    'percents': {'level1': 62.5, 'level2': '33.3', 'levelX': 1},
    'summary': 'Con tiến bộ tốt',
}


class FakeModels:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.calls = []

    def generate_content(self, model, contents, config):
        self.calls.append(SimpleNamespace(model=model, contents=contents, config=config))
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.text)


def _extractor(text=None, error=None) -> GeminiExtractor:
    client = SimpleNamespace(models=FakeModels(text=text, error=error))
    return GeminiExtractor(api_key='test-key', model='gemini-test', max_workers=2, client=client)


# ============================================================
# 응답 파싱
# ============================================================

def test_strip_code_fence():
    assert strip_code_fence('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fence('```\n[]\n```  ') == '[]'
    assert strip_code_fence(' {"a": 1} ') == '{"a": 1}'


def test_parse_extraction_json():
    result = parse_extraction_json('```json\n' + json.dumps(RESPONSE) + '\n```')

    assert result.percents == {1: 62.5, 2: 33.3}
    assert result.percents_old is None
    assert result.rows[0] == SkillResult('Giao tiếp tiếp nhận', {1: '2/4', 2: '1/3'})
    assert result.rows[1].values == {1: '3/3'}
    assert result.summary == 'Con tiến bộ tốt'
    assert result.percent(4) == 0.0


@pytest.mark.parametrize('text', ['không phải json', '[1, 2]', '{"table": [], "percents": {}}'])
def test_parse_extraction_json_rejects_bad_payload(text):
    with pytest.raises(ExtractionError):
        parse_extraction_json(text)


def test_compare_requires_previous_percents():
    with pytest.raises(ExtractionError, match='percentsOld'):
        parse_extraction_json(json.dumps(RESPONSE), compare=True)

    data = dict(RESPONSE, percentsOld={'level1': 25})
    assert parse_extraction_json(json.dumps(data), compare=True).percents_old == {1: 25.0}


def test_extraction_result_dict_round_trip():
    result = ExtractionResult.from_dict(dict(RESPONSE, percentsOld={'level2': 10}))
    again = ExtractionResult.from_dict(result.to_dict())
    assert again == result


def test_find_row_by_prefix():
    result = ExtractionResult(rows=[SkillResult('Chơi', {1: '1/2'}), SkillResult('', {})])
    assert result.find_row('chơi (độc lập)', str.lower).skill == 'Chơi'
    assert result.find_row('bắt chước', str.lower) is None


# ============================================================
# 지시문
# ============================================================

def test_build_prompt_single_column():
    prompt = build_prompt([1, 2], [2])
    assert 'CẤP ĐỘ 1, CẤP ĐỘ 2' in prompt
    assert 'cột "Lần 2"' in prompt
    assert 'percentsOld' not in prompt
    assert 'Hành vi chú ý' in prompt


def test_build_prompt_comparison_sorts_columns():
    prompt = build_prompt([3], [2, 1])
    assert 'Cột "Lần 1" (Cũ) và Cột "Lần 2" (Mới)' in prompt
    assert '"percentsOld"' in prompt


# ============================================================
# 파일 변환 / 호출
# ============================================================

def test_file_to_part_kinds():
    image = file_to_part(SourceFile('p1.png', b'\x89PNG', 'image/png'))
    assert image.inline_data.mime_type == 'image/png'

    pdf = file_to_part(SourceFile('bang.pdf', b'%PDF-1.4'))
    assert pdf.inline_data.mime_type == 'application/pdf'

    docx = file_to_part(SourceFile('bang.docx', make_docx(para('Giao tiếp: +'), para(''), para('Chơi: -'))))
    assert docx.text == 'Giao tiếp: +\nChơi: -'

    assert file_to_part(SourceFile('ghi_chu.txt', b'x', 'text/plain')) is None


def test_broken_docx_source_raises():
    with pytest.raises(ExtractionError):
        file_to_part(SourceFile('hong.docx', b'not a zip'))


def test_extract_sends_parts_in_order_and_reports_progress():
    extractor = _extractor(text=json.dumps(RESPONSE))
    progress = []
    files = [
        SourceFile('p1.png', b'img-1', 'image/png'),
        SourceFile('ghi_chu.txt', b'x', 'text/plain'),
        SourceFile('p2.jpg', b'img-2', 'image/jpeg'),
    ]

    result = extractor.extract(files, [1, 2], [1], on_progress=progress.append)

    assert result.percents[1] == 62.5
    assert progress == [10, 20, 30, 100]

    call = extractor.client.models.calls[0]
    assert call.model == 'gemini-test'
    assert call.config.response_mime_type == 'application/json'
    assert [p.inline_data.mime_type for p in call.contents[:2]] == ['image/png', 'image/jpeg']
    assert call.contents[0].inline_data.data == b'img-1'
    assert 'CẤP ĐỘ 1, CẤP ĐỘ 2' in call.contents[-1].text
    assert len(call.contents) == 3


def test_extract_requires_inputs():
    extractor = _extractor(text='{}')
    with pytest.raises(ExtractionError):
        extractor.extract([], [1], [1])
    with pytest.raises(ExtractionError):
        extractor.extract([SourceFile('a.png', b'x', 'image/png')], [], [1])


def test_extract_without_usable_files():
    extractor = _extractor(text='{}')
    with pytest.raises(ExtractionError, match='전송할 수 있는 파일'):
        extractor.extract([SourceFile('a.txt', b'x', 'text/plain')], [1], [1])


def test_empty_response_raises():
    extractor = _extractor(text='')
    with pytest.raises(ExtractionError, match='비어'):
        extractor.extract([SourceFile('a.png', b'x', 'image/png')], [1], [1])


def test_api_error_is_wrapped():
    error = genai_errors.APIError(500, {'error': {'code': 500, 'message': 'lỗi máy chủ', 'status': 'INTERNAL'}})
    extractor = _extractor(error=error)
    with pytest.raises(ExtractionError, match='Gemini') as exc_info:
        extractor.extract([SourceFile('a.png', b'x', 'image/png')], [1], [1])
    assert exc_info.value.__cause__ is error


def test_missing_api_key(monkeypatch):
    monkeypatch.delenv('GEMINI_API_KEY', raising=False)
    extractor = GeminiExtractor(api_key=None)
    with pytest.raises(ExtractionError, match='GEMINI_API_KEY'):
        extractor.client


def test_connection_error_is_wrapped():
    error = httpx.ConnectError('network down')
    extractor = _extractor(error=error)
    with pytest.raises(ExtractionError, match='연결') as exc_info:
        extractor.extract([SourceFile('a.png', b'x', 'image/png')], [1], [1])
    assert exc_info.value.__cause__ is error


@pytest.mark.parametrize('percents', [[10, 20], '62.5', None])
def test_parse_extraction_json_rejects_non_object_percents(percents):
    text = json.dumps({'table': [], 'percents': percents, 'summary': ''})
    with pytest.raises(ExtractionError, match='percents'):
        parse_extraction_json(text)


def test_parse_extraction_json_rejects_non_object_previous_percents():
    with pytest.raises(ExtractionError, match='percentsOld'):
        parse_extraction_json(json.dumps(dict(RESPONSE, percentsOld=[25])), compare=True)
    with pytest.raises(ExtractionError, match='percentsOld'):
        parse_extraction_json(json.dumps(dict(RESPONSE, percentsOld='25')))

    # 단일 열 요청에서 null 은 없는 것과 같음
    assert parse_extraction_json(json.dumps(dict(RESPONSE, percentsOld=None))).percents_old is None


def test_extraction_result_ignores_non_object_level_map():
    result = ExtractionResult.from_dict({'table': [], 'percents': [1, 2]})
    assert result.percents == {}


# ============================================================
# 응답 스키마
# ============================================================

def test_response_schema_single_column():
    schema = build_response_schema()
    assert schema.type == types.Type.OBJECT
    assert schema.required == ['table', 'percents', 'summary']
    assert 'percentsOld' not in schema.properties

    row = schema.properties['table'].items
    assert row.required == ['skill', 'level1', 'level2', 'level3', 'level4']
    assert row.properties['level0'].type == types.Type.STRING
    assert schema.properties['percents'].properties['level4'].type == types.Type.NUMBER


def test_response_schema_comparison_requires_previous_percents():
    schema = build_response_schema(compare=True)
    assert schema.required == ['table', 'percents', 'summary', 'percentsOld']
    assert set(schema.properties['percentsOld'].properties) == {f'level{i}' for i in range(5)}


def test_extract_sends_response_schema():
    data = dict(RESPONSE, percentsOld={'level1': 25})
    extractor = _extractor(text=json.dumps(data))
    result = extractor.extract([SourceFile('a.png', b'x', 'image/png')], [1], [2, 1])

    config = extractor.client.models.calls[0].config
    assert 'percentsOld' in config.response_schema.required
    assert result.percents_old == {1: 25.0}
