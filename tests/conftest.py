# -*- coding: utf-8 -*-
"""
공용 fixture

- settings: 기본 설정 (YAML 파일과 무관한 dataclass 기본값)
- load_docx: 본문 블록 -> DocxPackage
- skill_template / goal_template: 보고서, IEP 서식 샘플
"""

from __future__ import annotations

import pytest

from esdm_docx.config_loader import Settings
from esdm_docx.docxml.package import DocxPackage

from tests.docx_builders import make_docx, para, table


SKILL_HEADER = ['Kỹ năng', 'Cấp độ 1', 'Cấp độ 2', 'Cấp độ 3']
GOAL_HEADER = ['Lĩnh vực', 'Mục tiêu dài hạn', 'Mục tiêu ngắn hạn']


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def load_docx():
    def _load(*blocks: str) -> DocxPackage:
        return DocxPackage.from_bytes(make_docx(*blocks), source_name='test.docx')
    return _load


@pytest.fixture
def skill_template() -> bytes:
    """라벨 문단 + 기술 평가 표 + 요약 문단 + 자리표시자"""
    return make_docx(
        para(runs=['Họ và tên học sinh', ': ', 'cũ']),
        para('Ngày sinh: ...'),
        table([
            SKILL_HEADER,
            ['Giao tiếp tiếp nhận', '', '', ''],
            ['Kỹ năng xã hội', '', '', ''],
            ['Chơi', '', '', ''],
        ]),
        para(runs=['Nhận định chung về kết quả', ' lượng giá: ', 'cũ']),
        para(runs=['Cấp độ 1: {p', '1}']),
    )


@pytest.fixture
def goal_template() -> bytes:
    return make_docx(
        para('KẾ HOẠCH GIÁO DỤC CÁ NHÂN'),
        table([
            GOAL_HEADER,
            ['cũ', 'cũ', 'cũ'],
        ]),
    )
