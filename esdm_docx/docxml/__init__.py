# -*- coding: utf-8 -*-
"""
docxml 모듈 - DOCX 패키지와 WordprocessingML 트리 접근

- package: zip 로드/저장, 본문 트리 래퍼
- elements: 태그/텍스트/속성 헬퍼
"""

from .package import DocxPackage, DocumentTree, MAIN_DOCUMENT_PART, DOCX_MEDIA_TYPE
from .elements import (
    W_NS,
    NAMESPACES,
    w,
    paragraph_text,
    cell_text,
    row_text,
    table_rows,
    row_cells,
    is_empty_paragraph,
    RunStyle,
    make_run,
)

__all__ = [
    'DocxPackage',
    'DocumentTree',
    'MAIN_DOCUMENT_PART',
    'DOCX_MEDIA_TYPE',
    'W_NS',
    'NAMESPACES',
    'w',
    'paragraph_text',
    'cell_text',
    'row_text',
    'table_rows',
    'row_cells',
    'is_empty_paragraph',
    'RunStyle',
    'make_run',
]
