# -*- coding: utf-8 -*-
"""
텍스트 정규화

표 헤더, 기술명, 라벨 비교에 쓰는 문자열 정규화 함수입니다.

예: "  Kỹ   Năng\\n" → "ky nang"
"""

import re
import unicodedata


_WHITESPACE_RE = re.compile(r'\s+')


def collapse_whitespace(text: str) -> str:
    """연속 공백을 하나로 줄이고 양끝 공백 제거"""
    return _WHITESPACE_RE.sub(' ', text or '').strip()


def fold_diacritics(text: str) -> str:
    """
    베트남어 성조/모음 기호 제거

    NFD 분해 후 결합 문자를 지우고, 분해되지 않는 đ/Đ 는 d/D 로 바꿉니다.
    """
    if not text:
        return ''
    decomposed = unicodedata.normalize('NFD', text)
    stripped = ''.join(ch for ch in decomposed if not unicodedata.combining(ch))
    stripped = stripped.replace('đ', 'd').replace('Đ', 'D')
    return unicodedata.normalize('NFC', stripped)


def normalize_text(text: str, fold: bool = True) -> str:
    """소문자 + (기호 제거) + 공백 정리"""
    result = (text or '').lower()
    if fold:
        result = fold_diacritics(result)
    return collapse_whitespace(result)
