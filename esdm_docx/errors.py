# -*- coding: utf-8 -*-
"""
예외 정의

- DocxStructureError: 구조 전제조건 실패 (본문 파트 없음, 목표 표 없음 등)
- ExtractionError: 외부 내용 추출 서비스 실패 / 응답 형식 오류

표 수리 중 하위 요소가 없거나 병합 조건이 깨진 경우는 예외가 아니라
경고 로그 후 기본 동작으로 대체합니다.
"""


class EsdmDocxError(Exception):
    """esdm_docx 예외 기본 클래스"""


class DocxStructureError(EsdmDocxError, ValueError):
    """문서 구조가 작업 전제조건을 만족하지 않음"""


class ExtractionError(EsdmDocxError, RuntimeError):
    """외부 추출 서비스 호출 실패 또는 응답 데이터 오류"""
