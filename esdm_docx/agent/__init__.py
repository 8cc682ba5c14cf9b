# -*- coding: utf-8 -*-
"""
agent 모듈 - 외부 내용 추출 / 보고서 제안 작성 (Gemini)

추출기 역할: 평가표 읽기 (기술별 단계 결과, 백분율, 요약)
코어 역할: 결과를 검증 없이 그대로 문서에 기록

사용 예:
    from esdm_docx.agent import GeminiExtractor, SourceFile

    extractor = GeminiExtractor()
    result = extractor.extract([SourceFile.from_path("p1.jpg")], levels=[1, 2], columns=[1])
"""

from .models import ExtractionResult, SkillResult, ALL_LEVELS, GoalSuggestion, ProgressSuggestions
from .extraction import (
    GeminiExtractor,
    SourceFile,
    SKILL_NAMES,
    build_prompt,
    build_response_schema,
    parse_extraction_json,
    strip_code_fence,
)
from .suggestion import GeminiProgressWriter, build_suggestion_prompt, parse_suggestion_json

__all__ = [
    'ExtractionResult',
    'SkillResult',
    'ALL_LEVELS',
    'GoalSuggestion',
    'ProgressSuggestions',
    'GeminiExtractor',
    'SourceFile',
    'SKILL_NAMES',
    'build_prompt',
    'build_response_schema',
    'parse_extraction_json',
    'strip_code_fence',
    'GeminiProgressWriter',
    'build_suggestion_prompt',
    'parse_suggestion_json',
]
