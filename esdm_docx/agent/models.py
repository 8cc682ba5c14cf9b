# -*- coding: utf-8 -*-
"""
내용 추출 결과 데이터 모델

외부 추출 서비스가 돌려주는 JSON 구조:
    {
      "table": [{"skill": "...", "level0": "...", ..., "level4": "..."}],
      "percents": {"level0": 12.5, ...},
      "percentsOld": {...},          # 두 열 비교 시
      "summary": "..."
    }
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


LEVEL_KEY_PREFIX = 'level'
ALL_LEVELS = (0, 1, 2, 3, 4)


def level_key(level: int) -> str:
    return f"{LEVEL_KEY_PREFIX}{level}"


def _parse_level_map(data: Dict[str, Any]) -> Dict[int, Any]:
    """{'level1': x} -> {1: x} (형식이 맞지 않는 키는 무시)"""
    result: Dict[int, Any] = {}
    if not isinstance(data, dict):
        return result
    for key, value in data.items():
        if not isinstance(key, str) or not key.startswith(LEVEL_KEY_PREFIX):
            continue
        suffix = key[len(LEVEL_KEY_PREFIX):]
        if suffix.isdigit():
            result[int(suffix)] = value
    return result


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


@dataclass
class SkillResult:
    """기술 하나의 단계별 결과 ("2/4", "2/4 => 4/4" 등)"""
    skill: str = ""
    values: Dict[int, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SkillResult':
        values = {
            level: str(value)
            for level, value in _parse_level_map(data).items()
            if value is not None
        }
        return cls(skill=str(data.get('skill', '')), values=values)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {'skill': self.skill}
        for level in sorted(self.values):
            result[level_key(level)] = self.values[level]
        return result


@dataclass
class ExtractionResult:
    """추출 결과"""
    rows: List[SkillResult] = field(default_factory=list)
    percents: Dict[int, float] = field(default_factory=dict)
    percents_old: Optional[Dict[int, float]] = None
    summary: str = ""

    def percent(self, level: int) -> float:
        return self.percents.get(level, 0.0)

    def find_row(self, normalized_title: str, normalize) -> Optional[SkillResult]:
        """
        행 제목과 일치하거나 제목의 앞부분인 기술 결과

        Args:
            normalized_title: 정규화된 표 행 제목
            normalize: 기술명에 적용할 정규화 함수
        """
        for row in self.rows:
            skill = normalize(row.skill)
            if not skill:
                continue
            if skill == normalized_title or normalized_title.startswith(skill):
                return row
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ExtractionResult':
        rows = [SkillResult.from_dict(item) for item in data.get('table', []) if isinstance(item, dict)]
        percents = {level: _to_float(v) for level, v in _parse_level_map(data.get('percents', {})).items()}
        percents_old = None
        if isinstance(data.get('percentsOld'), dict):
            percents_old = {level: _to_float(v) for level, v in _parse_level_map(data['percentsOld']).items()}
        return cls(
            rows=rows,
            percents=percents,
            percents_old=percents_old,
            summary=str(data.get('summary', '') or ''),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            'table': [row.to_dict() for row in self.rows],
            'percents': {level_key(level): value for level, value in sorted(self.percents.items())},
            'summary': self.summary,
        }
        if self.percents_old is not None:
            result['percentsOld'] = {level_key(level): value for level, value in sorted(self.percents_old.items())}
        return result


# ============================================================
# 월간 진도 보고서 제안
# ============================================================

DEFAULT_GENERAL_SUMMARY = "Chưa có tổng kết."


@dataclass
class GoalSuggestion:
    """목표 하나의 평가 문장과 가정 지도 제안 (<b>, <br/> 포함 가능)"""
    id: str = ""
    assessment: str = ""
    details: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GoalSuggestion':
        return cls(
            id=str(data.get('id', '')),
            assessment=str(data.get('assessment', '') or ''),
            details=str(data.get('details', '') or ''),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'assessment': self.assessment, 'details': self.details}


@dataclass
class ProgressSuggestions:
    """
    진도 보고서 작성 내용

    JSON 구조:
        {
          "goalSuggestions": [{"id": "...", "assessment": "...", "details": "..."}],
          "generalSummary": "..."
        }
    """
    goals: Dict[str, GoalSuggestion] = field(default_factory=dict)
    general_summary: str = DEFAULT_GENERAL_SUMMARY

    def get(self, goal_id: str) -> Optional[GoalSuggestion]:
        return self.goals.get(goal_id)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProgressSuggestions':
        goals: Dict[str, GoalSuggestion] = {}
        for item in data.get('goalSuggestions') or []:
            if isinstance(item, dict):
                suggestion = GoalSuggestion.from_dict(item)
                goals[suggestion.id] = suggestion
        return cls(
            goals=goals,
            general_summary=str(data.get('generalSummary') or DEFAULT_GENERAL_SUMMARY),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'goalSuggestions': [s.to_dict() for s in self.goals.values()],
            'generalSummary': self.general_summary,
        }
