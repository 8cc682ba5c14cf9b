# -*- coding: utf-8 -*-
"""
월간 진도 보고서 입력 데이터 모델

입력 JSON 구조 (camelCase):
    {
      "childInfo": {"name": "...", "dob": "...", "reportMonth": "12/2023", "caregiverTitle": "bố mẹ"},
      "fieldGroups": [
        {"id": "1", "fieldName": "Kỹ năng xã hội",
         "goals": [{"id": "1-1", "goal": "...", "percentage": 70, "note": ""}]}
      ]
    }

id 가 없으면 영역/목표 순번으로 채웁니다 ("1", "1-1").
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List


CAREGIVER_TITLES = ('bố', 'mẹ', 'bố mẹ')


@dataclass
class ChildInfo:
    """아동 정보"""
    name: str = ""
    dob: str = ""
    report_month: str = ""
    caregiver_title: str = "bố mẹ"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ChildInfo':
        title = str(data.get('caregiverTitle', data.get('caregiver_title', 'bố mẹ')) or 'bố mẹ')
        if title not in CAREGIVER_TITLES:
            raise ValueError(f"보호자 호칭은 {', '.join(CAREGIVER_TITLES)} 중 하나여야 합니다: {title}")
        return cls(
            name=str(data.get('name', '') or ''),
            dob=str(data.get('dob', '') or ''),
            report_month=str(data.get('reportMonth', data.get('report_month', '')) or ''),
            caregiver_title=title,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'dob': self.dob,
            'reportMonth': self.report_month,
            'caregiverTitle': self.caregiver_title,
        }


@dataclass
class ProgressGoal:
    """목표 하나의 달성률"""
    id: str = ""
    goal: str = ""
    percentage: float = 0.0
    note: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any], default_id: str = '') -> 'ProgressGoal':
        return cls(
            id=str(data.get('id') or default_id),
            goal=str(data.get('goal', '') or ''),
            percentage=float(data.get('percentage') or 0),
            note=str(data.get('note', '') or ''),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'goal': self.goal, 'percentage': self.percentage, 'note': self.note}


@dataclass
class FieldGroup:
    """영역(lĩnh vực)과 그 목표들"""
    id: str = ""
    field_name: str = ""
    goals: List[ProgressGoal] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], default_id: str = '') -> 'FieldGroup':
        group_id = str(data.get('id') or default_id)
        goals = data.get('goals') or []
        if not isinstance(goals, list) or not all(isinstance(item, dict) for item in goals):
            raise ValueError(f"goals 는 객체 배열이어야 합니다: {data.get('fieldName', group_id)}")
        return cls(
            id=group_id,
            field_name=str(data.get('fieldName', data.get('field_name', '')) or ''),
            goals=[
                ProgressGoal.from_dict(item, default_id=f"{group_id}-{idx + 1}")
                for idx, item in enumerate(goals)
            ],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'fieldName': self.field_name, 'goals': [g.to_dict() for g in self.goals]}


@dataclass
class ProgressReportInput:
    """월간 진도 보고서 입력"""
    child: ChildInfo = field(default_factory=ChildInfo)
    field_groups: List[FieldGroup] = field(default_factory=list)

    def all_goals(self) -> List[ProgressGoal]:
        return [goal for group in self.field_groups for goal in group.goals]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProgressReportInput':
        """
        Raises:
            ValueError: 구조가 맞지 않음
        """
        child = data.get('childInfo') or {}
        groups = data.get('fieldGroups') or []
        if not isinstance(child, dict) or not isinstance(groups, list):
            raise ValueError("childInfo 는 객체, fieldGroups 는 배열이어야 합니다")
        if not all(isinstance(item, dict) for item in groups):
            raise ValueError("fieldGroups 항목은 객체여야 합니다")
        return cls(
            child=ChildInfo.from_dict(child),
            field_groups=[
                FieldGroup.from_dict(item, default_id=str(idx + 1))
                for idx, item in enumerate(groups)
            ],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'childInfo': self.child.to_dict(),
            'fieldGroups': [g.to_dict() for g in self.field_groups],
        }
