# -*- coding: utf-8 -*-
"""
표 처리 관련 데이터 모델

개요:
- TableRole: 표 역할 (SkillResultRole / GoalPlanRole / GenericRole)
- TableIssue: 분석 단계에서 찾은 결함 종류
- TableOptions: 표별 수리 옵션
- TableInfo: 분석 결과 (수리 단계 입력)
- Goal*, ProcessedGoal: IEP 목표 계층 (목표 표 생성 입력)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union


# ============================================================
# 표 역할
# ============================================================

@dataclass
class SkillResultRole:
    """기술 평가 결과 표 (헤더 첫 셀 'kỹ năng')"""
    header_row: int = 0
    # 단계 번호 -> 열 인덱스
    column_map: Dict[int, int] = field(default_factory=dict)


@dataclass
class GoalPlanRole:
    """목표 계획 표 (영역 + 장기 목표 + 단기 목표 헤더)"""
    header_row: int = 0
    has_ordinal_column: bool = False  # STT / No. 열 존재 여부


@dataclass
class GenericRole:
    """일반 표 (후속 처리 대상 아님)"""


TableRole = Union[SkillResultRole, GoalPlanRole, GenericRole]


# ============================================================
# 분석 / 수리
# ============================================================

class TableIssue(str, Enum):
    """표 결함"""
    MISSING_BORDERS = 'missing borders'
    INCOMPLETE_BORDERS = 'incomplete borders'
    MERGEABLE = 'mergeable with next table'

    @property
    def label(self) -> str:
        """화면 표시용 문구"""
        return ISSUE_LABELS[self]


ISSUE_LABELS = {
    TableIssue.MISSING_BORDERS: 'Thiếu viền bảng',
    TableIssue.INCOMPLETE_BORDERS: 'Viền không đầy đủ',
    TableIssue.MERGEABLE: 'Có thể gộp với bảng dưới',
}


@dataclass
class TableOptions:
    """표별 수리 옵션 (기본값은 모두 꺼짐)"""
    fix_borders: bool = False
    fix_spacing: bool = False
    autofit: bool = False
    merge_next: bool = False
    fix_align: bool = False

    def to_dict(self) -> Dict[str, bool]:
        return {
            'fixBorders': self.fix_borders,
            'fixSpacing': self.fix_spacing,
            'autofit': self.autofit,
            'mergeNext': self.merge_next,
            'fixAlign': self.fix_align,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TableOptions':
        return cls(
            fix_borders=bool(data.get('fixBorders', False)),
            fix_spacing=bool(data.get('fixSpacing', False)),
            autofit=bool(data.get('autofit', False)),
            merge_next=bool(data.get('mergeNext', False)),
            fix_align=bool(data.get('fixAlign', False)),
        )

    def any(self) -> bool:
        """켜진 옵션이 하나라도 있는지"""
        return any((self.fix_borders, self.fix_spacing, self.autofit, self.merge_next, self.fix_align))


@dataclass
class TableInfo:
    """
    표 분석 정보

    index 는 분석 시점의 문서 순서 인덱스입니다. 병합으로 구조가 바뀌면
    인덱스가 달라지므로, 수리 단계에서는 시작 시점에 요소로 한 번 변환한 뒤
    요소 참조(element)로만 표를 찾습니다.
    """
    id: int = 0
    index: int = 0
    preview_html: str = ""
    issues: List[TableIssue] = field(default_factory=list)
    can_merge_next: bool = False
    is_merge_target: bool = False
    options: TableOptions = field(default_factory=TableOptions)

    # XML 요소 참조 (직렬화 대상 아님)
    element: Any = None

    def to_dict(self) -> Dict[str, Any]:
        """외부 전달용 딕셔너리 (요소 참조 제외)"""
        return {
            'id': self.id,
            'index': self.index,
            'previewHtml': self.preview_html,
            'issues': [issue.value for issue in self.issues],
            'issueLabels': [issue.label for issue in self.issues],
            'canMergeNext': self.can_merge_next,
            'isMergeTarget': self.is_merge_target,
            'options': self.options.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TableInfo':
        issues = []
        for value in data.get('issues', []):
            try:
                issues.append(TableIssue(value))
            except ValueError:
                continue
        return cls(
            id=int(data.get('id', 0)),
            index=int(data.get('index', 0)),
            preview_html=data.get('previewHtml', ''),
            issues=issues,
            can_merge_next=bool(data.get('canMergeNext', False)),
            is_merge_target=bool(data.get('isMergeTarget', False)),
            options=TableOptions.from_dict(data.get('options', {})),
        )


# ============================================================
# IEP 목표 계층
# ============================================================

GOAL_SUFFIXES = ('(MTNT)', '(MTC)', '(MTP)')


@dataclass
class Goal:
    """목표 (엑셀의 SMART 목표 한 줄)"""
    id: str = ""
    text: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {'id': self.id, 'text': self.text}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Goal':
        return cls(id=str(data.get('id', '')), text=str(data.get('text', '')))


@dataclass
class GoalDomain:
    """영역 (lĩnh vực)"""
    name: str = ""
    goals: List[Goal] = field(default_factory=list)

    def find_goal(self, goal_id: str) -> Optional[Goal]:
        for goal in self.goals:
            if goal.id == goal_id:
                return goal
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'goals': [g.to_dict() for g in self.goals]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GoalDomain':
        return cls(
            name=str(data.get('name', '')),
            goals=[Goal.from_dict(g) for g in data.get('goals', [])],
        )


@dataclass
class GoalLevel:
    """단계 (엑셀 시트 하나)"""
    name: str = ""
    domains: List[GoalDomain] = field(default_factory=list)

    def find_domain(self, name: str) -> Optional[GoalDomain]:
        for domain in self.domains:
            if domain.name == name:
                return domain
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'domains': [d.to_dict() for d in self.domains]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GoalLevel':
        return cls(
            name=str(data.get('name', '')),
            domains=[GoalDomain.from_dict(d) for d in data.get('domains', [])],
        )


@dataclass
class SelectedGoal:
    """사용자가 고른 목표 + 접미 태그"""
    id: str = ""
    suffix: str = ""


@dataclass
class GoalSelection:
    """단계/영역별 선택"""
    level: str = ""
    domain: str = ""
    goals: List[SelectedGoal] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GoalSelection':
        goals = []
        for item in data.get('goals', []):
            if isinstance(item, str):
                goals.append(SelectedGoal(id=item))
            else:
                goals.append(SelectedGoal(id=str(item.get('id', '')), suffix=str(item.get('suffix', '') or '')))
        return cls(level=str(data.get('level', '')), domain=str(data.get('domain', '')), goals=goals)


@dataclass
class ProcessedGoal:
    """목표 표 생성 단위 (선택 + 원문 결합)"""
    level_name: str = ""
    domain_name: str = ""
    goal_id: str = ""
    long_term_goal: str = ""
    suffix: str = ""


def resolve_selections(selections: List[GoalSelection], levels: List[GoalLevel]) -> List[ProcessedGoal]:
    """
    선택 목록을 목표 계층과 결합하여 생성 순서대로 반환

    계층에 없는 단계/영역/목표 id 는 건너뜁니다.
    """
    level_map = {level.name: level for level in levels}
    processed = []
    for selection in selections:
        level = level_map.get(selection.level)
        domain = level.find_domain(selection.domain) if level else None
        if domain is None:
            continue
        for selected in selection.goals:
            goal = domain.find_goal(selected.id)
            if goal is None:
                continue
            processed.append(ProcessedGoal(
                level_name=selection.level,
                domain_name=selection.domain,
                goal_id=goal.id,
                long_term_goal=goal.text,
                suffix=selected.suffix,
            ))
    return processed
