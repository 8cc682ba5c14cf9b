# -*- coding: utf-8 -*-
"""
table 모듈 - 표 판별 / 분석 / 병합 / 수리 / 목표 표 생성

- classifier: 헤더로 표 역할 판별 (기술 평가 / 목표 계획 / 일반)
- analyzer: 테두리 결함, 병합 가능 여부 분석
- merger: merge_next 표 병합
- repair: 옵션별 수리 파이프라인
- goal_split: 장기 목표 -> 단기 목표 3단계 분할
- synthesizer: 목표 계획 표 본문 생성
"""

from .models import (
    SkillResultRole,
    GoalPlanRole,
    GenericRole,
    TableRole,
    TableIssue,
    TableOptions,
    TableInfo,
    Goal,
    GoalDomain,
    GoalLevel,
    SelectedGoal,
    GoalSelection,
    ProcessedGoal,
    GOAL_SUFFIXES,
    resolve_selections,
)
from .classifier import classify_table
from .analyzer import analyze_document, analyze_table, mark_merge_targets, MERGE_GAP_LIMIT
from .merger import merge_tables, resolve_configs
from .repair import apply_repairs, fix_document, fix_tree
from .goal_split import split_short_goals
from .synthesizer import build_goal_rows, replace_goal_table

__all__ = [
    'SkillResultRole',
    'GoalPlanRole',
    'GenericRole',
    'TableRole',
    'TableIssue',
    'TableOptions',
    'TableInfo',
    'Goal',
    'GoalDomain',
    'GoalLevel',
    'SelectedGoal',
    'GoalSelection',
    'ProcessedGoal',
    'GOAL_SUFFIXES',
    'resolve_selections',
    'classify_table',
    'analyze_document',
    'analyze_table',
    'mark_merge_targets',
    'MERGE_GAP_LIMIT',
    'merge_tables',
    'resolve_configs',
    'apply_repairs',
    'fix_document',
    'fix_tree',
    'split_short_goals',
    'build_goal_rows',
    'replace_goal_table',
]
