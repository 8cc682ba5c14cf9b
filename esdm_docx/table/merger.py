# -*- coding: utf-8 -*-
"""
표 병합 모듈

merge_next 옵션이 켜진 표에 바로 다음 표의 행을 옮겨 붙입니다.

규칙:
- 설정은 index 가 큰 것부터 처리 (뒤쪽 병합이 앞쪽 인덱스를 흔들지 않도록)
- 표는 처리 시작 전에 요소로 변환해 두고, 이후에는 요소 참조로만 찾음
- 두 표 사이에는 빈 문단만 있어야 함. 다른 내용이 끼어 있으면 경고 후 건너뜀
- 행(w:tr 직접 자식)만 옮기고, 빈 문단과 흡수된 표는 제거

사용 예:
    resolved = resolve_configs(pkg.tree, configs)
    merge_tables(pkg.tree, resolved)
"""

import logging
import xml.etree.ElementTree as ET
from typing import List, Tuple

from ..docxml.elements import table_rows
from ..docxml.package import DocumentTree
from .analyzer import scan_gap
from .models import TableInfo


logger = logging.getLogger(__name__)


ResolvedConfig = Tuple[ET.Element, TableInfo]


def resolve_configs(tree: DocumentTree, configs: List[TableInfo]) -> List[ResolvedConfig]:
    """
    설정의 index 를 현재 트리의 표 요소로 변환

    범위를 벗어난 index 는 경고 후 제외합니다. 같은 index 가 중복되면
    나중 설정이 우선합니다.
    """
    tables = tree.tables()
    by_index = {}
    for conf in configs:
        if 0 <= conf.index < len(tables):
            by_index[conf.index] = conf
        else:
            logger.warning("표 인덱스 %d 가 범위를 벗어났습니다 (총 %d개)", conf.index, len(tables))

    resolved = []
    for index in sorted(by_index):
        conf = by_index[index]
        conf.element = tables[index]
        resolved.append((tables[index], conf))
    return resolved


def merge_next_table(tree: DocumentTree, tbl: ET.Element) -> bool:
    """
    tbl 뒤의 표를 tbl 에 병합

    Returns:
        병합 수행 여부
    """
    if not tree.contains(tbl):
        logger.warning("이미 다른 표에 흡수된 표는 병합할 수 없습니다")
        return False

    gap, next_tbl = scan_gap(tree, tbl)
    if next_tbl is None:
        logger.warning("다음 표 사이에 내용이 있거나 다음 표가 없어 병합을 건너뜁니다")
        return False

    rows = table_rows(next_tbl)
    for tr in rows:
        next_tbl.remove(tr)
        tbl.append(tr)

    for node in gap:
        tree.remove(node)
    tree.remove(next_tbl)

    logger.debug("표 병합: 행 %d개 이동, 빈 문단 %d개 제거", len(rows), len(gap))
    return True


def merge_tables(tree: DocumentTree, resolved: List[ResolvedConfig]) -> int:
    """
    merge_next 설정을 index 내림차순으로 적용

    Returns:
        수행된 병합 수
    """
    merged = 0
    for tbl, conf in sorted(resolved, key=lambda item: item[1].index, reverse=True):
        if not conf.options.merge_next:
            continue
        if merge_next_table(tree, tbl):
            merged += 1
    if merged:
        logger.info("표 병합 %d건 완료", merged)
    return merged
