# -*- coding: utf-8 -*-
"""
YAML 설정 로더

표 수리 / 필드 채우기 / 목표 표 생성 / 월간 보고서에 쓰는 수치와 라벨 목록을
YAML 파일에서 로드합니다. 파일이 없으면 dataclass 기본값을 사용합니다.
"""

import logging
import yaml
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from .config import CONFIG_PATH
from .core.unit import Unit


logger = logging.getLogger(__name__)


@dataclass
class FixerSettings:
    """표 수리 설정"""
    # 테두리 (sz 는 1/8 pt)
    border_val: str = "single"
    border_size: int = 4
    border_space: int = 0
    border_color: str = "auto"

    # 자동 맞춤 (페이지 너비 대비 %)
    autofit_percent: float = 85

    # 셀 안쪽 여백 (dxa)
    cell_margin_top: int = 50
    cell_margin_bottom: int = 50
    cell_margin_left: int = 100
    cell_margin_right: int = 100

    # 글머리 내어쓰기 (dxa, 0.75cm)
    bullet_indent: int = Unit.cm_to_dxa(0.75)
    bullet_chars: str = "-+•"

    # 문단 앞뒤 간격 (dxa)
    paragraph_spacing: int = 40

    # 병합 가능 판정: 빈 문단 개수 상한 (미만이어야 병합 가능)
    merge_gap_limit: int = 5



# 기본 라벨 목록 (순서가 우선순위, 긴 라벨이 먼저)
DEFAULT_LABELS: List[Tuple[str, str]] = [
    ("Họ và tên học sinh", "name"),
    ("Họ và tên trẻ", "name"),
    ("Họ và tên", "name"),
    ("Họ tên", "name"),
    ("Tên trẻ", "name"),
    ("Ngày tháng năm sinh", "dob"),
    ("Ngày sinh", "dob"),
    ("Năm sinh", "dob"),
    ("Ngày lượng giá", "eval_date"),
    ("Ngày đánh giá", "eval_date"),
    ("Tuổi thực", "age"),
    ("Độ tuổi", "age"),
    ("Tuổi", "age"),
    ("Giới tính", "gender"),
    ("Mã học sinh", "student_id"),
    ("Mã HS", "student_id"),
    ("Mã số", "student_id"),
]


@dataclass
class FillerSettings:
    """필드 채우기 설정"""
    labels: List[Tuple[str, str]] = field(default_factory=lambda: list(DEFAULT_LABELS))

    # 요약 문단
    summary_marker: str = "nhận định chung về kết quả"
    summary_default_prefix: str = "Nhận định chung về kết quả:"
    summary_font_size: int = Unit.pt_to_half_points(13)
    highlight_color: str = "FF0000"

    # 기술 평가 표
    skill_table_percent: float = 90
    missing_value: str = "-"


@dataclass
class SynthesizerSettings:
    """목표 표 생성 설정"""
    font: str = "Times New Roman"
    font_size: int = Unit.pt_to_half_points(12)
    row_height: int = 400
    paragraph_after: int = 100


@dataclass
class ReportSettings:
    """월간 진도 보고서 설정"""
    font: str = "Times New Roman"
    font_size: int = Unit.pt_to_half_points(13)

    # 머리글 (센터 정보, 줄 단위)
    header_lines: List[str] = field(default_factory=lambda: [
        "Trung Tâm Tâm lý-Giáo dục Sắc Màu",
        "Địa chỉ: Lk 07, Ngõ 536a Minh Khai, Vĩnh Tuy, HBT, HN.",
        "Liên hệ: 0399797109",
    ])

    # 배경색 (RRGGBB)
    header_fill: str = "70AD47"
    summary_fill: str = "FFC000"

    # 페이지 여백 (dxa, 2cm), 아동 정보 탭 위치, 문단 간격
    page_margin: int = Unit.cm_to_dxa(2)
    info_tab_stop: int = 6000
    paragraph_after: int = Unit.pt_to_dxa(5)

    # 열 너비 (dxa): 영역, 목표, +, +/-, -, 제안
    column_widths: List[int] = field(default_factory=lambda: [1500, 2500, 500, 500, 500, 4500])
    border_size: int = 4

    # 달성률 기준 (이상이면 +, +/-, 미만은 -)
    achieved_percent: float = 70
    emerging_percent: float = 50


@dataclass
class Settings:
    """통합 설정"""
    fixer: FixerSettings = field(default_factory=FixerSettings)
    filler: FillerSettings = field(default_factory=FillerSettings)
    synthesizer: SynthesizerSettings = field(default_factory=SynthesizerSettings)
    report: ReportSettings = field(default_factory=ReportSettings)


class ConfigLoader:
    """YAML 설정 로더"""

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        self.config_path = Path(config_path) if config_path else CONFIG_PATH
        self._settings: Optional[Settings] = None

    def load(self, config_path: Optional[Union[str, Path]] = None) -> Settings:
        """YAML 설정 파일 로드"""
        path = Path(config_path) if config_path else self.config_path

        if path and path.exists():
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
            self._settings = self._parse_config(data)
        else:
            logger.warning("설정 파일이 없어 기본값을 사용합니다: %s", path)
            self._settings = Settings()

        return self._settings

    def load_from_string(self, yaml_string: str) -> Settings:
        """YAML 문자열에서 설정 로드"""
        data = yaml.safe_load(yaml_string) or {}
        self._settings = self._parse_config(data)
        return self._settings

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self.load()
        return self._settings

    def _parse_config(self, data: Dict[str, Any]) -> Settings:
        """설정 데이터 파싱"""
        settings = Settings()

        # 표 수리
        fixer_data = data.get('fixer', {}) or {}
        border = fixer_data.get('border', {}) or {}
        fixer = settings.fixer
        fixer.border_val = border.get('val', fixer.border_val)
        fixer.border_size = int(border.get('size', fixer.border_size))
        fixer.border_space = int(border.get('space', fixer.border_space))
        fixer.border_color = str(border.get('color', fixer.border_color))
        fixer.autofit_percent = float(fixer_data.get('autofit_percent', fixer.autofit_percent))

        margins = fixer_data.get('cell_margins', {}) or {}
        fixer.cell_margin_top = int(margins.get('top', fixer.cell_margin_top))
        fixer.cell_margin_bottom = int(margins.get('bottom', fixer.cell_margin_bottom))
        fixer.cell_margin_left = int(margins.get('left', fixer.cell_margin_left))
        fixer.cell_margin_right = int(margins.get('right', fixer.cell_margin_right))

        bullet = fixer_data.get('bullet', {}) or {}
        fixer.bullet_indent = int(bullet.get('indent', fixer.bullet_indent))
        fixer.bullet_chars = str(bullet.get('chars', fixer.bullet_chars))

        fixer.paragraph_spacing = int(fixer_data.get('paragraph_spacing', fixer.paragraph_spacing))
        fixer.merge_gap_limit = int(fixer_data.get('merge_gap_limit', fixer.merge_gap_limit))

        # 필드 채우기
        filler_data = data.get('filler', {}) or {}
        filler = settings.filler
        labels = filler_data.get('labels')
        if isinstance(labels, list):
            parsed = []
            for item in labels:
                if isinstance(item, dict) and item.get('label') and item.get('field'):
                    parsed.append((str(item['label']), str(item['field'])))
            if parsed:
                filler.labels = parsed

        summary = filler_data.get('summary', {}) or {}
        filler.summary_marker = summary.get('marker', filler.summary_marker)
        filler.summary_default_prefix = summary.get('default_prefix', filler.summary_default_prefix)
        filler.summary_font_size = int(summary.get('font_size', filler.summary_font_size))
        filler.highlight_color = str(summary.get('highlight_color', filler.highlight_color))

        skill_table = filler_data.get('skill_table', {}) or {}
        filler.skill_table_percent = float(skill_table.get('width_percent', filler.skill_table_percent))
        filler.missing_value = str(skill_table.get('missing_value', filler.missing_value))

        # 목표 표 생성
        synth_data = data.get('synthesizer', {}) or {}
        synth = settings.synthesizer
        synth.font = synth_data.get('font', synth.font)
        synth.font_size = int(synth_data.get('font_size', synth.font_size))
        synth.row_height = int(synth_data.get('row_height', synth.row_height))
        synth.paragraph_after = int(synth_data.get('paragraph_after', synth.paragraph_after))

        # 월간 진도 보고서
        report_data = data.get('report', {}) or {}
        report = settings.report
        report.font = report_data.get('font', report.font)
        report.font_size = int(report_data.get('font_size', report.font_size))
        header_lines = report_data.get('header_lines')
        if isinstance(header_lines, list):
            report.header_lines = [str(line) for line in header_lines]
        report.header_fill = str(report_data.get('header_fill', report.header_fill))
        report.summary_fill = str(report_data.get('summary_fill', report.summary_fill))
        report.page_margin = int(report_data.get('page_margin', report.page_margin))
        report.info_tab_stop = int(report_data.get('info_tab_stop', report.info_tab_stop))
        report.paragraph_after = int(report_data.get('paragraph_after', report.paragraph_after))
        widths = report_data.get('column_widths')
        if isinstance(widths, list) and len(widths) == len(report.column_widths):
            report.column_widths = [int(width) for width in widths]
        report.border_size = int(report_data.get('border_size', report.border_size))
        thresholds = report_data.get('thresholds', {}) or {}
        report.achieved_percent = float(thresholds.get('achieved', report.achieved_percent))
        report.emerging_percent = float(thresholds.get('emerging', report.emerging_percent))

        return settings


def load_settings(config_path: Optional[Union[str, Path]] = None) -> Settings:
    """설정 로드 헬퍼"""
    return ConfigLoader(config_path).load()
