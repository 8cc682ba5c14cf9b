# -*- coding: utf-8 -*-
"""
프로젝트 설정 및 경로 관리

환경변수 또는 기본값을 통해 경로와 외부 서비스 설정을 관리합니다.
"""

import logging
import os
import re
from pathlib import Path


# ============================================================
# 기본 경로 설정
# ============================================================

# 패키지 루트 디렉토리
PACKAGE_ROOT = Path(__file__).parent.resolve()

# 기본 YAML 설정 파일 (환경변수로 교체 가능)
DEFAULT_CONFIG_PATH = PACKAGE_ROOT / 'fixer_config.yaml'
CONFIG_PATH = Path(os.environ.get('ESDM_DOCX_CONFIG', str(DEFAULT_CONFIG_PATH)))


# ============================================================
# 외부 서비스 (내용 추출)
# ============================================================

GEMINI_API_KEY_ENV = 'GEMINI_API_KEY'
GEMINI_MODEL = os.environ.get('ESDM_GEMINI_MODEL', 'gemini-2.5-pro')
GEMINI_REPORT_MODEL = os.environ.get('ESDM_GEMINI_REPORT_MODEL', 'gemini-2.5-flash')


def get_gemini_api_key() -> str:
    """환경변수에서 Gemini API 키 반환 (없으면 빈 문자열)"""
    return os.environ.get(GEMINI_API_KEY_ENV, '')


# ============================================================
# 출력 파일명 규칙
# ============================================================

def fixed_filename(original_name: str) -> str:
    """표 수정 결과 파일명: <이름>_fixed.docx"""
    stem = Path(original_name).stem or 'doc'
    return f"{stem}_fixed.docx"


def report_filename(original_name: str, fix_counter: int = 1) -> str:
    """평가 보고서 결과 파일명: <이름>_Fix<n>.docx"""
    stem = Path(original_name).stem or 'File_Mau'
    return f"{stem}_Fix{fix_counter or 1}.docx"


def iep_filename(original_name: str = '') -> str:
    """IEP 결과 파일명: <이름>_fix1.docx"""
    stem = Path(original_name).stem if original_name else 'IEP'
    return f"{stem or 'IEP'}_fix1.docx"


def progress_report_filename(child_name: str, report_month: str) -> str:
    """월간 진도 보고서 파일명: Bao_Cao_<이름>_<월>.docx (공백 -> _, / -> -)"""
    name = re.sub(r'\s+', '_', child_name.strip())
    month = report_month.strip().replace('/', '-')
    return f"Bao_Cao_{name}_{month}.docx"


# ============================================================
# 로깅 설정
# ============================================================

def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """로깅 설정"""
    logger = logging.getLogger('esdm_docx')

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level)
    return logger
