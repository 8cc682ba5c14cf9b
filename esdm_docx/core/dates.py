# -*- coding: utf-8 -*-
"""
날짜 표시 및 나이 계산

평가 보고서의 생년월일/평가일 표기와 실제 나이 문자열을 만듭니다.

사용 예:
    format_date_vi("2020-05-03")                    # "03/05/2020"
    calculate_age("03/05/2020", "2023-08-10")       # "3 tuổi 3 tháng"
    calculate_age("05/2020", "2023-08-10", "month") # "39 tháng"
"""

import calendar
import re
from datetime import date
from typing import Optional


AGE_ERROR_TEXT = "Ngày lượng giá nhỏ hơn ngày sinh"

_FULL_DATE_RE = re.compile(r'^(\d{1,2})[/\-](\d{1,2})[/\-](\d{4})$')
_MONTH_YEAR_RE = re.compile(r'^(\d{1,2})[/\-](\d{4})$')
_YEAR_RE = re.compile(r'^(\d{4})$')
_ISO_RE = re.compile(r'^(\d{4})-(\d{1,2})-(\d{1,2})$')


def format_date_vi(date_string: str) -> str:
    """ISO 날짜(yyyy-mm-dd)를 dd/mm/yyyy 로 변환, 그 외 형식은 그대로"""
    if not date_string:
        return ""
    if '/' in date_string or _YEAR_RE.match(date_string):
        return date_string
    parts = date_string.split('-')
    if len(parts) == 3 and all(parts):
        y, m, d = parts
        return f"{d}/{m}/{y}"
    return date_string


def parse_birth_date(text: str) -> Optional[date]:
    """생년월일 문자열 파싱 (d/m/yyyy, m/yyyy, yyyy, yyyy-mm-dd)"""
    value = (text or '').strip()
    try:
        match = _FULL_DATE_RE.match(value)
        if match:
            d, m, y = (int(g) for g in match.groups())
            return date(y, m, d)
        match = _MONTH_YEAR_RE.match(value)
        if match:
            m, y = (int(g) for g in match.groups())
            return date(y, m, 1)
        match = _YEAR_RE.match(value)
        if match:
            return date(int(match.group(1)), 1, 1)
        match = _ISO_RE.match(value)
        if match:
            y, m, d = (int(g) for g in match.groups())
            return date(y, m, d)
    except ValueError:
        return None
    return None


def parse_eval_date(text: str) -> Optional[date]:
    """평가일 파싱 (ISO 우선, d/m/yyyy 허용)"""
    value = (text or '').strip()
    match = _ISO_RE.match(value)
    try:
        if match:
            y, m, d = (int(g) for g in match.groups())
            return date(y, m, d)
    except ValueError:
        return None
    return parse_birth_date(value) if _FULL_DATE_RE.match(value) else None


def calculate_age(dob: str, eval_date: str, age_format: str = 'detail') -> str:
    """
    평가일 기준 나이 문자열 계산

    Args:
        dob: 생년월일
        eval_date: 평가일
        age_format: 'detail' (년/월/일) 또는 'month' (총 개월 수)

    Returns:
        나이 문자열. 입력을 해석할 수 없으면 빈 문자열
    """
    if not dob or not eval_date:
        return ""

    birth = parse_birth_date(dob)
    current = parse_eval_date(eval_date)
    if birth is None or current is None:
        return ""

    years = current.year - birth.year
    months = current.month - birth.month
    days = current.day - birth.day

    if days < 0:
        months -= 1
        prev_year = current.year if current.month > 1 else current.year - 1
        prev_month = current.month - 1 if current.month > 1 else 12
        days += calendar.monthrange(prev_year, prev_month)[1]
    if months < 0:
        years -= 1
        months += 12

    if years < 0:
        return AGE_ERROR_TEXT

    if age_format == 'month':
        return f"{years * 12 + months} tháng"

    parts = []
    if years > 0:
        parts.append(f"{years} tuổi")
    if months > 0:
        parts.append(f"{months} tháng")
    if days > 0 and years == 0:
        parts.append(f"{days} ngày")
    if not parts:
        parts.append("0 tháng")
    return " ".join(parts)
