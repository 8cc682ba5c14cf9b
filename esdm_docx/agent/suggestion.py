# -*- coding: utf-8 -*-
"""
월간 진도 보고서 제안 작성 (Gemini)

아동 정보와 영역별 목표 달성률을 보내, 목표마다 평가 문장(assessment)과
가정 지도 제안(details, <b>/<br/> 표기)을, 그리고 전체 총평(generalSummary)을 받습니다.

사용 예:
    writer = GeminiProgressWriter()
    suggestions = writer.suggest(report_input)
"""

import json
import logging
from typing import Optional

from google.genai import types

from ..config import GEMINI_REPORT_MODEL
from ..errors import ExtractionError
from ..report.models import ProgressReportInput
from .client import GeminiAgent
from .extraction import strip_code_fence
from .models import ProgressSuggestions


logger = logging.getLogger(__name__)

# details 에 반드시 들어가야 하는 굵은 머리말
DETAIL_HEADINGS = [
    "+Dạy trong bối cảnh thật:",
    "+Sử dụng đồ dùng hấp dẫn:",
    "+Kết hợp hành động - cử chỉ:",
    "+Giảm trợ giúp dần:",
    "+Lặp lại ở nhiều môi trường:",
    "+Khen khi đúng:",
]


def build_suggestion_prompt(report_input: ProgressReportInput) -> str:
    """진도 보고서 작성 지시문"""
    data = json.dumps(report_input.to_dict(), ensure_ascii=False)
    headings = '\n'.join(f"  <b>{heading}</b> ..." for heading in DETAIL_HEADINGS)

    return (
        "DỮ LIỆU ĐẦU VÀO:\n"
        f"{data}\n\n"
        "VAI TRÒ: Chuyên gia giáo dục đặc biệt (10 năm kinh nghiệm).\n"
        "NHIỆM VỤ: Viết nội dung đánh giá và đề xuất chi tiết cho từng mục tiêu để điền vào báo cáo.\n\n"
        "YÊU CẦU ĐẦU RA (JSON FORMAT):\n"
        "Trả về một object JSON với cấu trúc sau:\n"
        "{\n"
        '  "goalSuggestions": [\n'
        "    {\n"
        '      "id": "string", // ID của mục tiêu từ dữ liệu đầu vào\n'
        '      "assessment": "string", // Ví dụ: "+ CON HOÀN THÀNH 70% MỤC TIÊU ĐỀ RA." '
        "(Viết hoa toàn bộ, có dấu + ở đầu)\n"
        '      "details": "string" // Nội dung đề xuất chi tiết '
        "(Sử dụng thẻ <b> cho các đầu mục, xuống dòng bằng <br/>)\n"
        "    }\n"
        "  ],\n"
        '  "generalSummary": "string" // Đoạn văn tổng kết chung. '
        'Ví dụ: "Trong tháng 1, con hoàn thành 90% các hoạt động đề ra..."\n'
        "}\n\n"
        'YÊU CẦU CHI TIẾT NỘI DUNG "details":\n'
        "- Bắt buộc có các đầu mục sau (in đậm bằng <b>...</b>:):\n"
        f"{headings}\n"
        "- Nội dung cụ thể, thiết thực, giọng văn khích lệ.\n"
    )


def build_suggestion_schema() -> types.Schema:
    """응답 JSON 스키마 (goalSuggestions[], generalSummary)"""
    suggestion = types.Schema(
        type=types.Type.OBJECT,
        properties={
            'id': types.Schema(type=types.Type.STRING),
            'assessment': types.Schema(type=types.Type.STRING),
            'details': types.Schema(type=types.Type.STRING),
        },
        required=['id', 'assessment', 'details'],
    )
    return types.Schema(
        type=types.Type.OBJECT,
        properties={
            'goalSuggestions': types.Schema(type=types.Type.ARRAY, items=suggestion),
            'generalSummary': types.Schema(type=types.Type.STRING),
        },
        required=['goalSuggestions', 'generalSummary'],
    )


def parse_suggestion_json(text: str) -> ProgressSuggestions:
    """
    응답 JSON -> ProgressSuggestions

    goalSuggestions / generalSummary 가 없으면 빈 제안과 기본 총평을 씁니다.

    Raises:
        ExtractionError: JSON 형식 오류, 값 형식 불일치
    """
    try:
        data = json.loads(strip_code_fence(text) or '{}')
    except json.JSONDecodeError as e:
        raise ExtractionError(f"제안 응답이 JSON 이 아닙니다: {e}") from e

    if not isinstance(data, dict):
        raise ExtractionError("제안 응답 최상위가 객체가 아닙니다")
    if data.get('goalSuggestions') is not None and not isinstance(data['goalSuggestions'], list):
        raise ExtractionError("제안 응답의 goalSuggestions 가 배열이 아닙니다")
    if data.get('generalSummary') is not None and not isinstance(data['generalSummary'], str):
        raise ExtractionError("제안 응답의 generalSummary 가 문자열이 아닙니다")

    return ProgressSuggestions.from_dict(data)


class GeminiProgressWriter(GeminiAgent):
    """Gemini 기반 진도 보고서 제안 작성기"""

    def __init__(self, api_key: Optional[str] = None, model: str = GEMINI_REPORT_MODEL, client=None):
        super().__init__(api_key=api_key, model=model, client=client)

    def suggest(self, report_input: ProgressReportInput) -> ProgressSuggestions:
        """
        목표별 제안과 총평 작성

        Raises:
            ExtractionError: 목표 없음, API 실패, 응답 형식 오류
        """
        goals = report_input.all_goals()
        if not goals:
            raise ExtractionError("보고서에 넣을 목표가 없습니다")

        logger.info("Gemini 보고서 제안 요청: 영역 %d개, 목표 %d개", len(report_input.field_groups), len(goals))
        prompt = types.Part.from_text(text=build_suggestion_prompt(report_input))
        text = self.generate_json([prompt], build_suggestion_schema())

        suggestions = parse_suggestion_json(text)
        missing = [goal.id for goal in goals if suggestions.get(goal.id) is None]
        if missing:
            logger.warning("제안이 없는 목표는 기본 평가 문장을 씁니다: %s", ', '.join(missing))
        return suggestions
