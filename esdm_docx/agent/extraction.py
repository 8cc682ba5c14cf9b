# -*- coding: utf-8 -*-
"""
ESDM 평가표 내용 추출 모듈 (Gemini)

평가표 파일(이미지, PDF, docx)을 Gemini 에 보내 기술별 단계 결과와
단계별 백분율, 요약문을 JSON 으로 받습니다.

흐름:
1. 파일 -> 요청 part 변환 (스레드 풀, 입력 순서 유지, 진행률 0~30)
2. 분석 지시문(build_prompt) 추가 후 응답 스키마(build_response_schema)와 함께 generate_content 호출
3. 응답 JSON 검증(parse_extraction_json) -> ExtractionResult (진행률 100)

사용 예:
    extractor = GeminiExtractor()
    files = [SourceFile.from_path("trang1.jpg"), SourceFile.from_path("trang2.jpg")]
    result = extractor.extract(files, levels=[1, 2], columns=[1])
"""

import json
import logging
import mimetypes
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

from google.genai import types

from ..config import GEMINI_MODEL
from ..docxml.package import DOCX_MEDIA_TYPE, DocxPackage
from ..errors import DocxStructureError, ExtractionError
from .client import GeminiAgent
from .models import ALL_LEVELS, ExtractionResult, level_key


logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]

INGEST_PROGRESS_MAX = 30

SKILL_NAMES = [
    "Giao tiếp tiếp nhận",
    "Giao tiếp diễn đạt",
    "Kỹ năng xã hội",
    "Bắt chước",
    "Nhận thức",
    "Chơi",
    "Vận động tinh",
    "Vận động thô",
    "Hành vi thích ứng",
    "Hành vi chú ý",
    "Tự lập",
    "Tổng điểm",
]

REQUIRED_KEYS = ('table', 'percents', 'summary')
PERCENT_KEYS = ('percents', 'percentsOld')

_CODE_FENCE_START_RE = re.compile(r'^```(?:json)?\s*')
_CODE_FENCE_END_RE = re.compile(r'\s*```\s*$')


# ============================================================
# 입력 파일
# ============================================================

@dataclass
class SourceFile:
    """추출 대상 파일"""
    name: str
    data: bytes
    mime_type: str = ""

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> 'SourceFile':
        path = Path(path)
        mime_type, _ = mimetypes.guess_type(path.name)
        return cls(name=path.name, data=path.read_bytes(), mime_type=mime_type or "")

    @property
    def is_docx(self) -> bool:
        return self.name.lower().endswith('.docx') or self.mime_type == DOCX_MEDIA_TYPE

    @property
    def is_inline(self) -> bool:
        """그대로 전송하는 형식 (이미지, PDF)"""
        return self.mime_type.startswith('image/') or self.name.lower().endswith('.pdf')


def file_to_part(source: SourceFile) -> Optional[types.Part]:
    """
    파일 하나를 요청 part 로 변환

    docx 는 본문 텍스트만 보내고, 지원하지 않는 형식은 None.
    """
    if source.is_inline:
        mime_type = source.mime_type or 'application/pdf'
        return types.Part.from_bytes(data=source.data, mime_type=mime_type)
    if source.is_docx:
        try:
            text = DocxPackage.from_bytes(source.data, source_name=source.name).raw_text()
        except DocxStructureError as e:
            raise ExtractionError(f"docx 텍스트 추출 실패: {source.name}") from e
        return types.Part.from_text(text=text)

    logger.warning("지원하지 않는 파일 형식이라 건너뜁니다: %s", source.name)
    return None


# ============================================================
# 지시문 / 응답 파싱
# ============================================================

def build_prompt(levels: Sequence[int], columns: Sequence[int]) -> str:
    """
    분석 지시문 생성

    Args:
        levels: 분석할 단계 번호
        columns: 평가 회차 열 번호 (두 개면 이전/최신 비교)
    """
    levels_text = ', '.join(f"CẤP ĐỘ {level}" for level in levels)
    cols = sorted(columns)
    comparison = len(cols) > 1

    if not comparison:
        column_instruction = (
            f'2. CHỈ đếm dấu "+" tại cột "Lần {cols[0]}". (Bỏ qua các cột khác). '
            f'Trả về kết quả dạng "X/Y" (X là số đạt, Y là tổng).'
        )
    else:
        column_instruction = (
            f'2. Bạn cần so sánh 2 cột: Cột "Lần {cols[0]}" (Cũ) và Cột "Lần {cols[1]}" (Mới).\n'
            f'  - Đếm dấu "+" của cột "Lần {cols[0]}" (gọi là A).\n'
            f'  - Đếm dấu "+" của cột "Lần {cols[1]}" (gọi là B).\n'
            f'  - Trả về dữ liệu trong bảng dưới dạng chuỗi: "A/Total => B/Total". (Ví dụ: "2/4 => 4/4").\n'
            f"  - 'percents': tính % dựa trên cột MỚI NHẤT (Lần {cols[1]}).\n"
            f"  - 'percentsOld': tính % dựa trên cột CŨ HƠN (Lần {cols[0]})."
        )

    skills = '\n'.join(f"- {name}" for name in SKILL_NAMES)
    old_line = '  "percentsOld": { "level0": float, "level1": float, ... },\n' if comparison else ''

    return (
        "Bạn là chuyên gia đánh giá ESDM chuyên sâu. Nhiệm vụ của bạn là đọc và trích xuất dữ liệu "
        "từ các trang của Phiếu Đánh Giá Chi Tiết ESDM.\n\n"
        "QUY TẮC PHÂN TÍCH:\n"
        f"1. CHỈ xét các cấp độ: {levels_text}.\n"
        f"{column_instruction}\n"
        '3. Ký hiệu "+/-", "-", hoặc ô trống được tính là 0 mục đạt.\n'
        "4. Mẫu số (tổng số mục) là tổng số dòng/mục con có trong danh sách kiểm tra của kỹ năng đó "
        "tại cấp độ đó.\n\n"
        "PHẢI TRẢ VỀ DỮ LIỆU JSON CHÍNH XÁC VỚI CÁC TÊN KỸ NĂNG SAU:\n"
        f"{skills}\n\n"
        "Cấu trúc JSON:\n"
        "{\n"
        '  "table": [\n'
        '    { "skill": "Tên kỹ năng", "level0": "...", "level1": "...", "level2": "...", '
        '"level3": "...", "level4": "..." },\n'
        "    ...\n"
        "  ],\n"
        '  "percents": { "level0": float, "level1": float, "level2": float, "level3": float, '
        '"level4": float },\n'
        f"{old_line}"
        '  "summary": "Nhận xét tổng quát bằng tiếng Việt..."\n'
        "}\n"
    )


def strip_code_fence(text: str) -> str:
    """```json ... ``` 감싸기 제거"""
    text = (text or '').strip()
    if text.startswith('```'):
        text = _CODE_FENCE_START_RE.sub('', text)
        text = _CODE_FENCE_END_RE.sub('', text)
    return text


def parse_extraction_json(text: str, compare: bool = False) -> ExtractionResult:
    """
    응답 JSON 검증 후 ExtractionResult 로 변환

    Args:
        text: 응답 본문 (코드 펜스 허용)
        compare: 두 열 비교 요청이었는지 (percentsOld 필수)

    Raises:
        ExtractionError: JSON 형식 오류, 필수 키 누락, 값 형식 불일치
    """
    try:
        data = json.loads(strip_code_fence(text) or '{}')
    except json.JSONDecodeError as e:
        raise ExtractionError(f"추출 응답이 JSON 이 아닙니다: {e}") from e

    if not isinstance(data, dict):
        raise ExtractionError("추출 응답 최상위가 객체가 아닙니다")

    required = REQUIRED_KEYS + (('percentsOld',) if compare else ())
    missing = [key for key in required if key not in data]
    if missing:
        raise ExtractionError(f"추출 응답에 필수 키가 없습니다: {', '.join(missing)}")
    if not isinstance(data['table'], list):
        raise ExtractionError("추출 응답의 table 이 배열이 아닙니다")
    for key in PERCENT_KEYS:
        if (key in required or data.get(key) is not None) and not isinstance(data.get(key), dict):
            raise ExtractionError(f"추출 응답의 {key} 가 객체가 아닙니다")

    return ExtractionResult.from_dict(data)


def build_response_schema(compare: bool = False) -> types.Schema:
    """
    응답 JSON 스키마 (table[], percents, summary, 비교 시 percentsOld)

    table 항목은 skill 과 level1~4 필수, level0 선택.
    """
    level_numbers = {
        level_key(level): types.Schema(type=types.Type.NUMBER) for level in ALL_LEVELS
    }
    row = types.Schema(
        type=types.Type.OBJECT,
        properties={
            'skill': types.Schema(type=types.Type.STRING),
            **{level_key(level): types.Schema(type=types.Type.STRING) for level in ALL_LEVELS},
        },
        required=['skill'] + [level_key(level) for level in ALL_LEVELS if level > 0],
    )

    properties = {
        'table': types.Schema(type=types.Type.ARRAY, items=row),
        'percents': types.Schema(type=types.Type.OBJECT, properties=dict(level_numbers)),
        'summary': types.Schema(type=types.Type.STRING),
    }
    required = list(REQUIRED_KEYS)
    if compare:
        properties['percentsOld'] = types.Schema(type=types.Type.OBJECT, properties=dict(level_numbers))
        required.append('percentsOld')

    return types.Schema(type=types.Type.OBJECT, properties=properties, required=required)


# ============================================================
# Gemini 호출
# ============================================================

class GeminiExtractor(GeminiAgent):
    """Gemini 기반 평가표 추출기"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = GEMINI_MODEL,
        max_workers: int = 4,
        client=None,
    ):
        """
        Args:
            api_key: Gemini API 키 (기본: GEMINI_API_KEY 환경변수)
            model: 모델 이름
            max_workers: 파일 변환 스레드 수
            client: 주입할 genai.Client (테스트용)
        """
        super().__init__(api_key=api_key, model=model, client=client)
        self.max_workers = max_workers

    def build_parts(
        self,
        files: Sequence[SourceFile],
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[types.Part]:
        """파일들을 part 로 변환 (입력 순서 유지, 진행률 0~30)"""
        total = len(files)
        parts: List[types.Part] = []
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            for idx, part in enumerate(executor.map(file_to_part, files)):
                if part is not None:
                    parts.append(part)
                if on_progress:
                    on_progress(round((idx + 1) / total * INGEST_PROGRESS_MAX))
        return parts

    def extract(
        self,
        files: Sequence[SourceFile],
        levels: Sequence[int],
        columns: Sequence[int],
        on_progress: Optional[ProgressCallback] = None,
    ) -> ExtractionResult:
        """
        평가표 추출

        Raises:
            ExtractionError: 입력 없음, API 실패, 응답 형식 오류
        """
        if not files or not levels or not columns:
            raise ExtractionError("파일, 단계, 열을 모두 지정해야 합니다")

        parts = self.build_parts(files, on_progress)
        if not parts:
            raise ExtractionError("전송할 수 있는 파일이 없습니다")

        compare = len(columns) > 1
        parts.append(types.Part.from_text(text=build_prompt(levels, columns)))

        logger.info("Gemini 추출 요청: 파일 %d개, 단계 %s, 열 %s", len(files), list(levels), sorted(columns))
        text = self.generate_json(parts, build_response_schema(compare))

        result = parse_extraction_json(text, compare=compare)
        if on_progress:
            on_progress(100)
        logger.info("추출 완료: 기술 %d개", len(result.rows))
        return result
