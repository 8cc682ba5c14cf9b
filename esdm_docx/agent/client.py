# -*- coding: utf-8 -*-
"""
Gemini 호출 공통 모듈

클라이언트 지연 생성, JSON 응답 요청, 전송/API 예외를 ExtractionError 로 변환.
"""

import logging
from typing import List, Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from ..config import GEMINI_API_KEY_ENV, GEMINI_MODEL, get_gemini_api_key
from ..errors import ExtractionError


logger = logging.getLogger(__name__)


class GeminiAgent:
    """Gemini 호출 기본 클래스"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = GEMINI_MODEL,
        client=None,
    ):
        """
        Args:
            api_key: Gemini API 키 (기본: GEMINI_API_KEY 환경변수)
            model: 모델 이름
            client: 주입할 genai.Client (테스트용)
        """
        self.api_key = api_key or get_gemini_api_key()
        self.model = model
        self._client = client

    @property
    def client(self):
        if self._client is None:
            if not self.api_key:
                raise ExtractionError(f"Gemini API 키가 없습니다. {GEMINI_API_KEY_ENV} 환경변수를 설정하세요.")
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def generate_json(self, contents: List[types.Part], schema: Optional[types.Schema] = None) -> str:
        """
        JSON 응답 요청 후 본문 반환

        Raises:
            ExtractionError: API 오류, 연결 실패, 빈 응답
        """
        config = types.GenerateContentConfig(
            response_mime_type='application/json',
            response_schema=schema,
        )
        try:
            response = self.client.models.generate_content(
                model=self.model,
                contents=contents,
                config=config,
            )
        except genai_errors.APIError as e:
            raise ExtractionError(f"Gemini 호출 실패: {e}") from e
        except httpx.HTTPError as e:
            raise ExtractionError(f"Gemini 연결 실패: {e}") from e

        text = response.text
        if not text:
            raise ExtractionError("Gemini 응답이 비어 있습니다")
        logger.debug("Gemini 응답 %d자 (%s)", len(text), self.model)
        return text
