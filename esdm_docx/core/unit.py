# -*- coding: utf-8 -*-
"""
WordprocessingML 단위 변환 유틸리티

- dxa: 1/20 pt (twip). 1 inch = 1440 dxa, 1 cm ≈ 567 dxa
- pct: 표 너비 백분율은 1/50 % 단위 (5000 = 100%)
- half-point: 글자 크기 w:sz 는 1/2 pt 단위 (26 = 13pt)
- eighth-point: 테두리 두께 w:sz 는 1/8 pt 단위 (4 = 0.5pt)
"""


class Unit:
    """단위 변환 상수 및 메서드"""

    # 기본 변환 상수
    DXA_PER_PT = 20
    DXA_PER_INCH = 1440
    DXA_PER_CM = 1440 / 2.54  # ≈ 566.9

    # 표 너비 (pct)
    PCT_FULL = 5000

    # ========================================
    # 포인트 / cm -> dxa
    # ========================================

    @staticmethod
    def pt_to_dxa(pt: float) -> int:
        """포인트 -> dxa"""
        return int(round(pt * Unit.DXA_PER_PT))

    @staticmethod
    def cm_to_dxa(cm: float) -> int:
        """cm -> dxa"""
        return int(round(cm * Unit.DXA_PER_CM))

    # ========================================
    # 표 너비 백분율
    # ========================================

    @staticmethod
    def percent_to_pct(percent: float) -> int:
        """백분율(85) -> w:tblW pct 값(4250)"""
        return int(round(percent * Unit.PCT_FULL / 100))

    # ========================================
    # 글자 크기
    # ========================================

    @staticmethod
    def pt_to_half_points(pt: float) -> int:
        """포인트 -> w:sz 값"""
        return int(round(pt * 2))
