# -*- coding: utf-8 -*-
"""
esdm_docx CLI

사용법:
    # 표 결함 분석 (JSON 출력)
    python -m esdm_docx analyze report.docx -o tables.json

    # 분석 JSON 의 options 를 수정한 뒤 수리
    python -m esdm_docx fix report.docx --tables tables.json -o out/

    # 모든 표에 같은 옵션 적용
    python -m esdm_docx fix report.docx --all fixBorders,autofit,fixSpacing -o out/

    # 보고서 서식 채우기 (추출 결과 JSON 사용)
    python -m esdm_docx fill mau.docx --student hs.json --result kq.json --levels 1 2

    # 보고서 서식 채우기 (평가표 이미지에서 바로 추출)
    python -m esdm_docx fill mau.docx --student hs.json --source p1.jpg p2.jpg --levels 1 2 --columns 1 2

    # IEP 목표 표 생성
    python -m esdm_docx iep iep.docx --workbook muc_tieu.xlsx --selections chon.json

    # 월간 진도 보고서 (Gemini 제안 작성 또는 제안 JSON 사용)
    python -m esdm_docx progress --input thang12.json -o out/
    python -m esdm_docx progress --input thang12.json --suggestions de_xuat.json
    python -m esdm_docx progress --input thang12.json --no-ai

    # 목표 엑셀 계층 확인 / 나이 계산
    python -m esdm_docx goals muc_tieu.xlsx
    python -m esdm_docx age 03/05/2020 2023-08-10 --format month
"""

import argparse
import io
import json
import logging
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, TypeVar

from .agent.extraction import GeminiExtractor, SourceFile, parse_extraction_json
from .agent.models import ProgressSuggestions
from .agent.suggestion import parse_suggestion_json
from .config import setup_logging
from .config_loader import Settings, load_settings
from .core.dates import calculate_age
from .errors import EsdmDocxError
from .excel.goal_workbook import load_goal_workbook
from .field.filler import StudentInfo
from .report.models import ProgressReportInput
from .table.models import GoalSelection, TableInfo, TableOptions
from .workflow import (
    analyze_tables,
    fix_tables,
    generate_iep,
    generate_progress_report,
    generate_report,
    suggest_progress,
)


logger = logging.getLogger(__name__)

T = TypeVar('T')


def _read_json(path: str) -> Any:
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def _read_object(path: str) -> Dict[str, Any]:
    data = _read_json(path)
    if not isinstance(data, dict):
        raise ValueError(f"JSON 객체가 아닙니다: {path}")
    return data


def _read_items(path: str, factory: Callable[[Dict[str, Any]], T]) -> List[T]:
    """JSON 배열 -> 모델 목록 (항목은 모두 객체여야 함)"""
    data = _read_json(path)
    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise ValueError(f"JSON 객체 배열이 아닙니다: {path}")
    return [factory(item) for item in data]


def _write_json(data: Any, output: str = None):
    text = json.dumps(data, ensure_ascii=False, indent=2)
    if output:
        Path(output).write_text(text, encoding='utf-8')
        logger.info("저장 완료: %s", output)
    else:
        print(text)


def _student_from_dict(data: Dict[str, Any]) -> StudentInfo:
    """학생 정보 JSON (camelCase / snake_case 모두 허용)"""
    student = StudentInfo(
        name=data.get('name', ''),
        dob=data.get('dob', ''),
        eval_date=data.get('evalDate', data.get('eval_date', '')),
        age=data.get('age', ''),
        gender=data.get('gender', ''),
        student_id=data.get('studentId', data.get('student_id', '')),
    )
    if not student.age and student.dob and student.eval_date:
        student.age = calculate_age(student.dob, student.eval_date, data.get('ageFormat', 'detail'))
    return student


def _options_from_flags(flags: str) -> TableOptions:
    """'fixBorders,autofit' -> TableOptions"""
    names = [name.strip() for name in flags.split(',') if name.strip()]
    return TableOptions.from_dict({name: True for name in names})


# ============================================================
# 하위 명령
# ============================================================

def cmd_analyze(args, settings: Settings) -> int:
    path = Path(args.file)
    infos = analyze_tables(path.read_bytes(), source_name=path.name, settings=settings)
    _write_json([info.to_dict() for info in infos], args.output)
    return 0


def cmd_fix(args, settings: Settings) -> int:
    path = Path(args.file)
    data = path.read_bytes()

    if args.tables:
        configs = _read_items(args.tables, TableInfo.from_dict)
    else:
        options = _options_from_flags(args.all or '')
        configs = analyze_tables(data, source_name=path.name, settings=settings)
        for info in configs:
            info.options = TableOptions(**vars(options))
            info.options.merge_next = options.merge_next and info.can_merge_next

    output = fix_tables(data, configs, source_name=path.name, settings=settings)
    output.save(args.output)
    return 0


def cmd_fill(args, settings: Settings) -> int:
    path = Path(args.template)
    student = _student_from_dict(_read_object(args.student)) if args.student else StudentInfo()
    levels: List[int] = args.levels

    if args.result:
        result = parse_extraction_json(
            Path(args.result).read_text(encoding='utf-8'),
            compare=len(args.columns or []) > 1,
        )
    elif args.source:
        extractor = GeminiExtractor()
        files = [SourceFile.from_path(p) for p in args.source]
        result = extractor.extract(
            files, levels, args.columns or [1],
            on_progress=lambda pct: logger.info("추출 진행률 %d%%", pct),
        )
    else:
        print("[ERROR] --result 또는 --source 중 하나를 지정해주세요", file=sys.stderr)
        return 2

    output = generate_report(
        path.read_bytes(), student, result, levels,
        source_name=path.name, fix_counter=args.fix_counter, settings=settings,
    )
    output.save(args.output)
    return 0


def cmd_iep(args, settings: Settings) -> int:
    path = Path(args.template)
    goal_levels = load_goal_workbook(args.workbook)
    selections = _read_items(args.selections, GoalSelection.from_dict)
    output = generate_iep(
        path.read_bytes(), selections, goal_levels,
        smart_splitting=not args.no_smart_splitting,
        source_name=path.name, settings=settings,
    )
    output.save(args.output)
    return 0


def cmd_progress(args, settings: Settings) -> int:
    report_input = ProgressReportInput.from_dict(_read_object(args.input))

    if args.suggestions:
        suggestions = parse_suggestion_json(Path(args.suggestions).read_text(encoding='utf-8'))
    elif args.no_ai:
        suggestions = ProgressSuggestions()
    else:
        suggestions = suggest_progress(report_input)

    output = generate_progress_report(report_input, suggestions, settings=settings)
    output.save(args.output)
    return 0


def cmd_goals(args, settings: Settings) -> int:
    levels = load_goal_workbook(args.workbook)
    _write_json([level.to_dict() for level in levels], args.output)
    return 0


def cmd_age(args, settings: Settings) -> int:
    print(calculate_age(args.dob, args.eval_date, args.format))
    return 0


# ============================================================
# 진입점
# ============================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="esdm_docx",
        description="ESDM 평가 보고서 / IEP 문서(docx) 처리 CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
예시:
  # 표 분석 후 수리
  python -m esdm_docx analyze report.docx -o tables.json
  python -m esdm_docx fix report.docx --tables tables.json -o out/

  # 보고서 채우기
  python -m esdm_docx fill mau.docx --student hs.json --result kq.json --levels 1 2

  # IEP 목표 표 생성 (단기 목표 수치 분할 끔)
  python -m esdm_docx iep iep.docx --workbook muc_tieu.xlsx --selections chon.json --no-smart-splitting

  # 월간 진도 보고서
  python -m esdm_docx progress --input thang12.json -o out/
"""
    )
    parser.add_argument("--config", help="YAML 설정 파일 경로")
    parser.add_argument("-v", "--verbose", action="store_true", help="디버그 로그 출력")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("analyze", help="표 결함 분석")
    p.add_argument("file", help="DOCX 파일")
    p.add_argument("-o", "--output", help="결과 JSON 경로 (기본: 표준 출력)")
    p.set_defaults(func=cmd_analyze)

    p = sub.add_parser("fix", help="표 병합/수리")
    p.add_argument("file", help="DOCX 파일")
    group = p.add_mutually_exclusive_group(required=True)
    group.add_argument("--tables", help="analyze 결과 JSON (options 수정본)")
    group.add_argument("--all", help="모든 표에 적용할 옵션 (쉼표 구분: fixBorders,autofit,fixSpacing,fixAlign,mergeNext)")
    p.add_argument("-o", "--output", default=".", help="출력 폴더")
    p.set_defaults(func=cmd_fix)

    p = sub.add_parser("fill", help="평가 보고서 서식 채우기")
    p.add_argument("template", help="보고서 서식 DOCX")
    p.add_argument("--student", help="학생 정보 JSON")
    p.add_argument("--result", help="추출 결과 JSON")
    p.add_argument("--source", nargs="+", help="평가표 파일 (이미지/PDF/DOCX, Gemini 로 추출)")
    p.add_argument("--levels", nargs="+", type=int, required=True, help="단계 번호")
    p.add_argument("--columns", nargs="+", type=int, help="평가 회차 열 번호 (두 개면 비교)")
    p.add_argument("--fix-counter", type=int, default=1, help="출력 파일명 번호")
    p.add_argument("-o", "--output", default=".", help="출력 폴더")
    p.set_defaults(func=cmd_fill)

    p = sub.add_parser("iep", help="IEP 목표 표 생성")
    p.add_argument("template", help="IEP 서식 DOCX")
    p.add_argument("--workbook", required=True, help="목표 엑셀 파일")
    p.add_argument("--selections", required=True, help="선택 목표 JSON")
    p.add_argument("--no-smart-splitting", action="store_true", help="단기 목표 수치 분할 끔")
    p.add_argument("-o", "--output", default=".", help="출력 폴더")
    p.set_defaults(func=cmd_iep)

    p = sub.add_parser("progress", help="월간 진도 보고서 생성")
    p.add_argument("--input", required=True, help="아동 정보 + 영역별 목표 달성률 JSON")
    group = p.add_mutually_exclusive_group()
    group.add_argument("--suggestions", help="제안 JSON (goalSuggestions, generalSummary)")
    group.add_argument("--no-ai", action="store_true", help="Gemini 없이 기본 평가 문장 사용")
    p.add_argument("-o", "--output", default=".", help="출력 폴더")
    p.set_defaults(func=cmd_progress)

    p = sub.add_parser("goals", help="목표 엑셀 계층 출력")
    p.add_argument("workbook", help="목표 엑셀 파일")
    p.add_argument("-o", "--output", help="결과 JSON 경로 (기본: 표준 출력)")
    p.set_defaults(func=cmd_goals)

    p = sub.add_parser("age", help="나이 계산")
    p.add_argument("dob", help="생년월일 (d/m/yyyy, m/yyyy, yyyy, yyyy-mm-dd)")
    p.add_argument("eval_date", help="평가일 (yyyy-mm-dd)")
    p.add_argument("--format", choices=["detail", "month"], default="detail", help="출력 형식")
    p.set_defaults(func=cmd_age)

    return parser


def main(argv: List[str] = None) -> int:
    # Windows 콘솔 인코딩 설정
    if sys.platform == 'win32':
        sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8', errors='replace')
        sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding='utf-8', errors='replace')

    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)
    settings = load_settings(args.config)

    try:
        return args.func(args, settings)
    except (EsdmDocxError, OSError) as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1
    except (ValueError, KeyError, TypeError) as e:
        print(f"[ERROR] 입력 데이터 형식 오류: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
