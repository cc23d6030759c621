from __future__ import annotations

import json
import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from ..domain.invoice import Amount, InvoiceRecord

# 로거 설정
logger = logging.getLogger(__name__)

RESULTS_KEY = "결과"

# 원본 항목의 한글 라벨 → InvoiceRecord 필드
FIELD_LABELS: Dict[str, str] = {
    "company": "회사명",
    "contact_name": "담당자",
    "contact_email": "담당자 이메일",
    "issue_date": "발행일",
    "description": "설명",
}
AMOUNT_LABEL = "최종금액"

# ```json / ```python / ``` 등 코드 블록 표시
_FENCE_OPEN = re.compile(r"^```[\w+\-.#]*\n?")
_FENCE_CLOSE = re.compile(r"\n?```$")
# Python 의 None 리터럴
_PYTHON_NONE = re.compile(r":\s*None")


# --------------------------------------------------------
# 응답 형태 분류 결과
# --------------------------------------------------------
@dataclass(frozen=True)
class NoResults:
    """data.outputs.결과 가 없다."""


@dataclass(frozen=True)
class RecordRows:
    rows: List[Any]


@dataclass(frozen=True)
class Unparsable:
    reason: str
    cleaned: str


@dataclass(frozen=True)
class UnsupportedShape:
    """배열도 중첩 결과도 아닌 값 (단일 객체 등)."""

    value: Any


PayloadShape = Union[NoResults, RecordRows, Unparsable, UnsupportedShape]


def _is_present(value: Any) -> bool:
    # None / "" / 0 / False 는 "값 없음". 빈 배열·객체는 값이 있는 것으로 본다.
    if isinstance(value, (list, dict)):
        return True
    return bool(value)


def _nested_results(value: Any) -> Optional[Any]:
    """value["outputs"]["결과"] (없으면 None)."""
    if not isinstance(value, dict):
        return None
    outputs = value.get("outputs")
    if not isinstance(outputs, dict):
        return None
    results = outputs.get(RESULTS_KEY)
    return results if _is_present(results) else None


def _reject_constant(token: str) -> Any:
    raise ValueError(f"JSON 에 허용되지 않는 값: {token}")


def clean_results_string(text: str) -> str:
    """코드 블록 표시를 벗기고 Python None 을 JSON null 로 바꾼다."""
    cleaned = text.strip()
    cleaned = _FENCE_OPEN.sub("", cleaned)
    cleaned = _FENCE_CLOSE.sub("", cleaned)
    cleaned = cleaned.strip()
    return _PYTHON_NONE.sub(": null", cleaned)


def _classify_value(value: Any) -> PayloadShape:
    if isinstance(value, list):
        return RecordRows(rows=value)
    return UnsupportedShape(value=value)


def _classify_string(text: str) -> PayloadShape:
    cleaned = clean_results_string(text)
    try:
        parsed = json.loads(cleaned, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as e:
        return Unparsable(reason=str(e), cleaned=cleaned)

    nested = _nested_results(parsed)
    if nested is not None:
        return _classify_value(nested)
    # 배열이면 그대로, 아니면 파싱한 값 자체를 사용
    return _classify_value(parsed)


def classify_payload(payload: Any) -> PayloadShape:
    """MISO 응답을 한 번에 분류한다."""
    data = payload.get("data") if isinstance(payload, dict) else None
    outputs = data.get("outputs") if isinstance(data, dict) else None

    has_results = isinstance(outputs, dict) and _is_present(outputs.get(RESULTS_KEY))
    outputs_keys = list(outputs.keys()) if isinstance(outputs, dict) else []
    logger.info(
        f"MISO API response structure: hasData={_is_present(data)}, hasOutputs={_is_present(outputs)}, "
        f"hasResults={has_results}, outputsKeys={outputs_keys}"
    )

    results = _nested_results(data)
    if results is None:
        return NoResults()

    if isinstance(results, str):
        return _classify_string(results)
    return _classify_value(results)


# --------------------------------------------------------
# 항목 → InvoiceRecord
# --------------------------------------------------------
def coerce_amount(value: Any) -> Amount:
    """금액을 0 이상의 유한한 수로 바꾼다. 변환할 수 없으면 0."""
    if value is None or isinstance(value, bool):
        return 0

    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        text = value.strip().replace(",", "")
        if not text:
            return 0
        try:
            number = float(text)
        except ValueError:
            return 0
    else:
        return 0

    if isinstance(number, int):
        # float 로 표현할 수 없는 정수는 화면에 쓸 수 없다
        try:
            float(number)
        except OverflowError:
            return 0
    elif isinstance(number, float):
        if not math.isfinite(number):
            return 0
        if number.is_integer():
            number = int(number)
    if number < 0:
        return 0
    return number


def _text(item: Dict[str, Any], label: str) -> str:
    value = item.get(label)
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def row_to_record(item: Any, position: int) -> InvoiceRecord:
    source = item if isinstance(item, dict) else {}
    values = {name: _text(source, label) for name, label in FIELD_LABELS.items()}
    return InvoiceRecord(
        id=str(position),
        amount=coerce_amount(source.get(AMOUNT_LABEL)),
        **values,
    )


def normalize(payload: Any) -> List[InvoiceRecord]:
    """
    MISO 워크플로우 응답을 InvoiceRecord 목록으로 정규화한다.

    결과가 객체, 코드 블록으로 감싼 문자열, 배열 어느 형태로 와도 처리한다.
    해석할 수 없으면 예외 없이 빈 목록을 돌려준다.
    """
    shape = classify_payload(payload)

    if isinstance(shape, RecordRows):
        records = [row_to_record(item, index) for index, item in enumerate(shape.rows, start=1)]
        if shape.rows:
            first = shape.rows[0]
            logger.info(f"First record keys: {list(first.keys()) if isinstance(first, dict) else []}")
        logger.info(f"Successfully parsed {len(records)} records")
        return records

    if isinstance(shape, Unparsable):
        logger.error(f"결과 문자열 파싱 실패: {shape.reason}")
        logger.error(f"Cleaned string: {shape.cleaned}")
    elif isinstance(shape, UnsupportedShape):
        logger.warning(f"배열이 아닌 결과는 무시합니다: type={type(shape.value).__name__}")
    else:
        logger.info("No valid data structure found in MISO response")
    return []
