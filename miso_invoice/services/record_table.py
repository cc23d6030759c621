from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Sequence

from ..domain.invoice import InvoiceRecord

# 로거 설정
logger = logging.getLogger(__name__)

# 화면/쿼리에서 쓰는 정렬 키 → InvoiceRecord 속성
SORT_FIELDS: Dict[str, str] = {
    "company": "company",
    "amount": "amount",
    "contactName": "contact_name",
    "contactEmail": "contact_email",
    "issueDate": "issue_date",
    "description": "description",
}
DEFAULT_SORT_FIELD = "company"

# 비어 있으면 경고하는 필드 (라벨은 원본 항목명)
REQUIRED_FIELDS: Dict[str, str] = {
    "company": "회사명",
    "amount": "최종금액",
    "contact_name": "담당자",
    "contact_email": "담당자 이메일",
}


def _sort_key(value):
    # 글자는 대소문자를 가리지 않고 비교한다 (apple < Banana)
    if isinstance(value, str):
        return value.casefold()
    return value


def sort_records(
    records: Iterable[InvoiceRecord],
    field: str = DEFAULT_SORT_FIELD,
    order: str = "asc",
) -> List[InvoiceRecord]:
    """
    표 정렬. 알 수 없는 필드는 회사명으로 정렬한다.
    같은 값끼리는 원래 순서를 유지한다.
    """
    attr = SORT_FIELDS.get(field, SORT_FIELDS[DEFAULT_SORT_FIELD])
    return sorted(records, key=lambda r: _sort_key(getattr(r, attr)), reverse=(order == "desc"))


def next_sort_order(current_field: str, current_order: str, clicked_field: str) -> str:
    """같은 열을 다시 누르면 방향을 뒤집고, 다른 열이면 오름차순부터."""
    if clicked_field == current_field:
        return "desc" if current_order == "asc" else "asc"
    return "asc"


def empty_field_report(records: Sequence[InvoiceRecord]) -> Dict[str, List[str]]:
    """레코드 id → 비어 있는 필수 필드 라벨 목록. 빈 필드가 없으면 포함하지 않는다."""
    report: Dict[str, List[str]] = {}
    for record in records:
        missing = [label for attr, label in REQUIRED_FIELDS.items() if not getattr(record, attr)]
        if missing:
            report[record.id] = missing
    return report


def log_record_warnings(records: Sequence[InvoiceRecord]) -> None:
    if not records:
        logger.warning("⚠️ 데이터가 비어있습니다!")
        return
    for record_id, missing in empty_field_report(records).items():
        logger.warning(f"⚠️ 레코드 {record_id}의 비어있는 필드: {', '.join(missing)}")
