from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Union


Amount = Union[int, float]


# ----------------------
# 인보이스 레코드
# ----------------------
@dataclass(frozen=True)
class InvoiceRecord:
    """
    MISO 워크플로우 응답을 정규화한 계약 1건.

    fields:
      - id: 한 번의 조회 안에서만 유일한 식별자 ("1", "2", ...). 선택 상태 추적용.
      - amount: 항상 유한한 0 이상의 값 (누락/잘못된 값은 0)
      - issue_date: "YYYY.MM.DD" 형식 또는 빈 문자열 (빈 값이면 오늘 날짜로 발행)
      - description: 비어 있으면 인보이스에 기본 품목명이 들어간다.
    """

    id: str
    company: str = ""
    amount: Amount = 0
    contact_name: str = ""
    contact_email: str = ""
    issue_date: str = ""
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """화면/API 로 내보내는 camelCase JSON 형태."""
        return {
            "id": self.id,
            "company": self.company,
            "amount": self.amount,
            "contactName": self.contact_name,
            "contactEmail": self.contact_email,
            "issueDate": self.issue_date,
            "description": self.description,
        }


# ----------------------
# 발행자 정보
# ----------------------
@dataclass(frozen=True)
class IssuerProfile:
    """인보이스에 인쇄되는 발행자 정보. config.json 의 issuer 섹션에서 만든다."""

    name: str = "(주)GS"
    address: str = "서울특별시 강남구 논현로 508 GS타워"
    bank: str = "우리은행 982-018207-01-002 ㈜지에스"
    default_description: str = "PLAI 패키지"
    footer_note: str = "기타 문의사항은 (주)GS 업무지원팀 이수민 매니저에게 문의하시기 바랍니다."
    logo_url: str = ""
    document_title: str = "Invoice"
