from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Optional, Union

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from ..domain.invoice import InvoiceRecord, IssuerProfile
from .amount_words import format_currency, to_korean_amount_words
from .invoice_dates import derive_dates, format_korean_date

# 로거 설정
logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "ui" / "templates"

# A4 (210mm x 297mm) @ 96 DPI
A4_WIDTH_PX = 794
A4_HEIGHT_PX = 1123


def amount_words(amount: Union[int, float]) -> str:
    """표에 보조로 띄우는 한글 금액. 정수가 아니거나 범위를 벗어나면 빈 문자열."""
    if isinstance(amount, bool):
        return ""
    if isinstance(amount, float):
        if not amount.is_integer():
            return ""
        amount = int(amount)
    try:
        return to_korean_amount_words(amount)
    except (ValueError, OverflowError) as e:
        logger.warning(f"한글 금액 변환 생략: {e}")
        return ""


def _build_environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(["html"]),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["currency"] = format_currency
    env.filters["amount_words"] = amount_words
    env.filters["korean_date"] = format_korean_date
    env.globals["A4_WIDTH_PX"] = A4_WIDTH_PX
    env.globals["A4_HEIGHT_PX"] = A4_HEIGHT_PX
    return env


jinja_env = _build_environment()


@dataclass(frozen=True)
class RenderedInvoice:
    record_id: str
    page_number: int
    total_pages: int
    html: str


def render_invoice_document(
    record: InvoiceRecord,
    page_number: int,
    total_pages: int,
    issuer: IssuerProfile,
    today: Optional[date] = None,
) -> RenderedInvoice:
    """
    인보이스 1장(A4 한 페이지)을 HTML 로 만든다.

    같은 입력(today 포함)이면 항상 같은 결과를 돌려준다.
    미리보기와 인쇄가 같은 함수를 쓰므로 두 화면의 내용이 일치한다.
    """
    dates = derive_dates(record.issue_date, today=today)
    html = jinja_env.get_template("invoice.html").render(
        record=record,
        issuer=issuer,
        issue_date=dates.issue_date,
        due_date=dates.due_date,
        description=record.description or issuer.default_description,
        page_number=page_number,
        total_pages=total_pages,
    )
    return RenderedInvoice(
        record_id=record.id,
        page_number=page_number,
        total_pages=total_pages,
        html=html,
    )
