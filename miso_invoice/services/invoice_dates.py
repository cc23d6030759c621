from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional


@dataclass(frozen=True)
class InvoiceDates:
    issue_date: date
    due_date: date


def _parse_issue_date(raw: Optional[str]) -> Optional[date]:
    if not raw or not raw.strip():
        return None
    # YYYY.MM.DD → YYYY-MM-DD
    text = raw.strip().replace(".", "-")
    try:
        return datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError:
        return None


def add_one_month(d: date) -> date:
    """
    한 달 뒤 같은 날짜.

    대상 월에 같은 날짜가 없으면 넘치는 만큼 다음 달로 넘어간다
    (예: 1월 31일 → 3월 3일). 브라우저 Date.setMonth 와 같은 동작.
    """
    year = d.year + d.month // 12
    month = d.month % 12 + 1
    return date(year, month, 1) + timedelta(days=d.day - 1)


def derive_dates(issue_date_raw: Optional[str], today: Optional[date] = None) -> InvoiceDates:
    """발행일(없거나 잘못되면 오늘)과 결제 기한(발행일 + 1개월)."""
    today = today or date.today()
    issue_date = _parse_issue_date(issue_date_raw) or today
    try:
        due_date = add_one_month(issue_date)
    except (ValueError, OverflowError):
        # 9999년 12월은 다음 달을 표현할 수 없으므로 잘못된 발행일로 본다
        issue_date = today
        due_date = add_one_month(today)
    return InvoiceDates(issue_date=issue_date, due_date=due_date)


def format_korean_date(d: date) -> str:
    """ko-KR 긴 날짜 표기: 2025년 3월 31일"""
    return f"{d.year}년 {d.month}월 {d.day}일"
