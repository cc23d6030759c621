from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Request
from fastapi.templating import Jinja2Templates

from ..domain.invoice import InvoiceRecord
from ..errors import WorkflowError
from ..services.invoice_renderer import jinja_env
from ..services.record_table import (
    DEFAULT_SORT_FIELD,
    SORT_FIELDS,
    log_record_warnings,
    next_sort_order,
    sort_records,
)
from ..services.workflow_client import fetch_invoice_records

# 로거 설정
logger = logging.getLogger(__name__)

router = APIRouter()
templates = Jinja2Templates(env=jinja_env)

FETCH_FAILED_MESSAGE = "데이터를 불러오는데 실패했습니다."

# 표 열 순서: (정렬 키, 머리글)
COLUMNS = [
    ("company", "회사명"),
    ("description", "설명"),
    ("amount", "최종금액"),
    ("contactName", "담당자"),
    ("contactEmail", "담당자 이메일"),
    ("issueDate", "발행일"),
]


def _sort_links(sort: str, order: str) -> List[Dict[str, Any]]:
    links = []
    for field, label in COLUMNS:
        links.append({
            "field": field,
            "label": label,
            "active": field == sort,
            "order": next_sort_order(sort, order, field),
            "arrow": ("↑" if order == "asc" else "↓") if field == sort else "",
        })
    return links


# ------------------------------------------------------------
# 메인 페이지: 계약 목록 표
# ------------------------------------------------------------
@router.get("/", tags=["frontend"])
def render_main_page(request: Request, sort: str = DEFAULT_SORT_FIELD, order: str = "asc"):
    """
    페이지를 열 때마다 MISO 에서 다시 가져온다.
    조회에 실패해도 페이지는 그리고, 경고창으로만 알린다.
    """
    if sort not in SORT_FIELDS:
        sort = DEFAULT_SORT_FIELD
    if order not in ("asc", "desc"):
        order = "asc"

    state = request.app.state
    records: List[InvoiceRecord] = []
    error: Optional[str] = None
    try:
        records = fetch_invoice_records(state.cfg, session=state.http_session)
        log_record_warnings(records)
    except WorkflowError as e:
        logger.error(f"Error fetching records: {e.message}")
        error = FETCH_FAILED_MESSAGE
    except Exception as e:
        logger.error(f"Error fetching records: {str(e)}", exc_info=True)
        error = FETCH_FAILED_MESSAGE

    # 표는 정렬해서 보여주고, 선택/출력은 조회 순서를 따른다
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "records": sort_records(records, sort, order),
            "records_json": [record.to_dict() for record in records],
            "columns": _sort_links(sort, order),
            "sort": sort,
            "order": order,
            "error": error,
        },
    )
