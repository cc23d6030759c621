from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ...domain.invoice import InvoiceRecord
from ...errors import WorkflowError
from ...services.invoice_renderer import jinja_env, render_invoice_document
from ...services.record_table import DEFAULT_SORT_FIELD, log_record_warnings, sort_records
from ...services.workflow_client import fetch_invoice_records

# 로거 설정
logger = logging.getLogger(__name__)

router = APIRouter()


# 요청 본문
class InvoiceRecordModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    company: str = ""
    amount: float = Field(0.0, ge=0, allow_inf_nan=False)
    contact_name: str = ""
    contact_email: str = ""
    issue_date: str = ""
    description: str = ""

    def to_record(self) -> InvoiceRecord:
        amount = int(self.amount) if self.amount.is_integer() else self.amount
        return InvoiceRecord(
            id=self.id,
            company=self.company,
            amount=amount,
            contact_name=self.contact_name,
            contact_email=self.contact_email,
            issue_date=self.issue_date,
            description=self.description,
        )


class InvoiceSelectionRequest(BaseModel):
    records: List[InvoiceRecordModel]

    def to_records(self) -> List[InvoiceRecord]:
        return [item.to_record() for item in self.records]


def workflow_error_response(error: WorkflowError) -> JSONResponse:
    return JSONResponse(error.to_dict(), status_code=error.status_code)


@router.get("/records")
def list_records(request: Request, sort: str = DEFAULT_SORT_FIELD, order: str = "asc"):
    """
    MISO 에서 계약 목록을 가져와 InvoiceRecord 배열로 돌려준다.

    오류 시에는 {"error": ..., "status": ..., "detail": ...} 형태로 응답한다.
    """
    state = request.app.state
    try:
        records = fetch_invoice_records(state.cfg, session=state.http_session)
    except WorkflowError as e:
        logger.error(f"레코드 조회 실패: {e.message}")
        return workflow_error_response(e)

    log_record_warnings(records)
    records = sort_records(records, sort, order)
    return JSONResponse([record.to_dict() for record in records])


@router.post("/invoices/preview", response_class=HTMLResponse)
async def preview_invoices(request: Request, body: InvoiceSelectionRequest):
    """선택한 레코드의 인보이스를 페이지 순서대로 HTML 로 돌려준다."""
    records = body.to_records()
    if not records:
        raise HTTPException(status_code=400, detail="미리보기할 계약을 선택해주세요.")

    issuer = request.app.state.issuer
    total = len(records)
    pages = [
        render_invoice_document(record, index, total, issuer).html
        for index, record in enumerate(records, start=1)
    ]
    html = jinja_env.get_template("preview.html").render(pages=pages)
    return HTMLResponse(html)


@router.post("/invoices/export")
async def export_invoices(request: Request, body: InvoiceSelectionRequest):
    """
    인쇄 작업을 만들고 인쇄 페이지 주소를 돌려준다.
    브라우저가 그 페이지를 열면 인쇄 대화상자(PDF 저장)가 뜬다.
    """
    records = body.to_records()
    if not records:
        raise HTTPException(status_code=400, detail="인보이스를 생성할 계약을 선택해주세요.")

    try:
        job = request.app.state.exporter.export_as_printable(records)
    except Exception as e:
        logger.error(f"인보이스 생성 오류: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="인보이스 생성 중 오류가 발생했습니다.")

    return JSONResponse({
        "job_id": job.job_id,
        "print_url": f"/api/print/{job.job_id}",
        "title": job.title,
    })


@router.get("/print/{job_id}", response_class=HTMLResponse)
async def print_page(request: Request, job_id: str):
    job = request.app.state.print_jobs.get(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="인쇄 작업을 찾을 수 없습니다 (만료되었거나 이미 완료되었습니다)")
    return HTMLResponse(job.html)


@router.post("/print/{job_id}/complete")
async def complete_print(request: Request, job_id: str):
    """afterprint 신호. 여러 번 와도 정리는 한 번만 일어난다."""
    released = request.app.state.print_jobs.complete(job_id)
    return JSONResponse({"job_id": job_id, "released": released})
