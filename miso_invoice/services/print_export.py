from __future__ import annotations

import logging
import time
import uuid
from datetime import date
from typing import Callable, Dict, List, Optional, Sequence

from ..config import PrintSettings
from ..domain.invoice import InvoiceRecord, IssuerProfile
from .invoice_renderer import jinja_env, render_invoice_document

# 로거 설정
logger = logging.getLogger(__name__)

Clock = Callable[[], float]


# --------------------------------------------------------
# 인쇄 작업
# --------------------------------------------------------
class PrintJob:
    """
    브라우저 인쇄 대화상자로 넘길 문서 1건.

    afterprint 신호 또는 시간 초과 중 먼저 오는 쪽이 release() 를 부른다.
    release() 는 몇 번 불려도 정리는 한 번만 일어난다.
    """

    def __init__(
        self,
        job_id: str,
        title: str,
        expires_at: float,
        on_release: Callable[["PrintJob"], None],
    ) -> None:
        self.job_id = job_id
        self.title = title
        self.expires_at = expires_at
        self.html = ""
        self._on_release = on_release
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> bool:
        """정리를 수행했으면 True, 이미 정리된 작업이면 False."""
        if self._released:
            return False
        self._released = True
        self.html = ""
        self._on_release(self)
        return True


class PrintJobStore:
    """job_id → PrintJob. 만료된 작업은 조회할 때마다 정리한다."""

    def __init__(self, timeout_seconds: float, clock: Clock = time.monotonic) -> None:
        self.timeout_seconds = timeout_seconds
        self._clock = clock
        self._jobs: Dict[str, PrintJob] = {}

    def __len__(self) -> int:
        return len(self._jobs)

    def _forget(self, job: PrintJob) -> None:
        self._jobs.pop(job.job_id, None)

    def stage(self, title: str) -> PrintJob:
        self.sweep()
        job = PrintJob(
            job_id=uuid.uuid4().hex,
            title=title,
            expires_at=self._clock() + self.timeout_seconds,
            on_release=self._forget,
        )
        self._jobs[job.job_id] = job
        return job

    def sweep(self) -> int:
        now = self._clock()
        expired = [job for job in self._jobs.values() if job.expires_at <= now]
        for job in expired:
            logger.info(f"인쇄 작업 시간 초과로 정리: {job.job_id}")
            job.release()
        return len(expired)

    def get(self, job_id: str) -> Optional[PrintJob]:
        self.sweep()
        return self._jobs.get(job_id)

    def complete(self, job_id: str) -> bool:
        """afterprint 신호. 이미 정리된 작업이면 False."""
        job = self._jobs.get(job_id)
        if job is None:
            return False
        released = job.release()
        if released:
            logger.info(f"인쇄 완료로 정리: {job_id}")
        return released


# --------------------------------------------------------
# 인쇄용 문서 생성
# --------------------------------------------------------
def print_file_name(today: date) -> str:
    """인쇄 문서 제목. 브라우저가 PDF 파일명으로 사용한다."""
    return f"invoices_{today.isoformat()}"


class PrintExporter:
    def __init__(
        self,
        issuer: IssuerProfile,
        store: PrintJobStore,
        settings: PrintSettings,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.issuer = issuer
        self.store = store
        self.settings = settings
        self._today = today

    def render_pages(self, records: Sequence[InvoiceRecord], today: Optional[date] = None) -> List[str]:
        """입력 순서대로 한 레코드당 한 페이지."""
        total = len(records)
        return [
            render_invoice_document(record, index, total, self.issuer, today=today).html
            for index, record in enumerate(records, start=1)
        ]

    def build_print_document(self, job: PrintJob, records: Sequence[InvoiceRecord], today: date) -> str:
        return jinja_env.get_template("print.html").render(
            title=job.title,
            job_id=job.job_id,
            pages=self.render_pages(records, today=today),
            grace_ms=self.settings.grace_ms,
        )

    def export_as_printable(self, records: Sequence[InvoiceRecord]) -> PrintJob:
        """
        선택된 레코드를 한 인쇄 작업으로 묶는다.

        문서 생성에 실패하면 먼저 잡아 둔 작업을 정리하고 예외를 다시 던진다.
        """
        if not records:
            raise ValueError("인쇄할 레코드가 없습니다.")

        today = self._today()
        job = self.store.stage(print_file_name(today))
        try:
            job.html = self.build_print_document(job, records, today)
        except Exception:
            logger.error(f"인보이스 인쇄 문서 생성 실패: {job.job_id}", exc_info=True)
            job.release()
            raise

        logger.info(f"인쇄 작업 생성: {job.job_id}, {len(records)}페이지")
        return job
