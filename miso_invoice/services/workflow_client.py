from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from ..config import WorkflowSettings, get_workflow_settings
from ..domain.invoice import InvoiceRecord
from ..errors import WorkflowConnectionError, WorkflowHTTPError
from .response_normalizer import normalize

# 로거 설정
logger = logging.getLogger(__name__)

# 상태 코드별 안내 문구 (응답에 detail 이 있으면 그쪽이 우선)
STATUS_MESSAGES: Dict[int, str] = {
    400: "잘못된 요청입니다. 워크플로우가 발행되었는지 확인해주세요.",
    401: "인증에 실패했습니다. API 키를 확인해주세요.",
    500: "서버 내부 오류가 발생했습니다.",
}
DEFAULT_HTTP_ERROR_MESSAGE = "MISO API 호출에 실패했습니다."


def error_message_for(status_code: int, error_data: Any) -> str:
    if isinstance(error_data, dict) and error_data.get("detail"):
        return f"오류: {error_data['detail']}"
    return STATUS_MESSAGES.get(status_code, DEFAULT_HTTP_ERROR_MESSAGE)


class WorkflowClient:
    """
    MISO 워크플로우(blocking 모드)를 한 번 실행하고 응답 JSON 을 돌려준다.

    재시도는 하지 않는다. 실패는 WorkflowHTTPError / WorkflowConnectionError 로 알린다.
    """

    def __init__(self, settings: WorkflowSettings, session: Optional[requests.Session] = None) -> None:
        self.settings = settings
        self.session = session or requests.Session()

    def _request_body(self) -> Dict[str, Any]:
        return {
            "inputs": {},
            "mode": "blocking",
            "user": self.settings.user,
        }

    def run(self) -> Any:
        """
        Returns:
            응답 JSON. 본문이 JSON 이 아니면 None (정규화 단계에서 빈 목록이 된다).
        """
        logger.info(f"MISO 워크플로우 호출: {self.settings.endpoint}")
        try:
            response = self.session.post(
                self.settings.endpoint,
                headers={
                    "Authorization": f"Bearer {self.settings.key}",
                    "Content-Type": "application/json",
                },
                json=self._request_body(),
                timeout=self.settings.timeout_seconds,
            )
        except requests.RequestException as e:
            logger.error(f"MISO 연결 실패: {e}", exc_info=True)
            raise WorkflowConnectionError() from e

        if not response.ok:
            try:
                error_data = response.json()
            except ValueError:
                error_data = {}
            logger.error(f"MISO 오류 응답: status={response.status_code}, body={error_data}")
            raise WorkflowHTTPError(
                error_message_for(response.status_code, error_data),
                status_code=response.status_code,
                detail=error_data,
            )

        try:
            return response.json()
        except ValueError:
            logger.error(f"MISO 응답이 JSON 이 아닙니다: {response.text[:200]}")
            return None


def fetch_invoice_records(
    cfg: Dict[str, Any],
    session: Optional[requests.Session] = None,
) -> List[InvoiceRecord]:
    """설정 확인 → 워크플로우 실행 → 정규화. 설정/호출 오류는 WorkflowError 로 올라간다."""
    settings = get_workflow_settings(cfg)
    payload = WorkflowClient(settings, session=session).run()
    return normalize(payload)
