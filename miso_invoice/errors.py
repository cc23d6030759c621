from __future__ import annotations

from typing import Any, Dict, Optional


class WorkflowError(Exception):
    """MISO 워크플로우 호출 중 사용자에게 보여줄 오류의 기반 클래스."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        detail: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.detail = detail

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        if isinstance(self, WorkflowHTTPError):
            body["status"] = self.status_code
            body["detail"] = self.detail if self.detail is not None else {}
        return body


class WorkflowConfigError(WorkflowError):
    """MISO_URL / MISO_KEY 가 설정되지 않았다."""

    def __init__(self, message: str = "MISO 인증 정보가 설정되지 않았습니다. 환경변수를 확인해주세요.") -> None:
        super().__init__(message, status_code=500)


class WorkflowHTTPError(WorkflowError):
    """MISO 가 2xx 이외의 상태 코드를 돌려주었다."""


class WorkflowConnectionError(WorkflowError):
    """네트워크 오류 등으로 MISO 에 연결하지 못했다."""

    def __init__(self, message: str = "MISO API 연결에 실패했습니다. 네트워크 연결을 확인해주세요.") -> None:
        super().__init__(message, status_code=500)
