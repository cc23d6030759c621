from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import requests
import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from miso_invoice.config import (
    configure_logging,
    init_env,
    issuer_profile_from_config,
    load_app_config,
    print_settings_from_config,
)
from miso_invoice.services.print_export import PrintExporter, PrintJobStore

UI_DIR = Path(__file__).resolve().parent / "miso_invoice" / "ui"


def create_app(
    cfg: Optional[Dict[str, Any]] = None,
    http_session: Optional[requests.Session] = None,
) -> FastAPI:
    """FastAPI 애플리케이션 생성"""
    # .env 읽기
    init_env()

    # config.json 읽기
    if cfg is None:
        cfg = load_app_config()
    configure_logging(cfg.get("log_level"))

    app = FastAPI(
        title="미소 인보이스 생성기",
        description="MISO 워크플로우의 계약 목록으로 인보이스를 만들어 PDF 로 인쇄하는 도구",
        version="1.0.0",
    )

    # 요청 간에 공유하는 상태
    issuer = issuer_profile_from_config(cfg)
    print_settings = print_settings_from_config(cfg)
    print_jobs = PrintJobStore(timeout_seconds=print_settings.cleanup_timeout_seconds)
    app.state.cfg = cfg
    app.state.http_session = http_session
    app.state.issuer = issuer
    app.state.print_settings = print_settings
    app.state.print_jobs = print_jobs
    app.state.exporter = PrintExporter(issuer, print_jobs, print_settings)

    # 정적 파일
    app.mount("/styles", StaticFiles(directory=str(UI_DIR / "styles")), name="styles")
    app.mount("/scripts", StaticFiles(directory=str(UI_DIR / "scripts")), name="scripts")

    # 라우터
    from miso_invoice.ui.main_page import router as main_router
    from miso_invoice.ui.pages.invoice_page import router as api_router

    app.include_router(api_router, prefix="/api", tags=["invoice"])
    app.include_router(main_router)

    return app


# FastAPI 앱 인스턴스 (uvicorn app:app)
app = create_app()


if __name__ == "__main__":
    # python app.py 로 직접 실행하는 경우
    port = int(app.state.cfg.get("port", 8000))
    print("🚀 서버를 시작합니다...")
    print(f"📱 브라우저에서 http://localhost:{port} 에 접속하세요")
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=port,
        log_level="info",
    )
