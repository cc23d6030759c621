from __future__ import annotations

import copy
import json
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

from dotenv import load_dotenv

from .domain.invoice import IssuerProfile
from .errors import WorkflowConfigError

# 로거 설정
logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_CONFIG_PATH = BASE_DIR / "config.json"

DEFAULT_CONFIG: Dict[str, Any] = {
    "log_level": "INFO",
    "port": 8000,
    "workflow": {
        "timeout_seconds": 120,
        "user": "invoice-generator",
    },
    "print": {
        # window.print() 전에 레이아웃이 안정되기를 기다리는 시간
        "grace_ms": 1000,
        # afterprint 신호가 오지 않을 때 인쇄 작업을 정리하기까지의 시간
        "cleanup_timeout_seconds": 60,
    },
    "issuer": {},
}


@dataclass(frozen=True)
class WorkflowSettings:
    url: str
    key: str
    timeout_seconds: float = 120
    user: str = "invoice-generator"

    @property
    def endpoint(self) -> str:
        return f"{self.url.rstrip('/')}/workflows/run"


@dataclass(frozen=True)
class PrintSettings:
    grace_ms: int = 1000
    cleanup_timeout_seconds: float = 60


# --------------------------------------------------------
# .env / config.json
# --------------------------------------------------------
def init_env(env_path: Optional[Union[str, Path]] = None) -> None:
    """.env 를 읽어 환경변수에 반영한다. 이미 설정된 값이 우선한다."""
    path = Path(env_path) if env_path else BASE_DIR / ".env"
    if path.exists():
        load_dotenv(path, override=False)
        logger.debug(f".env 로드: {path}")


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_app_config(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """config.json 을 읽어 기본값 위에 덮어쓴 설정 dict 를 돌려준다."""
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    if not config_path.exists():
        return copy.deepcopy(DEFAULT_CONFIG)

    try:
        with config_path.open(encoding="utf-8") as handle:
            loaded = json.load(handle)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"config.json 을 읽지 못했습니다 ({config_path}): {e}")
        return copy.deepcopy(DEFAULT_CONFIG)

    if not isinstance(loaded, dict):
        logger.warning(f"config.json 의 최상위가 객체가 아닙니다: {config_path}")
        return copy.deepcopy(DEFAULT_CONFIG)

    return _merge(DEFAULT_CONFIG, loaded)


def configure_logging(level: Optional[str] = None) -> None:
    """공통 포맷으로 로깅을 초기화한다."""
    logging.basicConfig(
        level=(level or "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# --------------------------------------------------------
# 설정 값 → 불변 객체
# --------------------------------------------------------
def get_workflow_settings(cfg: Optional[Dict[str, Any]] = None) -> WorkflowSettings:
    """MISO 접속 정보. MISO_URL / MISO_KEY 가 없으면 WorkflowConfigError."""
    url = os.getenv("MISO_URL")
    key = os.getenv("MISO_KEY")

    if not url or not key:
        logger.error("MISO 인증 정보 누락: MISO_URL / MISO_KEY 를 확인하세요")
        raise WorkflowConfigError()

    workflow_cfg = (cfg or DEFAULT_CONFIG).get("workflow", {})
    return WorkflowSettings(
        url=url,
        key=key,
        timeout_seconds=float(workflow_cfg.get("timeout_seconds", 120)),
        user=str(workflow_cfg.get("user", "invoice-generator")),
    )


def issuer_profile_from_config(cfg: Dict[str, Any]) -> IssuerProfile:
    issuer_cfg = cfg.get("issuer") or {}
    known = {f.name for f in fields(IssuerProfile)}
    unknown = sorted(set(issuer_cfg) - known)
    if unknown:
        logger.warning(f"issuer 설정에 알 수 없는 키가 있습니다: {unknown}")
    return IssuerProfile(**{k: str(v) for k, v in issuer_cfg.items() if k in known})


def print_settings_from_config(cfg: Dict[str, Any]) -> PrintSettings:
    print_cfg = cfg.get("print") or {}
    return PrintSettings(
        grace_ms=int(print_cfg.get("grace_ms", 1000)),
        cleanup_timeout_seconds=float(print_cfg.get("cleanup_timeout_seconds", 60)),
    )
