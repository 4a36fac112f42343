import json
import logging
from pathlib import Path
from datetime import datetime, timezone
from typing import Any
from support_core.config.settings import settings


REDACTED_LENGTH = 64


def _redact(value: Any) -> Any:
    # 文本截断，列表（如命中的危机短语）只保留条数，数字与布尔原样保留
    if isinstance(value, str):
        return value[:REDACTED_LENGTH]
    if isinstance(value, (list, tuple)):
        return len(value)
    if isinstance(value, dict):
        return {k: _redact(v) for k, v in value.items()}
    return value


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        msg = record.getMessage()
        extra = getattr(record, "extra", None)
        if not isinstance(extra, dict):
            extra = {}
        if settings.log_redact_content:
            msg = _redact(msg or "")
            extra = _redact(extra)
        payload = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "name": record.name,
            "msg": msg,
        }
        payload.update(extra)
        return json.dumps(payload, ensure_ascii=False)


def setup_logger() -> logging.Logger:
    logger = logging.getLogger("support_core")
    logger.setLevel(logging.INFO)
    if logger.handlers:
        return logger
    log_dir = Path(settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    fh = logging.FileHandler(log_dir / "support.log", encoding="utf-8")
    fh.setLevel(logging.INFO)
    fh.setFormatter(JsonFormatter())
    logger.addHandler(fh)
    return logger


logger = setup_logger()
