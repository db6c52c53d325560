import asyncio
import os
from pathlib import Path
from typing import Optional

import pytest
from loguru import logger

from app.models.schemas import ConversionFailure

NOW = 1_700_000_000.0
DAY = 24 * 60 * 60

CONFIG_ENV_VARS = (
    "INPUT_DIR",
    "OUTPUT_DIR",
    "GOTENBERG_URL",
    "CLEANUP_DAYS",
    "LOG_LEVEL",
    "SETTLE_DELAY",
    "WRITE_STABILITY",
)


def set_mtime(path: Path, timestamp: float) -> None:
    os.utime(path, (timestamp, timestamp))


class FakeConverter:
    """Stands in for the Gotenberg client."""

    def __init__(self, payload: bytes = b"%PDF-1.7 fake", failure: Optional[ConversionFailure] = None):
        self.payload = payload
        self.failure = failure
        self.calls: list[Path] = []
        self.gate: Optional[asyncio.Event] = None
        self.healthy = True

    async def health_check(self) -> bool:
        return self.healthy

    async def convert(self, source: Path):
        self.calls.append(source)
        if self.gate is not None:
            await self.gate.wait()
        if self.failure is not None:
            return self.failure
        return self.payload


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def dirs(tmp_path):
    input_dir = tmp_path / "pptx"
    output_dir = tmp_path / "pdf"
    input_dir.mkdir()
    output_dir.mkdir()
    return input_dir, output_dir


@pytest.fixture
def converter():
    return FakeConverter()


@pytest.fixture
def log_messages():
    messages: list[str] = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)
