"""Notifiers, Gateway Factory and Logging — tests for the wiring helpers.

Tests cover:
    - LoggingChangeNotifier logs event name and entity id
    - FanOutNotifier keeps delivering when one notifier fails
    - build_gateways picks the file backend from settings
    - JSONFormatter surfaces extra fields
"""

import json
import logging

import pytest

from airsoft_shop.config import Settings
from airsoft_shop.infrastructure.file_gateways import FileProductGateway
from airsoft_shop.infrastructure.gateway_factory import build_gateways
from airsoft_shop.infrastructure.notifier import FanOutNotifier, LoggingChangeNotifier
from airsoft_shop.infrastructure.observability import JSONFormatter


class _Recorder:
    def __init__(self):
        self.events = []

    async def emit(self, event, payload=None):
        self.events.append((event, payload))


class _Broken:
    async def emit(self, event, payload=None):
        raise RuntimeError("socket closed")


@pytest.mark.asyncio
async def test_logging_notifier(caplog):
    caplog.set_level(logging.INFO, logger="airsoft_shop.infrastructure.notifier")
    await LoggingChangeNotifier().emit("cart-created", {"id": "c1"})
    record = caplog.records[-1]
    assert record.event == "cart-created"
    assert record.entity_id == "c1"


@pytest.mark.asyncio
async def test_fan_out_survives_failing_notifier(caplog):
    recorder = _Recorder()
    await FanOutNotifier(_Broken(), recorder).emit("cart-updated", {"id": "c1"})
    assert recorder.events == [("cart-updated", {"id": "c1"})]
    assert any("socket closed" in r.getMessage() for r in caplog.records)


@pytest.mark.asyncio
async def test_build_file_gateways(tmp_path):
    data_dir = tmp_path / "data"
    gateways = build_gateways(Settings(backend="file", data_dir=str(data_dir)))
    assert gateways.backend == "file"
    assert isinstance(gateways.products, FileProductGateway)
    assert await gateways.health_check() is False
    await gateways.open()
    assert data_dir.is_dir()
    assert await gateways.health_check() is True
    await gateways.close()


def test_settings_accepts_mongo_alias():
    assert Settings(backend="mongo").backend == "database"


def test_settings_rejects_unknown_category():
    with pytest.raises(ValueError):
        Settings(valid_categories=["grenades"])


def test_settings_rejects_default_page_above_max():
    with pytest.raises(ValueError):
        Settings(default_page_size=50, max_page_size=20)


def test_listing_policy_from_settings():
    policy = Settings(max_page_size=25, valid_categories=["bbs"]).listing_policy()
    assert policy.max_page_size == 25
    assert policy.categories == ("bbs",)


def test_json_formatter_includes_extras():
    record = logging.LogRecord("airsoft", logging.INFO, __file__, 1, "saved", None, None)
    record.entity_id = "p1"
    record.operation = "create"
    line = json.loads(JSONFormatter().format(record))
    assert line["message"] == "saved"
    assert line["entity_id"] == "p1"
    assert line["operation"] == "create"
    assert "event" not in line
