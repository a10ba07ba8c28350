"""
Tests for `services/dashboard_service.py` and `services/settings.py`.

Covers:
- The dashboard combines the snapshot, the full alert list and a capped preview.
- The store is read once and `now` is read once per call.
- Settings come from environment variables with defaults.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from domain.errors import DataIntegrityError
from domain.sale import SaleCategory, SaleRecord, SaleStatus
from services.dashboard_service import build_dashboard, load_dashboard
from services.settings import Settings, load_settings

NOW = datetime(2025, 6, 15, 9, 0, tzinfo=timezone.utc)


def _sale(sale_id: str, *, active_date: date | None = None, created_at: datetime | None = NOW) -> SaleRecord:
    return SaleRecord(
        id=sale_id,
        client_name=f"Cliente {sale_id}",
        client_address="Leiria",
        category=SaleCategory.ENERGIA,
        status=SaleStatus.ATIVO,
        created_at=created_at,
        contract_value=Decimal("50"),
        active_date=active_date,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(display_timezone=ZoneInfo("Europe/Lisbon"), dashboard_months=6, alert_preview=5)


def test_dashboard_caps_preview_but_keeps_all_alerts(settings) -> None:
    old = NOW.date() - timedelta(days=400)
    sales = [_sale(str(i), active_date=old) for i in range(7)] + [_sale("new", active_date=NOW.date())]

    view = build_dashboard(sales, NOW, settings)

    assert view.snapshot.total_sales == 8
    assert view.snapshot.sales_this_month == 8
    assert len(view.alerts) == 7
    assert [a.sale_id for a in view.alerts_preview] == ["0", "1", "2", "3", "4"]


def test_load_dashboard_fetches_once(settings) -> None:
    calls = []

    def fetch():
        calls.append(1)
        return [_sale("a")]

    view = load_dashboard(fetch, NOW, settings)

    assert calls == [1]
    assert view.snapshot.generated_at == NOW


def test_load_dashboard_reads_clock_when_now_is_omitted(settings) -> None:
    before = datetime.now(timezone.utc)
    view = load_dashboard(lambda: [], settings=settings)

    assert view.snapshot.generated_at >= before
    assert view.snapshot.generated_at.tzinfo is not None


def test_dashboard_fails_on_bad_record(settings) -> None:
    with pytest.raises(DataIntegrityError):
        build_dashboard([_sale("a"), _sale("b", created_at=None)], NOW, settings)


class TestSettings:
    def test_defaults(self, monkeypatch) -> None:
        for name in ("CRM_DISPLAY_TIMEZONE", "CRM_DASHBOARD_MONTHS", "CRM_ALERT_PREVIEW"):
            monkeypatch.delenv(name, raising=False)

        settings = load_settings()

        assert settings.display_timezone == ZoneInfo("Europe/Lisbon")
        assert settings.dashboard_months == 6
        assert settings.alert_preview == 5

    def test_environment_overrides(self, monkeypatch) -> None:
        monkeypatch.setenv("CRM_DISPLAY_TIMEZONE", "Atlantic/Azores")
        monkeypatch.setenv("CRM_DASHBOARD_MONTHS", "12")
        monkeypatch.setenv("CRM_ALERT_PREVIEW", "3")

        settings = load_settings()

        assert settings.display_timezone == ZoneInfo("Atlantic/Azores")
        assert settings.dashboard_months == 12
        assert settings.alert_preview == 3

    @pytest.mark.parametrize(
        "name, value",
        [
            ("CRM_DISPLAY_TIMEZONE", "Mars/Olympus"),
            ("CRM_DASHBOARD_MONTHS", "six"),
            ("CRM_ALERT_PREVIEW", "0"),
        ],
    )
    def test_invalid_values_raise(self, monkeypatch, name: str, value: str) -> None:
        monkeypatch.setenv(name, value)

        with pytest.raises(RuntimeError, match=name):
            load_settings()
