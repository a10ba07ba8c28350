"""
Tests for `domain/loyalty.py`.

Covers:
- Review due after 11 thirty-day months of activity (not calendar months).
- Only active sales with an active_date are eligible.
- A later `refid` sale for the same client name and address removes the alert.
- days_until_end rounds up and never goes negative.
- The 210-day banner predicate is independent of the review predicate.
- Alerts keep input order; `take` truncates for previews.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Optional

import pytest

from domain.loyalty import (
    LoyaltyAlert,
    days_until_loyalty_end,
    detect_loyalty_alerts,
    is_loyalty_review_due,
    is_renewed,
    months_active,
    shows_loyalty_banner,
    take,
)
from domain.sale import SaleCategory, SaleRecord, SaleStatus, SaleType

# Midnight makes the 30-day month arithmetic exact.
NOW = datetime(2025, 6, 1, 0, 0, tzinfo=timezone.utc)
TODAY = NOW.date()


def _sale(
    sale_id: str,
    *,
    status: SaleStatus = SaleStatus.ATIVO,
    active_days_ago: Optional[int] = 400,
    created_at: datetime = datetime(2024, 4, 1, 10, 0, tzinfo=timezone.utc),
    sale_type: Optional[SaleType] = SaleType.NOVA_INSTALACAO,
    client_name: str = "Joao Ferreira",
    client_address: str = "Av. Marques de Pombal 5, Leiria",
    loyalty_end_date: Optional[date] = None,
) -> SaleRecord:
    return SaleRecord(
        id=sale_id,
        client_name=client_name,
        client_address=client_address,
        category=SaleCategory.TELECOMUNICACOES,
        status=status,
        created_at=created_at,
        sale_type=sale_type,
        active_date=TODAY - timedelta(days=active_days_ago) if active_days_ago is not None else None,
        loyalty_end_date=loyalty_end_date,
        partner_name="Parceiro Centro",
    )


class TestReviewDue:
    def test_long_active_contract_is_alerted(self) -> None:
        sale = _sale("old")

        alerts = detect_loyalty_alerts([sale], NOW)

        assert [a.sale_id for a in alerts] == ["old"]

    def test_recent_contract_is_never_alerted(self) -> None:
        sale = _sale("recent", active_days_ago=30, loyalty_end_date=TODAY + timedelta(days=5))

        assert detect_loyalty_alerts([sale], NOW) == []

    @pytest.mark.parametrize(
        "days_ago, expected",
        [
            (329, False),
            (330, True),
            (335, True),
            (1000, True),
        ],
    )
    def test_threshold_uses_fixed_30_day_months(self, days_ago: int, expected: bool) -> None:
        sale = _sale("s", active_days_ago=days_ago)

        assert is_loyalty_review_due(sale, [sale], NOW) is expected

    def test_months_active_is_elapsed_days_over_30(self) -> None:
        assert months_active(_sale("s", active_days_ago=330), NOW) == pytest.approx(11.0)
        assert months_active(_sale("s", active_days_ago=None), NOW) is None

    @pytest.mark.parametrize(
        "status",
        [SaleStatus.EM_NEGOCIACAO, SaleStatus.PENDENTE, SaleStatus.PERDIDO, SaleStatus.ANULADO],
    )
    def test_only_active_status_is_eligible(self, status: SaleStatus) -> None:
        assert detect_loyalty_alerts([_sale("s", status=status)], NOW) == []

    def test_active_without_active_date_is_not_eligible(self) -> None:
        assert detect_loyalty_alerts([_sale("s", active_days_ago=None)], NOW) == []


class TestRenewal:
    def test_later_refid_for_same_client_suppresses_alert(self) -> None:
        original = _sale("original")
        follow_up = _sale(
            "follow-up",
            status=SaleStatus.PENDENTE,
            active_days_ago=None,
            created_at=datetime(2025, 5, 1, 10, 0, tzinfo=timezone.utc),
            sale_type=SaleType.NOVA_INSTALACAO,
        )

        assert [a.sale_id for a in detect_loyalty_alerts([original, follow_up], NOW)] == ["original"]

        renewal = _sale(
            "follow-up",
            status=SaleStatus.PENDENTE,
            active_days_ago=None,
            created_at=datetime(2025, 5, 1, 10, 0, tzinfo=timezone.utc),
            sale_type=SaleType.REFID,
        )

        assert detect_loyalty_alerts([original, renewal], NOW) == []

    def test_earlier_or_simultaneous_refid_does_not_count(self) -> None:
        original = _sale("original")
        earlier = _sale(
            "earlier",
            sale_type=SaleType.REFID,
            active_days_ago=None,
            created_at=datetime(2023, 1, 1, tzinfo=timezone.utc),
        )
        same_time = _sale("same", sale_type=SaleType.REFID, active_days_ago=None)

        assert is_renewed(original, [original, earlier, same_time]) is False

    @pytest.mark.parametrize(
        "name, address",
        [
            ("Joao Ferreira", "Outra Rua 1, Leiria"),
            ("Ana Ferreira", "Av. Marques de Pombal 5, Leiria"),
        ],
    )
    def test_refid_must_match_both_name_and_address(self, name: str, address: str) -> None:
        original = _sale("original")
        other = _sale(
            "other",
            sale_type=SaleType.REFID,
            active_days_ago=None,
            created_at=datetime(2025, 5, 1, tzinfo=timezone.utc),
            client_name=name,
            client_address=address,
        )

        assert is_renewed(original, [original, other]) is False

    def test_a_refid_sale_is_not_renewed_by_itself(self) -> None:
        renewal = _sale("r", sale_type=SaleType.REFID)

        assert is_renewed(renewal, [renewal]) is False
        assert [a.sale_id for a in detect_loyalty_alerts([renewal], NOW)] == ["r"]


class TestDaysUntilEnd:
    def test_whole_days(self) -> None:
        sale = _sale("s", loyalty_end_date=TODAY + timedelta(days=10))

        assert days_until_loyalty_end(sale, NOW) == 10

    def test_partial_days_round_up(self) -> None:
        sale = _sale("s", loyalty_end_date=TODAY + timedelta(days=10))

        assert days_until_loyalty_end(sale, NOW + timedelta(hours=12)) == 10

    def test_past_end_is_zero(self) -> None:
        sale = _sale("s", loyalty_end_date=TODAY - timedelta(days=3))

        assert days_until_loyalty_end(sale, NOW) == 0

    def test_missing_end_is_none(self) -> None:
        assert days_until_loyalty_end(_sale("s"), NOW) is None


class TestBanner:
    @pytest.mark.parametrize(
        "days_left, expected",
        [(0, True), (120, True), (210, True), (211, False), (400, False)],
    )
    def test_banner_threshold(self, days_left: int, expected: bool) -> None:
        sale = _sale("s", loyalty_end_date=TODAY + timedelta(days=days_left))

        assert shows_loyalty_banner(sale, NOW) is expected

    def test_banner_requires_active_status(self) -> None:
        sale = _sale("s", status=SaleStatus.PENDENTE, loyalty_end_date=TODAY + timedelta(days=30))

        assert shows_loyalty_banner(sale, NOW) is False

    def test_banner_is_independent_of_review_rule(self) -> None:
        """A recent contract can show the banner without being in the alert list."""

        sale = _sale("s", active_days_ago=30, loyalty_end_date=TODAY + timedelta(days=30))

        assert shows_loyalty_banner(sale, NOW) is True
        assert is_loyalty_review_due(sale, [sale], NOW) is False

    def test_no_banner_without_loyalty_end(self) -> None:
        assert shows_loyalty_banner(_sale("s"), NOW) is False


class TestAlertList:
    def test_alert_fields(self) -> None:
        sale = _sale("s", loyalty_end_date=TODAY + timedelta(days=45))

        (alert,) = detect_loyalty_alerts([sale], NOW)

        assert alert == LoyaltyAlert(
            sale_id="s",
            client_name="Joao Ferreira",
            partner_name="Parceiro Centro",
            category=SaleCategory.TELECOMUNICACOES,
            days_until_end=45,
            loyalty_end_date=TODAY + timedelta(days=45),
        )

    def test_alert_without_loyalty_end_has_no_countdown(self) -> None:
        (alert,) = detect_loyalty_alerts([_sale("s")], NOW)

        assert alert.days_until_end is None
        assert alert.loyalty_end_date is None

    def test_alerts_keep_input_order(self) -> None:
        sales = [
            _sale("c", client_name="C"),
            _sale("a", client_name="A", loyalty_end_date=TODAY + timedelta(days=2)),
            _sale("b", client_name="B"),
        ]

        assert [a.sale_id for a in detect_loyalty_alerts(sales, NOW)] == ["c", "a", "b"]

    def test_take_truncates_for_preview(self) -> None:
        sales = [_sale(str(i), client_name=f"Cliente {i}") for i in range(8)]
        alerts = detect_loyalty_alerts(sales, NOW)

        assert len(alerts) == 8
        assert [a.sale_id for a in take(alerts, 5)] == ["0", "1", "2", "3", "4"]
        assert take(alerts, 0) == []
        assert len(take(alerts, 50)) == 8

    def test_take_rejects_negative(self) -> None:
        with pytest.raises(ValueError):
            take([], -1)
