"""Commission booking side effects, order-driven inverter commissions, summaries and payouts."""

from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from sqlalchemy import select

from models import Commission, Payout, Referral
from models.enums import ReferralStatus, ReferralType, Role
from schemas.order import OrderCreate, PaymentCreate
from services import commissions, orders
from services.errors import DomainError, InvalidStatusTransition


async def _all_commissions(db_session):
    return (await db_session.execute(select(Commission).order_by(Commission.partner_type))).scalars().all()


class TestInstallationCommissions:
    async def test_ddp_and_bdp_booked_once(self, db_session, make_partner, make_customer):
        bdp = await make_partner(role=Role.BDP)
        ddp = await make_partner(parent_id=bdp.id)
        customer = await make_customer(ddp=ddp, proposed_capacity="7", panel_type="dcr_ongrid")

        first = await commissions.create_commissions_for_customer(db_session, customer)
        second = await commissions.create_commissions_for_customer(db_session, customer)

        assert [c.id for c in first] == [c.id for c in second]
        rows = await _all_commissions(db_session)
        assert [(r.partner_type, r.commission_amount, r.capacity_kw) for r in rows] == [
            ("bdp", 21_000, 7),
            ("ddp", 42_000, 7),
        ]
        assert all(r.source == "installation" and r.status == "pending" for r in rows)

    async def test_capacity_rounded_half_up(self, db_session, make_partner, make_customer):
        ddp = await make_partner()
        customer = await make_customer(ddp=ddp, proposed_capacity="2.5", panel_type="dcr")
        rows = await commissions.create_commissions_for_customer(db_session, customer)
        assert rows[0].capacity_kw == 3
        assert rows[0].commission_amount == 20_000

    async def test_website_direct_and_zero_capacity_earn_nothing(self, db_session, make_partner, make_customer):
        ddp = await make_partner()
        direct = await make_customer(ddp=ddp, source="website_direct")
        blank = await make_customer(ddp=ddp, proposed_capacity=None)
        assert await commissions.create_commissions_for_customer(db_session, direct) == []
        assert await commissions.create_commissions_for_customer(db_session, blank) == []
        assert await _all_commissions(db_session) == []

    async def test_customer_partner_referral(self, db_session, make_partner, make_customer):
        ddp = await make_partner()
        original = await make_customer(ddp=ddp, status="completed", phone="9000011111")
        cp = await make_partner(role=Role.CUSTOMER_PARTNER, linked_customer_id=original.id, referral_code="CPRAVI1234")
        referred = await make_customer(
            ddp=ddp,
            phone="9000022222",
            source="customer_referral",
            referrer_customer_id=original.id,
            proposed_capacity="4",
        )
        db_session.add(Referral(
            id="ref-cp",
            referrer_id=cp.id,
            referred_type=ReferralType.CUSTOMER.value,
            referred_phone="9000022222",
            referral_code="CPRAVI1234",
            status=ReferralStatus.PENDING.value,
            reward_amount=1_000,
        ))
        await db_session.flush()

        rows = await commissions.create_commissions_for_customer(db_session, referred)

        assert len(rows) == 1
        assert rows[0].partner_id == cp.id
        assert rows[0].partner_type == "customer_partner"
        assert rows[0].source == "customer_referral"
        assert rows[0].commission_amount == 10_000
        referral = await db_session.get(Referral, "ref-cp")
        assert referral.status == "converted"
        assert referral.reward_amount == 10_000
        assert referral.referred_customer_id == referred.id

    async def test_small_referral_earns_nothing(self, db_session, make_partner, make_customer):
        original = await make_customer()
        await make_partner(role=Role.CUSTOMER_PARTNER, linked_customer_id=original.id)
        referred = await make_customer(referrer_customer_id=original.id, proposed_capacity="2")
        assert await commissions.create_commissions_for_customer(db_session, referred) == []


class TestInverterCommissions:
    async def test_paid_order_books_per_unit(self, db_session, make_partner):
        bdp = await make_partner(role=Role.BDP)
        ddp = await make_partner(parent_id=bdp.id)
        order = await orders.create_order(
            db_session,
            OrderCreate(
                customerName="Sunil",
                customerPhone="9876500000",
                items=[
                    {"productName": "SunPunch 5kVA Inverter", "quantity": 2, "unitPrice": 45_000},
                    {"productName": "Mounting kit", "quantity": 1, "unitPrice": 4_000},
                ],
            ),
            ddp=ddp,
        )
        assert order.total_amount == 94_000
        assert order.order_number.startswith("ORD-")

        # Nothing until paid
        assert await commissions.create_inverter_commissions_for_order(db_session, order) == []

        payment = await orders.create_payment(db_session, order, PaymentCreate())
        assert payment.amount == 94_000
        await orders.update_payment_status(db_session, payment.id, "captured")
        assert payment.paid_at is not None
        assert order.status == "paid"

        rows = await _all_commissions(db_session)
        assert [(r.partner_type, r.commission_amount, r.source) for r in rows] == [
            ("bdp", 1_000, "inverter"),
            ("ddp", 2_000, "inverter"),
        ]

        # Re-marking paid does not double-book
        await orders.update_order_status(db_session, order.id, "paid")
        assert len(await _all_commissions(db_session)) == 2

    async def test_cancelled_order_cannot_reopen(self, db_session, make_partner):
        ddp = await make_partner()
        order = await orders.create_order(
            db_session,
            OrderCreate(customerName="A", customerPhone="9876500001", items=[{"productName": "Cable", "unitPrice": 100}]),
            ddp=ddp,
        )
        await orders.update_order_status(db_session, order.id, "cancelled")
        with pytest.raises(DomainError):
            await orders.update_order_status(db_session, order.id, "paid")


def _row(amount, status, source="installation", created_at=None):
    return SimpleNamespace(commission_amount=amount, status=status, source=source, created_at=created_at)


def test_commission_summary():
    now = datetime(2025, 3, 15, tzinfo=timezone.utc)
    rows = [
        _row(20_000, "pending", created_at=datetime(2025, 3, 2)),
        _row(10_000, "approved", created_at=datetime(2025, 2, 20, tzinfo=timezone.utc)),
        _row(2_000, "paid", source="inverter", created_at=datetime(2025, 3, 10, tzinfo=timezone.utc)),
        _row(10_000, "paid", source="customer_referral"),
    ]
    summary = commissions.commission_summary(rows, now=now)
    assert summary.total_earned == 42_000
    assert summary.pending_amount == 30_000
    assert summary.paid_amount == 12_000
    assert summary.total_installations == 2
    assert summary.installation_earnings == 30_000
    assert summary.inverter_earnings == 2_000
    assert summary.customer_referral_earnings == 10_000
    assert summary.current_month_earnings == 22_000


class TestPayouts:
    async def test_only_approved_commissions_paid_out(self, db_session, make_partner, make_customer):
        ddp = await make_partner()
        customer = await make_customer(ddp=ddp, proposed_capacity="3")
        [row] = await commissions.create_commissions_for_customer(db_session, customer)

        with pytest.raises(DomainError):
            await commissions.record_payout(db_session, row.id, "NEFT")

        await commissions.update_commission_status(db_session, row.id, "approved")
        payout = await commissions.record_payout(db_session, row.id, "NEFT", utr="UTR123")

        assert payout.amount == 20_000
        assert payout.status == "completed"
        assert row.status == "paid"
        assert row.paid_at is not None
        assert (await db_session.execute(select(Payout))).scalar_one().utr == "UTR123"

    async def test_status_only_moves_forward(self, db_session, make_partner, make_customer):
        ddp = await make_partner()
        customer = await make_customer(ddp=ddp, proposed_capacity="3")
        [row] = await commissions.create_commissions_for_customer(db_session, customer)
        await commissions.update_commission_status(db_session, row.id, "approved")
        await commissions.record_payout(db_session, row.id, "IMPS")

        for status in ("pending", "approved", "paid"):
            with pytest.raises(InvalidStatusTransition):
                await commissions.update_commission_status(db_session, row.id, status)

        assert row.status == "paid"
        assert row.paid_at is not None
        assert len((await db_session.execute(select(Payout))).scalars().all()) == 1

    async def test_pending_can_skip_to_paid(self, db_session, make_partner, make_customer):
        ddp = await make_partner()
        customer = await make_customer(ddp=ddp, proposed_capacity="3")
        [row] = await commissions.create_commissions_for_customer(db_session, customer)

        await commissions.update_commission_status(db_session, row.id, "paid")

        assert row.status == "paid"
        assert row.paid_at is not None
