"""Customer lifecycle: forward-only, one step at a time, with side effects on completion."""

import unittest

import pytest
from sqlalchemy import select

from models import Commission, Referral
from models.enums import ReferralStatus, ReferralType, Role
from services import customer_status
from services.customer_status import validate_transition
from services.errors import InvalidStatusTransition
from services.referrals import PARTNER_REFERRAL_THRESHOLD


class TestValidateTransition(unittest.TestCase):
    def test_each_immediate_successor_is_allowed(self):
        flow = ["pending", "verified", "approved", "installation_scheduled", "completed"]
        for current, new in zip(flow, flow[1:]):
            with self.subTest(current=current):
                self.assertEqual(validate_transition(current, new).value, new)

    def test_skipping_is_rejected(self):
        with self.assertRaises(InvalidStatusTransition) as ctx:
            validate_transition("pending", "approved")
        self.assertIn("next status is verified", str(ctx.exception))

    def test_backwards_and_same_rejected(self):
        for current, new in (("approved", "verified"), ("verified", "verified")):
            with self.subTest(current=current, new=new):
                with self.assertRaises(InvalidStatusTransition):
                    validate_transition(current, new)

    def test_completed_is_terminal(self):
        with self.assertRaises(InvalidStatusTransition) as ctx:
            validate_transition("completed", "pending")
        self.assertIn("already completed", str(ctx.exception))

    def test_unknown_status(self):
        with self.assertRaises(InvalidStatusTransition):
            validate_transition("pending", "shipped")


async def test_completion_books_commissions_once(db_session, make_partner, make_customer):
    ddp = await make_partner()
    customer = await make_customer(ddp=ddp, status="installation_scheduled", proposed_capacity="5")

    await customer_status.update_customer_status(db_session, customer, "completed", actor=ddp)
    assert customer.status == "completed"

    rows = (await db_session.execute(select(Commission))).scalars().all()
    assert [(r.partner_type, r.commission_amount) for r in rows] == [("ddp", 35_000)]


async def test_rejected_transition_changes_nothing(db_session, make_customer):
    customer = await make_customer(status="pending")
    with pytest.raises(InvalidStatusTransition):
        await customer_status.update_customer_status(db_session, customer, "completed")
    assert customer.status == "pending"


async def test_partner_referral_converts_at_threshold(db_session, make_partner, make_customer):
    referrer = await make_partner(role=Role.BDP)
    ddp = await make_partner()
    db_session.add(Referral(
        id="ref-partner",
        referrer_id=referrer.id,
        referred_type=ReferralType.PARTNER.value,
        referred_partner_id=ddp.id,
        referral_code="BDPXYZ",
        status=ReferralStatus.PENDING.value,
        reward_amount=0,
    ))
    for _ in range(PARTNER_REFERRAL_THRESHOLD - 1):
        await make_customer(ddp=ddp, status="completed", proposed_capacity="1")
    last = await make_customer(ddp=ddp, status="installation_scheduled", proposed_capacity="1")

    await customer_status.update_customer_status(db_session, last, "completed")

    referral = await db_session.get(Referral, "ref-partner")
    assert referral.status == "converted"
    assert referral.reward_amount == 2_000
    assert referral.converted_at is not None
