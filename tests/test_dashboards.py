"""Role menus and per-role dashboard aggregates."""

import unittest

from models.enums import Role
from services import dashboards
from services.dashboards import build_menu


class TestBuildMenu(unittest.TestCase):
    def test_every_role_has_a_menu_with_calculator(self):
        for role in Role:
            with self.subTest(role=role):
                titles = [item["title"] for item in build_menu(role.value)]
                self.assertTrue(titles)
                self.assertEqual(titles[0], "Dashboard")
                self.assertIn("Subsidy Calculator", titles)

    def test_role_specific_entries(self):
        self.assertIn("Vendors", [i["title"] for i in build_menu("admin")])
        self.assertIn("Add Partner", [i["title"] for i in build_menu("bdp")])
        self.assertIn("Add Customer", [i["title"] for i in build_menu("ddp")])
        self.assertIn("My Referrals", [i["title"] for i in build_menu("customer_partner")])

    def test_menu_is_a_copy(self):
        build_menu("ddp")[0]["title"] = "Changed"
        self.assertEqual(build_menu("ddp")[0]["title"], "Dashboard")

    def test_unknown_role_raises(self):
        with self.assertRaises(ValueError):
            build_menu("superuser")


async def test_bdp_and_ddp_stats(db_session, make_partner, make_customer):
    bdp = await make_partner(role=Role.BDP)
    ddp = await make_partner(parent_id=bdp.id)
    other_ddp = await make_partner()
    await make_customer(ddp=ddp, status="pending")
    await make_customer(ddp=ddp, status="approved")
    await make_customer(ddp=ddp, status="completed")
    await make_customer(ddp=other_ddp, status="completed")

    ddp_stats = await dashboards.ddp_stats(db_session, ddp.id)
    assert ddp_stats == {
        "totalCustomers": 3,
        "pendingApplications": 1,
        "approvedApplications": 1,
        "completedInstallations": 1,
    }

    bdp_stats = await dashboards.bdp_stats(db_session, bdp.id)
    assert bdp_stats["totalPartners"] == 1
    assert bdp_stats["totalCustomers"] == 3
    assert bdp_stats["completedInstallations"] == 1

    admin = await dashboards.admin_stats(db_session)
    assert admin["totalCustomers"] == 4
    assert admin["totalDDPs"] == 2
    assert admin["completedInstallations"] == 2


async def test_customer_partner_stats(db_session, make_partner, make_customer):
    own = await make_customer(status="completed")
    cp = await make_partner(role=Role.CUSTOMER_PARTNER, linked_customer_id=own.id, referral_code="CPOWN0001")
    await make_customer(referrer_customer_id=own.id, status="completed", proposed_capacity="3")
    await make_customer(referrer_customer_id=own.id, status="completed", proposed_capacity="2")
    await make_customer(referrer_customer_id=own.id, status="pending")

    stats = await dashboards.customer_partner_stats(db_session, cp)
    assert stats["totalReferrals"] == 3
    assert stats["completedReferrals"] == 2
    assert stats["pendingReferrals"] == 1
    assert stats["eligibleReferrals"] == 1
    assert stats["referralCode"] == "CPOWN0001"
