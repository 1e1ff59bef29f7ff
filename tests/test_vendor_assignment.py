"""Vendor registry, state prioritisation and assignment status flow."""

from types import SimpleNamespace

import pytest

from models.enums import VendorStatus, VendorType
from services import vendors
from services.errors import InvalidStatusTransition, NotFound, VendorNotAssignable


def test_prioritize_vendors_puts_same_state_first():
    pool = [
        SimpleNamespace(name="A", state="Bihar"),
        SimpleNamespace(name="B", state="odisha"),
        SimpleNamespace(name="C", state=None),
        SimpleNamespace(name="D", state="Odisha "),
    ]
    ordered = vendors.prioritize_vendors(pool, "Odisha")
    assert [v.name for v in ordered] == ["B", "D", "A", "C"]
    assert [v.name for v in vendors.prioritize_vendors(pool, None)] == ["A", "B", "C", "D"]


async def test_approved_vendors_for_customer(db_session, make_customer, make_vendor):
    customer = await make_customer(state="Bihar")
    await make_vendor(name="Odisha Meter", state="Odisha")
    await make_vendor(name="Bihar Meter", state="Bihar")
    await make_vendor(name="Pending Meter", state="Bihar", status=VendorStatus.PENDING)
    await make_vendor(VendorType.LOGISTIC, name="Trucks", state="Bihar")

    rows = await vendors.approved_vendors_for_customer(db_session, VendorType.DISCOM_NET_METERING.value, customer.id)
    assert [v.name for v in rows][0] == "Bihar Meter"
    assert {v.name for v in rows} == {"Odisha Meter", "Bihar Meter"}

    with pytest.raises(NotFound):
        await vendors.approved_vendors_for_customer(db_session, None, "cus-missing")


async def test_approval_assigns_vendor_code(db_session, make_vendor):
    vendor = await make_vendor(status=VendorStatus.PENDING)
    assert vendor.vendor_code is None
    updated = await vendors.update_vendor_status(db_session, vendor.id, "approved", notes="Docs checked")
    assert updated.vendor_code.startswith("VND-")
    assert updated.notes == "Docs checked"


class TestAssignments:
    async def test_create_defaults_role_to_vendor_type(self, db_session, make_customer, make_vendor):
        customer = await make_customer()
        vendor = await make_vendor(VendorType.ELECTRICAL)
        a = await vendors.create_assignment(db_session, customer.id, vendor.id, "installation")
        assert a.job_role == "electrical"
        assert a.status == "assigned"
        assert a.vendor.id == vendor.id

    async def test_unknown_stage_rejected(self, db_session, make_customer, make_vendor):
        customer = await make_customer()
        vendor = await make_vendor()
        with pytest.raises(VendorNotAssignable):
            await vendors.create_assignment(db_session, customer.id, vendor.id, "commissioning")

    async def test_unapproved_vendor_rejected(self, db_session, make_customer, make_vendor):
        customer = await make_customer()
        vendor = await make_vendor(status=VendorStatus.REJECTED)
        with pytest.raises(VendorNotAssignable):
            await vendors.create_assignment(db_session, customer.id, vendor.id, "installation")

    async def test_status_moves_forward_only(self, db_session, make_customer, make_vendor):
        customer = await make_customer()
        vendor = await make_vendor()
        a = await vendors.create_assignment(db_session, customer.id, vendor.id, "pre_installation")

        await vendors.update_assignment_status(db_session, a.id, "in_progress")
        with pytest.raises(InvalidStatusTransition):
            await vendors.update_assignment_status(db_session, a.id, "assigned")
        with pytest.raises(InvalidStatusTransition):
            await vendors.update_assignment_status(db_session, a.id, "in_progress")

        done = await vendors.update_assignment_status(db_session, a.id, "completed")
        assert done.completed_at is not None

    async def test_skip_to_completed_allowed(self, db_session, make_customer, make_vendor):
        customer = await make_customer()
        vendor = await make_vendor()
        a = await vendors.create_assignment(db_session, customer.id, vendor.id, "post_installation")
        done = await vendors.update_assignment_status(db_session, a.id, "completed")
        assert done.status == "completed"

    async def test_grouped_by_stage_and_deleted(self, db_session, make_customer, make_vendor):
        customer = await make_customer()
        vendor = await make_vendor(VendorType.SOLAR_INSTALLATION)
        first = await vendors.create_assignment(db_session, customer.id, vendor.id, "installation")
        await vendors.create_assignment(db_session, customer.id, vendor.id, "post_installation")

        grouped = vendors.group_by_stage(await vendors.list_assignments(db_session, customer.id))
        assert [len(grouped[s]) for s in ("pre_installation", "installation", "post_installation")] == [0, 1, 1]

        await vendors.delete_assignment(db_session, first.id)
        assert len(await vendors.list_assignments(db_session, customer.id)) == 1
        with pytest.raises(NotFound):
            await vendors.delete_assignment(db_session, first.id)
