from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from src.payroll_system.payroll_system.core.enums import ComponentType, PayrollStatus
from src.payroll_system.payroll_system.core.exceptions import ForeignKeyError, NotFoundError, ValidationError
from src.payroll_system.payroll_system.payroll.model import PayrollChanges, compute_total
from src.payroll_system.payroll_system.payroll.service import PayrollService


@pytest.fixture
def svc(payroll_repo, staff):
    return PayrollService(payroll_repo, staff)


@pytest.fixture
def may_payroll(svc, make_detail):
    return svc.create_payroll(
        staff_id=1,
        period_start=date(2024, 5, 1),
        period_end=date(2024, 5, 31),
        details=[make_detail("Basic", "1000"), make_detail("Tax", "200", "deduction")],
    )


def test_create_payroll_derives_total(may_payroll):
    assert may_payroll.total_salary == Decimal("800.00")
    assert may_payroll.status == PayrollStatus.DRAFT
    assert may_payroll.staff_name == "Alice Tran"
    assert may_payroll.component_count == 2
    # deductions are listed before earnings
    assert [d.component_name for d in may_payroll.details] == ["Tax", "Basic"]

    body = may_payroll.to_dict(include_details=True)
    assert body["total_salary"] == "800.00"
    assert body["period_start"] == "2024-05-01"
    assert body["details"][0]["component_type"] == "deduction"


def test_create_payroll_for_unknown_staff(svc, payroll_repo, make_detail):
    with pytest.raises(ForeignKeyError):
        svc.create_payroll(
            staff_id=42,
            period_start=date(2024, 5, 1),
            period_end=date(2024, 5, 31),
            details=[make_detail("Basic", "1000")],
        )

    assert payroll_repo.headers == {}


def test_create_payroll_rejects_inverted_period(svc):
    with pytest.raises(ValidationError):
        svc.create_payroll(staff_id=1, period_start=date(2024, 5, 31), period_end=date(2024, 5, 1))


def test_update_with_empty_details_clears_items(svc, payroll_repo, may_payroll):
    updated = svc.update_payroll(may_payroll.payroll_id, details=[])

    assert updated.total_salary == Decimal("0.00")
    assert updated.details == ()
    assert payroll_repo.list_details(may_payroll.payroll_id) == []


def test_update_without_details_keeps_items_and_total(svc, may_payroll):
    updated = svc.update_payroll(
        may_payroll.payroll_id,
        PayrollChanges(status=PayrollStatus.CONFIRMED, period_end=date(2024, 5, 30)),
    )

    assert updated.status == PayrollStatus.CONFIRMED
    assert updated.period_end == date(2024, 5, 30)
    assert updated.total_salary == Decimal("800.00")
    assert len(updated.details) == 2


def test_fields_only_update_keeps_items_replaced_before_the_lock(svc, payroll_repo, may_payroll, make_detail, monkeypatch):
    update_with_details = payroll_repo.update_with_details

    def replaced_first(payroll_id, merge, details=None, total_salary=None):
        payroll_repo.replace_details(payroll_id, [make_detail("Basic", "5000")], Decimal("5000.00"))
        return update_with_details(payroll_id, merge, details, total_salary)

    monkeypatch.setattr(payroll_repo, "update_with_details", replaced_first)

    updated = svc.update_payroll(may_payroll.payroll_id, PayrollChanges(period_end=date(2024, 5, 30)))

    assert updated.period_end == date(2024, 5, 30)
    assert updated.total_salary == Decimal("5000.00")
    assert updated.total_salary == compute_total(updated.details)


def test_update_rejects_inverted_period_against_stored_start(svc, may_payroll):
    with pytest.raises(ValidationError):
        svc.update_payroll(may_payroll.payroll_id, PayrollChanges(period_end=date(2024, 4, 30)))

    assert svc.get_payroll(may_payroll.payroll_id).period_end == date(2024, 5, 31)


def test_update_validates_new_staff_and_presence(svc, may_payroll):
    with pytest.raises(ForeignKeyError):
        svc.update_payroll(may_payroll.payroll_id, PayrollChanges(staff_id=77))
    with pytest.raises(NotFoundError):
        svc.update_payroll(999, PayrollChanges(status=PayrollStatus.PAID))


def test_replace_details_recomputes_total(svc, may_payroll, make_detail):
    updated = svc.replace_details(
        may_payroll.payroll_id,
        [make_detail("Basic", "1500"), make_detail("Bonus", "250.50"), make_detail("Pension", "75", "deduction")],
    )

    assert updated.total_salary == Decimal("1675.50")
    assert [d.component_name for d in updated.details] == ["Pension", "Basic", "Bonus"]


def test_replace_details_on_missing_payroll(svc):
    with pytest.raises(NotFoundError):
        svc.replace_details(999, [])


def test_update_status_allows_any_transition(svc, may_payroll):
    paid = svc.update_status(may_payroll.payroll_id, "paid")
    assert paid.status == PayrollStatus.PAID

    back = svc.update_status(may_payroll.payroll_id, PayrollStatus.DRAFT)
    assert back.status == PayrollStatus.DRAFT

    with pytest.raises(ValidationError):
        svc.update_status(may_payroll.payroll_id, "approved")
    with pytest.raises(NotFoundError):
        svc.update_status(999, "paid")


def test_delete_payroll_removes_header_and_items(svc, payroll_repo, make_detail):
    payroll = svc.create_payroll(
        staff_id=1,
        period_start=date(2024, 5, 1),
        period_end=date(2024, 5, 31),
        details=[make_detail("Basic", "1000"), make_detail("Bonus", "150"), make_detail("Tax", "200", "deduction")],
    )
    assert len(payroll_repo.details[payroll.payroll_id]) == 3

    svc.delete_payroll(payroll.payroll_id)

    assert payroll_repo.details == {}
    assert payroll_repo.headers == {}
    with pytest.raises(NotFoundError):
        svc.get_payroll(payroll.payroll_id)
    with pytest.raises(NotFoundError):
        svc.delete_payroll(payroll.payroll_id)


def test_listing(svc, may_payroll):
    june = svc.create_payroll(staff_id=1, period_start=date(2024, 6, 1), period_end=date(2024, 6, 30))

    listed = svc.list_payrolls()
    assert [p.payroll_id for p in listed] == [june.payroll_id, may_payroll.payroll_id]
    assert listed[1].component_count == 2

    assert [p.payroll_id for p in svc.list_payrolls(status=PayrollStatus.DRAFT, staff_id=2)] == []
    assert [p.period_start.month for p in svc.list_by_staff(1)] == [6, 5]
    with pytest.raises(NotFoundError):
        svc.list_by_staff(2)


def test_parse_details():
    parsed = PayrollService.parse_details(
        [{"component_name": " Basic ", "amount": "1000.005", "component_type": "earning"}]
    )
    assert parsed[0].component_name == "Basic"
    assert parsed[0].component_type == ComponentType.EARNING

    assert PayrollService.parse_details(None) == []

    bad_payloads = [
        {"details": "x"},
        [{"component_name": "", "amount": 1, "component_type": "earning"}],
        [{"component_name": "A" * 101, "amount": 1, "component_type": "earning"}],
        [{"component_name": "Tax", "amount": -5, "component_type": "deduction"}],
        [{"component_name": "Tax", "amount": "abc", "component_type": "deduction"}],
        [{"component_name": "Tax", "amount": 5, "component_type": "bonus"}],
        ["Tax"],
    ]
    for payload in bad_payloads:
        with pytest.raises(ValidationError):
            PayrollService.parse_details(payload)
