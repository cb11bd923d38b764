"""Example: drive the service layer directly (no Flask).

Builds the container from the active settings module, creates a payroll with
line items and prints the composed payslip.
"""

import importlib
from datetime import date

from config import get_settings_module

from src.payroll_system.payroll_system.container import build_container
from src.payroll_system.payroll_system.payroll.service import PayrollService


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, company=settings.PAYSLIP_COMPANY)

    details = PayrollService.parse_details(
        [
            {"component_name": "Basic", "amount": "4500.00", "component_type": "earning"},
            {"component_name": "Pension", "amount": "200.00", "component_type": "deduction"},
        ]
    )
    payroll = container.payroll_service.create_payroll(
        staff_id=1,
        period_start=date(2024, 6, 1),
        period_end=date(2024, 6, 30),
        details=details,
    )
    print(payroll.to_dict(include_details=True))

    payslip = container.payslip_service.compose_payslip(payroll.payroll_id)
    print(payslip.net_pay, payslip.amount_in_words)


if __name__ == "__main__":
    main()
