"""Example: using the service layer directly (no Flask).

Controllers stay thin; the payroll rules live in the services.
"""

import importlib

from config import get_settings_module

from src.backoffice.backoffice.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    print("overtime 06-2025:", container.overtime_aggregator.sum_overtime_hours(1, "06-2025"))
    page = container.payroll_service.list_payrolls(container.payroll_service.build_filters(period="06-2025"))
    for row in page.rows:
        print(row.name, row.record.period, row.total_earning, row.record.net)


if __name__ == "__main__":
    main()
