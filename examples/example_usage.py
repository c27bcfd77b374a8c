"""Example: drive the service layer directly (no Flask).

Controllers are a thin layer; the business rules live in the services.
"""

import importlib
from datetime import date

from config import get_settings_module

from time_reporting.container import build_container
from time_reporting.time_logs.model import AllocationDraft


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, isolation_level=settings.DB_ISOLATION_LEVEL)

    result = container.combined_service.create_combined(
        user_id=1,
        work_date=date.today(),
        start_time="09:00",
        end_time="17:00",
        time_logs=[
            AllocationDraft(task_id=1, location="office", duration=300, description="Tickets"),
            AllocationDraft(task_id=3, location="client", start_time="14:00", end_time="17:00"),
        ],
    )
    print(result.to_dict())


if __name__ == "__main__":
    main()
