"""Example: use the data layer directly (no Flask).

Two tabs share one storage origin; a change made in the first shows up in the
second after its synchronizer reloads.
"""

import asyncio
import importlib
import logging

from config import get_settings_module

from src.attendance_dashboard.attendance_dashboard.container import build_container
from src.attendance_dashboard.attendance_dashboard.employees.model import NewEmployee


async def main():
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"))

    container = build_container(hash_method=getattr(settings, "PASSWORD_HASH_METHOD", "scrypt"))
    first, second = container.service, container.open_tab()

    second.on("dataSync", lambda payload: print("second tab reloaded:", payload))
    await first.add_employee(NewEmployee(full_name="Ana Cruz", department="Operations", hourly_rate=17.5))

    print([e.full_name for e in await second.get_employees()])
    print((await second.get_attendance_stats()).to_dict()["today"])
    print((await second.get_next_payday()).to_dict())


if __name__ == "__main__":
    asyncio.run(main())
