"""Example: drive the service layer directly (no Flask).

Controllers are thin; the check-in rules live in AttendanceService.
"""

from datetime import datetime, timedelta

from office_attendance.container import build_memory_container
from office_attendance.core.exceptions import OutOfRangeError
from office_attendance.offices.model import Office


def main():
    head_office = Office(
        office_id=1,
        name="Head Office",
        address="Jl. Jend. Sudirman No. 1, Jakarta",
        latitude=-6.2088,
        longitude=106.8456,
        radius_meters=100,
    )
    container = build_memory_container(offices=[head_office])
    service = container.attendance_service

    start = datetime(2026, 3, 2, 8, 0)
    try:
        service.check_in(7, 1, -6.3000, 106.9000, now=start)
    except OutOfRangeError as e:
        print(e)

    session = service.check_in(7, 1, -6.2089, 106.8457, "Morning shift", now=start)
    print("checked in:", session)

    session = service.check_out(7, -6.2088, 106.8456, "Done", now=start + timedelta(hours=8, minutes=5))
    print("worked minutes:", session.work_duration_minutes)

    print(container.report_service.build_history(employee_id=7, month=start.date()).statistics)


if __name__ == "__main__":
    main()
