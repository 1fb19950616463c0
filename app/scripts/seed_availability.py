# ===== app/scripts/seed_availability.py =====
"""Open the next few weeks of weekdays 09:00-17:00 with a lunch block, for local development"""
from datetime import timedelta
from app.config.database import SessionLocal
from app.services.availability.availability_service import AvailabilityService
from app.services.scheduling.intervals import TimeRange
from app.utils.clock import business_today

WEEKS = 3
WORKING_DAY = TimeRange.parse("09:00", "17:00")
LUNCH = TimeRange.parse("13:00", "13:30")


def seed_availability():
    db = SessionLocal()

    try:
        today = business_today()
        days = [
            today + timedelta(days=offset)
            for offset in range(WEEKS * 7)
            if (today + timedelta(days=offset)).weekday() < 5  # 0=Monday ... 4=Friday
        ]

        AvailabilityService.set_open_hours_bulk(db, days, WORKING_DAY)
        for day in days:
            AvailabilityService.add_block(db, day, LUNCH, reason="Lunch")

        print(f"✅ Opened {len(days)} days from {days[0]} to {days[-1]}")

    except Exception as e:
        db.rollback()
        print("❌ Error seeding availability:", e)
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed_availability()
