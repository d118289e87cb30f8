from db import init_db, make_engine, make_session_factory
from activities import create_activity_with_rhythm, list_activities
from rhythms import CalendarRhythm, RecurringRhythm, TrailingRhythm


def seed(db):
    if list_activities(db):
        return
    create_activity_with_rhythm(db, "Water plants", "task", RecurringRhythm(every=5, unit="days"), 1, "instances")
    create_activity_with_rhythm(db, "Run", "pursuit", TrailingRhythm(count=7, unit="days"), 3, "instances")
    create_activity_with_rhythm(db, "Practice guitar", "pursuit", CalendarRhythm(period="weekly"), 150, "duration")


if __name__ == "__main__":
    engine = make_engine()
    init_db(engine)
    with make_session_factory(engine)() as db:
        seed(db)
