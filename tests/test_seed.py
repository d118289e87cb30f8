from activities import list_activities
from seed import seed


def test_seed_is_idempotent(db):
    seed(db)
    seed(db)
    names = [a.name for a in list_activities(db)]
    assert names == ["Water plants", "Run", "Practice guitar"]
