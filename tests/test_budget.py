from datetime import date

import pytest

from tokenwatch.core import ComputeBudget


class Calendar:
    def __init__(self, day):
        self.current = date(2026, 3, day)

    def __call__(self):
        return self.current

    def set_day(self, day):
        self.current = self.current.replace(day=day)


def test_add_units_accumulates():
    budget = ComputeBudget(capacity=100)
    budget.add_units(20)
    budget.add_units(19)

    assert budget.used == 39
    assert budget.remaining == 61
    assert not budget.is_exhausted


def test_exhausted_at_capacity():
    budget = ComputeBudget(capacity=40)
    budget.add_units(40)

    assert budget.is_exhausted
    assert budget.remaining == 0


def test_negative_units_rejected():
    with pytest.raises(ValueError):
        ComputeBudget().add_units(-1)


def test_resets_on_first_of_month():
    calendar = Calendar(1)
    budget = ComputeBudget(capacity=1000, today=calendar)
    budget.add_units(500)

    assert budget.daily_tick() is True
    assert budget.used == 0
    assert budget.days_since_reset == 0


def test_27_ticks_without_day_one_never_reset():
    calendar = Calendar(2)
    budget = ComputeBudget(capacity=1000, today=calendar)
    budget.add_units(500)

    for _ in range(27):
        assert budget.daily_tick() is False

    assert budget.used == 500
    assert budget.days_since_reset == 27


def test_day_two_resets_after_28_ticks():
    calendar = Calendar(3)
    budget = ComputeBudget(capacity=1000, today=calendar)
    budget.add_units(500)

    for _ in range(28):
        budget.daily_tick()

    calendar.set_day(2)
    assert budget.daily_tick() is True
    assert budget.used == 0
    assert budget.days_since_reset == 0


def test_day_two_does_not_reset_twice_in_one_month():
    calendar = Calendar(1)
    budget = ComputeBudget(capacity=1000, today=calendar)

    assert budget.daily_tick() is True
    budget.add_units(10)
    calendar.set_day(2)
    assert budget.daily_tick() is False
    assert budget.used == 10


def test_default_capacity_from_config():
    assert ComputeBudget().capacity == 300_000_000
