from datetime import date

from src.attendance_manager.attendance_manager.invoicing.calculator.standard_calculator import StandardBillingCalculator
from src.attendance_manager.attendance_manager.schedules.model import LessonSchedule


def _lesson(day: int, rate=None) -> LessonSchedule:
    return LessonSchedule(
        schedule_id=day, class_id=1, student_id=1, lesson_date=date(2025, 7, day), hourly_rate_cents=rate
    )


def test_manual_rate_wins_when_positive():
    calc = StandardBillingCalculator()
    assert calc.unit_rate(manual_cents=3000, schedules=[_lesson(3, 2500)], class_rate_cents=2000) == 3000


def test_first_positive_lesson_rate_in_date_order():
    calc = StandardBillingCalculator()
    lessons = [_lesson(3, None), _lesson(10, 0), _lesson(17, 2500), _lesson(24, 2700)]
    assert calc.unit_rate(manual_cents=None, schedules=lessons, class_rate_cents=2000) == 2500


def test_class_rate_when_no_lesson_rate():
    calc = StandardBillingCalculator()
    assert calc.unit_rate(manual_cents=0, schedules=[_lesson(3)], class_rate_cents=2000) == 2000


def test_zero_when_nothing_is_priced():
    calc = StandardBillingCalculator()
    assert calc.unit_rate(manual_cents=-100, schedules=[], class_rate_cents=None) == 0


def test_subtotal_is_attended_times_unit():
    assert StandardBillingCalculator().subtotal(attended=3, unit_cents=2000) == 6000
