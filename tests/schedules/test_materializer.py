from datetime import date

import pytest

from src.attendance_manager.attendance_manager.core.exceptions import NotFoundError
from tests.fakes import World


def _setup():
    w = World()
    teacher = w.teacher()
    class_id = w.classes.create(teacher_id=teacher, class_name="Math A", hourly_rate_cents=2000)
    student_id = w.students.create(teacher_id=teacher, student_name="S1")
    return w, teacher, class_id, student_id


def test_materialize_twice_leaves_one_row_per_date():
    w, teacher, class_id, student_id = _setup()
    dates = [date(2025, 7, 10), date(2025, 7, 3)]

    first = w.container.materializer.materialize(teacher, class_id, student_id, dates)
    second = w.container.materializer.materialize(teacher, class_id, student_id, dates)

    assert first == second
    assert len(w.schedules.rows) == 2
    assert [w.schedules.rows[i].lesson_date for i in first] == [date(2025, 7, 3), date(2025, 7, 10)]


def test_duplicate_dates_in_one_call_collapse():
    w, teacher, class_id, student_id = _setup()
    ids = w.container.materializer.materialize(
        teacher, class_id, student_id, [date(2025, 7, 3), date(2025, 7, 3)]
    )
    assert len(ids) == 1
    assert len(w.schedules.rows) == 1


def test_dates_outside_any_month_are_taken_as_given():
    w, teacher, class_id, student_id = _setup()
    w.container.materializer.materialize(teacher, class_id, student_id, [date(2025, 6, 30), date(2025, 8, 1)])
    assert len(w.schedules.rows) == 2
    assert w.container.materializer.planned_dates(teacher, class_id, date(2025, 7, 1)) == []


def test_foreign_class_is_not_found():
    w, teacher, class_id, student_id = _setup()
    other = w.teacher(email="other@example.com")
    with pytest.raises(NotFoundError):
        w.container.materializer.materialize(other, class_id, student_id, [date(2025, 7, 3)])
    assert w.schedules.rows == {}


def test_planned_dates_are_distinct_and_sorted():
    w, teacher, class_id, student_id = _setup()
    s2 = w.students.create(teacher_id=teacher, student_name="S2")
    w.container.materializer.materialize(teacher, class_id, student_id, [date(2025, 7, 10), date(2025, 7, 3)])
    w.container.materializer.materialize(teacher, class_id, s2, [date(2025, 7, 3)])

    assert w.container.materializer.planned_dates(teacher, class_id, date(2025, 7, 1)) == [
        date(2025, 7, 3),
        date(2025, 7, 10),
    ]
