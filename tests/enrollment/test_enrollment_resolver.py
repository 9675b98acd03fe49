from datetime import date

from tests.fakes import World


def _setup():
    w = World()
    teacher = w.teacher()
    class_id = w.classes.create(teacher_id=teacher, class_name="Math A")
    return w, teacher, class_id


def test_schedules_imply_enrollment():
    w, teacher, class_id = _setup()
    s1 = w.students.create(teacher_id=teacher, student_name="S1")
    w.schedules.add(class_id=class_id, student_id=s1, lesson_date=date(2025, 7, 3))
    w.schedules.add(class_id=class_id, student_id=s1, lesson_date=date(2025, 7, 10))

    assert w.container.enrollment.enrolled_student_ids(teacher, class_id) == {s1}


def test_student_with_zero_lessons_is_enrolled_explicitly():
    w, teacher, class_id = _setup()
    s1 = w.students.create(teacher_id=teacher, student_name="S1")
    assert w.container.enrollment.enrolled_student_ids(teacher, class_id) == set()

    w.container.enrollment.enroll(teacher, class_id, s1, today=date(2025, 7, 1))

    assert w.container.enrollment.enrolled_student_ids(teacher, class_id) == {s1}
    assert w.container.enrollment.student_counts([class_id]) == {class_id: 1}


def test_union_counts_each_student_once():
    w, teacher, class_id = _setup()
    s1 = w.students.create(teacher_id=teacher, student_name="Zed")
    s2 = w.students.create(teacher_id=teacher, student_name="Amy")
    w.container.enrollment.enroll(teacher, class_id, s1)
    w.schedules.add(class_id=class_id, student_id=s1, lesson_date=date(2025, 7, 3))
    w.schedules.add(class_id=class_id, student_id=s2, lesson_date=date(2025, 7, 3))

    students = w.container.enrollment.enrolled_students(teacher, class_id)

    assert [s.student_name for s in students] == ["Amy", "Zed"]
    assert w.container.enrollment.student_counts([class_id]) == {class_id: 2}


def test_unenroll_removes_membership_and_schedules():
    w, teacher, class_id = _setup()
    s1 = w.students.create(teacher_id=teacher, student_name="S1")
    w.container.enrollment.enroll(teacher, class_id, s1)
    w.schedules.add(class_id=class_id, student_id=s1, lesson_date=date(2025, 7, 3))

    w.container.enrollment.unenroll(teacher, class_id, s1)

    assert w.container.enrollment.enrolled_student_ids(teacher, class_id) == set()
    assert w.schedules.rows == {}


def test_class_list_carries_counts():
    w, teacher, class_id = _setup()
    empty_id = w.classes.create(teacher_id=teacher, class_name="Art")
    s1 = w.students.create(teacher_id=teacher, student_name="S1")
    w.schedules.add(class_id=class_id, student_id=s1, lesson_date=date(2025, 7, 3))

    summaries = w.container.class_service.list_with_counts(teacher)

    assert [(s.teaching_class.class_id, s.student_count) for s in summaries] == [(empty_id, 0), (class_id, 1)]
