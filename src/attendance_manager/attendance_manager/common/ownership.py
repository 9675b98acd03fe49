"""Per-teacher row ownership checks.

Schedules, attendance and line items carry no teacher id of their own; they
are reached through a class, student or invoice that does. Services call these
guards before touching such rows.
"""

from __future__ import annotations

from ..classes.model import TeachingClass
from ..classes.repository import ClassRepository
from ..core.exceptions import NotFoundError
from ..students.model import Student
from ..students.repository import StudentRepository


def require_class(classes: ClassRepository, teacher_id: int, class_id: int) -> TeachingClass:
    cls = classes.get(teacher_id=int(teacher_id), class_id=int(class_id))
    if not cls:
        raise NotFoundError("Class not found")
    return cls


def require_student(students: StudentRepository, teacher_id: int, student_id: int) -> Student:
    student = students.get(teacher_id=int(teacher_id), student_id=int(student_id))
    if not student:
        raise NotFoundError("Student not found")
    return student
