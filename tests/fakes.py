"""In-memory stores shared by the service and HTTP tests.

Each fake mirrors its MySQL repository closely enough for the services:
teacher scoping, ordering and the cascades the schema declares.
"""

from __future__ import annotations

import copy
from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from src.attendance_manager.attendance_manager.attendance.model import AttendanceRecord
from src.attendance_manager.attendance_manager.classes.model import TeachingClass
from src.attendance_manager.attendance_manager.container import Container, wire
from src.attendance_manager.attendance_manager.core.enums import InvoiceStatus, PaymentMethod, PaymentStatus
from src.attendance_manager.attendance_manager.core.exceptions import StoreError
from src.attendance_manager.attendance_manager.invoicing.model import Invoice, InvoiceLineItem
from src.attendance_manager.attendance_manager.payments.model import Payment
from src.attendance_manager.attendance_manager.profiles.model import Profile
from src.attendance_manager.attendance_manager.schedules.model import LessonSchedule
from src.attendance_manager.attendance_manager.students.model import Student


class _Table:
    def __init__(self):
        self.rows: dict = {}
        self._next_id = 1

    def _new_id(self) -> int:
        rid = self._next_id
        self._next_id += 1
        return rid


class InMemoryProfiles(_Table):
    def get_by_id(self, profile_id: int) -> Optional[Profile]:
        return self.rows.get(int(profile_id))

    def get_by_email(self, email: str) -> Optional[Profile]:
        return next((p for p in self.rows.values() if p.email == email), None)

    def create(self, *, email: str, password_hash: str, full_name: Optional[str]) -> int:
        pid = self._new_id()
        self.rows[pid] = Profile(profile_id=pid, email=email, password_hash=password_hash, full_name=full_name)
        return pid

    def update(self, *, profile_id: int, full_name: Optional[str], school_name: Optional[str]) -> bool:
        p = self.rows.get(int(profile_id))
        if not p:
            return False
        self.rows[p.profile_id] = replace(p, full_name=full_name, school_name=school_name)
        return True


class InMemoryClasses(_Table):
    def list_for_teacher(self, teacher_id: int):
        return sorted((c for c in self.rows.values() if c.teacher_id == int(teacher_id)), key=lambda c: c.class_name)

    def get(self, *, teacher_id: int, class_id: int) -> Optional[TeachingClass]:
        c = self.rows.get(int(class_id))
        return c if c and c.teacher_id == int(teacher_id) else None

    def create(self, *, teacher_id: int, class_name: str, subject=None, hourly_rate_cents=None) -> int:
        cid = self._new_id()
        self.rows[cid] = TeachingClass(
            class_id=cid,
            teacher_id=int(teacher_id),
            class_name=class_name,
            subject=subject,
            hourly_rate_cents=hourly_rate_cents,
        )
        return cid

    def update(self, *, teacher_id: int, class_id: int, class_name: str, subject, hourly_rate_cents) -> bool:
        c = self.get(teacher_id=teacher_id, class_id=class_id)
        if not c:
            return False
        self.rows[c.class_id] = replace(c, class_name=class_name, subject=subject, hourly_rate_cents=hourly_rate_cents)
        return True

    def delete(self, *, teacher_id: int, class_id: int) -> bool:
        if not self.get(teacher_id=teacher_id, class_id=class_id):
            return False
        del self.rows[int(class_id)]
        return True


class InMemoryStudents(_Table):
    def list_for_teacher(self, teacher_id: int):
        return sorted((s for s in self.rows.values() if s.teacher_id == int(teacher_id)), key=lambda s: s.student_name)

    def list_by_ids(self, *, teacher_id: int, student_ids: Iterable[int]):
        wanted = {int(i) for i in student_ids}
        return [s for s in self.list_for_teacher(teacher_id) if s.student_id in wanted]

    def get(self, *, teacher_id: int, student_id: int) -> Optional[Student]:
        s = self.rows.get(int(student_id))
        return s if s and s.teacher_id == int(teacher_id) else None

    def create(
        self,
        *,
        teacher_id: int,
        student_name: str,
        parent_email=None,
        payment_status=PaymentStatus.PENDING,
        invoice_amount_cents=None,
        last_payment_date=None,
    ) -> int:
        sid = self._new_id()
        self.rows[sid] = Student(
            student_id=sid,
            teacher_id=int(teacher_id),
            student_name=student_name,
            parent_email=parent_email,
            payment_status=payment_status,
            invoice_amount_cents=invoice_amount_cents,
            last_payment_date=last_payment_date,
        )
        return sid

    def update(self, *, teacher_id: int, student_id: int, **fields) -> bool:
        s = self.get(teacher_id=teacher_id, student_id=student_id)
        if not s:
            return False
        self.rows[s.student_id] = replace(s, **fields)
        return True

    def delete(self, *, teacher_id: int, student_id: int) -> bool:
        if not self.get(teacher_id=teacher_id, student_id=student_id):
            return False
        del self.rows[int(student_id)]
        return True


class InMemoryEnrollments(_Table):
    def enroll(self, *, class_id: int, student_id: int, joined_on: date) -> None:
        self.rows.setdefault((int(class_id), int(student_id)), joined_on)

    def unenroll(self, *, class_id: int, student_id: int) -> bool:
        return self.rows.pop((int(class_id), int(student_id)), None) is not None

    def student_ids_by_class(self, *, class_ids: Iterable[int]):
        ids = {int(i) for i in class_ids}
        out: dict[int, set[int]] = {i: set() for i in ids}
        for cid, sid in self.rows:
            if cid in ids:
                out[cid].add(sid)
        return out


class InMemorySchedules(_Table):
    def __init__(self):
        super().__init__()
        self.ensure_calls = 0

    def get_by_id(self, schedule_id: int) -> Optional[LessonSchedule]:
        return self.rows.get(int(schedule_id))

    def _find(self, *, class_id: int, student_id: int, lesson_date: date) -> Optional[LessonSchedule]:
        return next(
            (
                s
                for s in self.rows.values()
                if (s.class_id, s.student_id, s.lesson_date) == (int(class_id), int(student_id), lesson_date)
            ),
            None,
        )

    def ensure(self, *, class_id: int, student_id: int, lesson_date: date) -> int:
        self.ensure_calls += 1
        existing = self._find(class_id=class_id, student_id=student_id, lesson_date=lesson_date)
        if existing:
            return existing.schedule_id
        return self.add(class_id=class_id, student_id=student_id, lesson_date=lesson_date)

    def add(self, *, class_id: int, student_id: int, lesson_date: date, hourly_rate_cents: Optional[int] = None) -> int:
        """Test helper: insert a row directly, optionally with a per-lesson rate."""
        sid = self._new_id()
        self.rows[sid] = LessonSchedule(
            schedule_id=sid,
            class_id=int(class_id),
            student_id=int(student_id),
            lesson_date=lesson_date,
            duration_minutes=60,
            hourly_rate_cents=hourly_rate_cents,
        )
        return sid

    def _in_range(self, start: date, end: date, **match):
        rows = [
            s
            for s in self.rows.values()
            if start <= s.lesson_date < end and all(getattr(s, k) == int(v) for k, v in match.items())
        ]
        return sorted(rows, key=lambda s: (s.lesson_date, s.schedule_id))

    def list_for_class(self, *, class_id: int, start: date, end: date):
        return self._in_range(start, end, class_id=class_id)

    def list_for_student(self, *, class_id: int, student_id: int, start: date, end: date):
        return self._in_range(start, end, class_id=class_id, student_id=student_id)

    def student_ids_by_class(self, *, class_ids: Iterable[int]):
        ids = {int(i) for i in class_ids}
        out: dict[int, set[int]] = {i: set() for i in ids}
        for s in self.rows.values():
            if s.class_id in ids:
                out[s.class_id].add(s.student_id)
        return out

    def delete_for_student(self, *, class_id: int, student_id: int) -> int:
        doomed = [k for k, s in self.rows.items() if (s.class_id, s.student_id) == (int(class_id), int(student_id))]
        for k in doomed:
            del self.rows[k]
        return len(doomed)


class InMemoryAttendance(_Table):
    def __init__(self, *, fail_after: Optional[int] = None):
        super().__init__()
        self.fail_after = fail_after
        self.writes = 0

    def _count_write(self) -> None:
        self.writes += 1
        if self.fail_after is not None and self.writes > self.fail_after:
            raise StoreError("attendance write rejected")

    def find(self, *, lesson_schedule_id: int, student_id: int) -> Optional[AttendanceRecord]:
        return next(
            (
                r
                for r in self.rows.values()
                if (r.lesson_schedule_id, r.student_id) == (int(lesson_schedule_id), int(student_id))
            ),
            None,
        )

    def create(self, *, lesson_schedule_id, student_id, attended, recorded_at, recorded_by, notes=None) -> int:
        self._count_write()
        if self.find(lesson_schedule_id=lesson_schedule_id, student_id=student_id):
            raise StoreError("Duplicate entry for key 'uix_attendance_schedule_student'")
        rid = self._new_id()
        self.rows[rid] = AttendanceRecord(
            record_id=rid,
            lesson_schedule_id=int(lesson_schedule_id),
            student_id=int(student_id),
            attended=bool(attended),
            notes=notes,
            recorded_at=recorded_at,
            recorded_by=int(recorded_by),
        )
        return rid

    def update(self, *, record_id: int, attended: bool, recorded_at: datetime, recorded_by: int) -> bool:
        self._count_write()
        r = self.rows.get(int(record_id))
        if not r:
            return False
        self.rows[r.record_id] = replace(r, attended=bool(attended), recorded_at=recorded_at, recorded_by=recorded_by)
        return True

    def list_for_schedules(self, *, schedule_ids: Iterable[int], student_id: Optional[int] = None):
        ids = {int(i) for i in schedule_ids}
        return [
            r
            for r in self.rows.values()
            if r.lesson_schedule_id in ids and (student_id is None or r.student_id == int(student_id))
        ]


class InMemoryPayments(_Table):
    _EPOCH = datetime(2025, 1, 1)

    def insert(self, *, invoice_id, student_id, payment_reference, amount_cents, payment_date, payment_method, notes=None) -> int:
        if any(p.payment_reference == payment_reference for p in self.rows.values()):
            raise StoreError("Duplicate entry for key 'payment_reference'")
        pid = self._new_id()
        self.rows[pid] = Payment(
            payment_id=pid,
            payment_reference=payment_reference,
            invoice_id=int(invoice_id),
            student_id=int(student_id),
            amount_cents=int(amount_cents),
            payment_date=payment_date,
            payment_method=PaymentMethod(payment_method),
            notes=notes,
            # strictly increasing, like DATETIME(6) on successive inserts
            created_at=self._EPOCH + timedelta(microseconds=pid),
        )
        return pid

    def latest_for_invoice(self, invoice_id: int) -> Optional[Payment]:
        rows = [p for p in self.rows.values() if p.invoice_id == int(invoice_id)]
        if not rows:
            return None
        return max(rows, key=lambda p: (p.payment_date, p.created_at, p.payment_id))

    def delete(self, payment_id: int) -> bool:
        return self.rows.pop(int(payment_id), None) is not None

    def paid_totals(self, invoice_ids: Iterable[int]):
        out = {int(i): 0 for i in invoice_ids}
        for p in self.rows.values():
            if p.invoice_id in out:
                out[p.invoice_id] += p.amount_cents
        return out

    def list_for_invoice(self, invoice_id: int):
        rows = [p for p in self.rows.values() if p.invoice_id == int(invoice_id)]
        return sorted(rows, key=lambda p: (p.payment_date, p.created_at, p.payment_id))

    def delete_for_invoices(self, invoice_ids: Iterable[int]) -> None:
        ids = {int(i) for i in invoice_ids}
        for pid in [k for k, p in self.rows.items() if p.invoice_id in ids]:
            del self.rows[pid]


class InMemoryInvoices(_Table):
    def __init__(self, payments: InMemoryPayments, students: InMemoryStudents):
        super().__init__()
        self.line_items: dict[int, InvoiceLineItem] = {}
        self._payments = payments
        self._students = students

    def create(self, *, teacher_id, student_id, invoice_number, invoice_date, due_date, total_cents, tax_cents, status, notes) -> int:
        if any(i.invoice_number == invoice_number for i in self.rows.values()):
            raise StoreError("Duplicate entry for key 'invoice_number'")
        iid = self._new_id()
        self.rows[iid] = Invoice(
            invoice_id=iid,
            invoice_number=invoice_number,
            teacher_id=int(teacher_id),
            student_id=int(student_id),
            invoice_date=invoice_date,
            due_date=due_date,
            total_cents=int(total_cents),
            tax_cents=int(tax_cents),
            status=status,
            notes=notes,
        )
        return iid

    def add_line_item(self, *, invoice_id, description, quantity, unit_price_cents, total_price_cents) -> int:
        lid = len(self.line_items) + 1
        self.line_items[lid] = InvoiceLineItem(
            line_item_id=lid,
            invoice_id=int(invoice_id),
            description=description,
            quantity=int(quantity),
            unit_price_cents=int(unit_price_cents),
            total_price_cents=int(total_price_cents),
        )
        return lid

    def _with_name(self, invoice: Invoice) -> Invoice:
        student = self._students.rows.get(invoice.student_id)
        return replace(invoice, student_name=student.student_name if student else None)

    def get(self, *, teacher_id: int, invoice_id: int) -> Optional[Invoice]:
        i = self.rows.get(int(invoice_id))
        return self._with_name(i) if i and i.teacher_id == int(teacher_id) else None

    def list_for_teacher(self, teacher_id: int):
        rows = [self._with_name(i) for i in self.rows.values() if i.teacher_id == int(teacher_id)]
        return sorted(rows, key=lambda i: (i.invoice_date, i.invoice_id), reverse=True)

    def list_line_items(self, invoice_id: int):
        return [li for li in self.line_items.values() if li.invoice_id == int(invoice_id)]

    def set_status(self, *, invoice_id: int, status: InvoiceStatus) -> bool:
        i = self.rows.get(int(invoice_id))
        if not i:
            return False
        self.rows[i.invoice_id] = replace(i, status=status)
        return True

    def delete(self, *, teacher_id: int, invoice_ids: Iterable[int]) -> int:
        doomed = [i for i in {int(x) for x in invoice_ids} if self.get(teacher_id=teacher_id, invoice_id=i)]
        for iid in doomed:
            del self.rows[iid]
            for lid in [k for k, li in self.line_items.items() if li.invoice_id == iid]:
                del self.line_items[lid]
        self._payments.delete_for_invoices(doomed)
        return len(doomed)


class InMemoryCounters:
    def __init__(self, *, broken: bool = False):
        self.values: dict[tuple[str, int], int] = {}
        self.broken = broken

    def next_value(self, *, prefix: str, year: int) -> int:
        if self.broken:
            raise StoreError("reference_counters unavailable")
        key = (prefix, int(year))
        self.values[key] = self.values.get(key, 0) + 1
        return self.values[key]


class SnapshotTransaction:
    """Restores the given stores if the outermost block raises."""

    def __init__(self, *stores, keep: Iterable = ()):
        self._stores = stores
        # Cross-store references must survive a restore as the live objects.
        self._keep = tuple(stores) + tuple(keep)
        self._depth = 0
        self.committed = 0
        self.rolled_back = 0

    @contextmanager
    def transaction(self):
        if self._depth:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return

        saved = [copy.deepcopy(s.__dict__, {id(k): k for k in self._keep}) for s in self._stores]
        self._depth = 1
        try:
            yield
            self.committed += 1
        except Exception:
            for store, state in zip(self._stores, saved):
                store.__dict__.clear()
                store.__dict__.update(state)
            self.rolled_back += 1
            raise
        finally:
            self._depth = 0


class World:
    """Every fake store plus the container wired over them."""

    def __init__(self, *, attendance_fail_after: Optional[int] = None, counters_broken: bool = False):
        self.profiles = InMemoryProfiles()
        self.classes = InMemoryClasses()
        self.students = InMemoryStudents()
        self.enrollments = InMemoryEnrollments()
        self.schedules = InMemorySchedules()
        self.attendance = InMemoryAttendance(fail_after=attendance_fail_after)
        self.payments = InMemoryPayments()
        self.invoices = InMemoryInvoices(self.payments, self.students)
        self.counters = InMemoryCounters(broken=counters_broken)
        self.tx = SnapshotTransaction(
            self.enrollments,
            self.schedules,
            self.attendance,
            self.payments,
            self.invoices,
            self.counters,
            keep=(self.students,),
        )
        self.container: Container = wire(
            tx=self.tx,
            profiles_repo=self.profiles,
            classes_repo=self.classes,
            students_repo=self.students,
            enrollments_repo=self.enrollments,
            schedules_repo=self.schedules,
            attendance_repo=self.attendance,
            invoices_repo=self.invoices,
            payments_repo=self.payments,
            counters_repo=self.counters,
        )

    def teacher(self, email: str = "teacher@example.com", name: str = "Ms. Rivera") -> int:
        return self.profiles.create(email=email, password_hash="x", full_name=name)
