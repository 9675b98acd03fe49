from __future__ import annotations

from dataclasses import dataclass

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceGridService, AttendanceReconciler
from .classes.mysql_class_repository import MySQLClassRepository
from .classes.repository import ClassRepository
from .classes.service import ClassService
from .core.constants import DEFAULT_INVOICE_DUE_DAYS
from .database.connection import DBConfig, DatabaseConnection
from .database.transactions import TransactionManager
from .enrollment.mysql_enrollment_repository import MySQLEnrollmentRepository
from .enrollment.repository import EnrollmentRepository
from .enrollment.service import EnrollmentResolver
from .invoicing.mysql_invoice_repository import MySQLInvoiceRepository
from .invoicing.repository import InvoiceRepository
from .invoicing.service import InvoiceService, InvoiceSummaryService
from .payments.mysql_payment_repository import MySQLPaymentRepository
from .payments.repository import PaymentRepository
from .payments.service import PaymentLedger
from .profiles.mysql_profile_repository import MySQLProfileRepository
from .profiles.repository import ProfileRepository
from .profiles.service import AuthService, ProfileService
from .references.mysql_reference_repository import MySQLReferenceCounterRepository
from .references.repository import ReferenceCounterRepository
from .references.service import ReferenceGenerator
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.repository import ScheduleRepository
from .schedules.service import ScheduleMaterializer
from .students.mysql_student_repository import MySQLStudentRepository
from .students.repository import StudentRepository
from .students.service import StudentService


@dataclass(frozen=True)
class Container:
    tx: TransactionManager

    profiles_repo: ProfileRepository
    classes_repo: ClassRepository
    students_repo: StudentRepository
    enrollments_repo: EnrollmentRepository
    schedules_repo: ScheduleRepository
    attendance_repo: AttendanceRepository
    invoices_repo: InvoiceRepository
    payments_repo: PaymentRepository
    counters_repo: ReferenceCounterRepository

    auth_service: AuthService
    profile_service: ProfileService
    enrollment: EnrollmentResolver
    materializer: ScheduleMaterializer
    class_service: ClassService
    student_service: StudentService
    reconciler: AttendanceReconciler
    grid_service: AttendanceGridService
    references: ReferenceGenerator
    summary_service: InvoiceSummaryService
    invoice_service: InvoiceService
    payment_ledger: PaymentLedger


def wire(
    *,
    tx: TransactionManager,
    profiles_repo: ProfileRepository,
    classes_repo: ClassRepository,
    students_repo: StudentRepository,
    enrollments_repo: EnrollmentRepository,
    schedules_repo: ScheduleRepository,
    attendance_repo: AttendanceRepository,
    invoices_repo: InvoiceRepository,
    payments_repo: PaymentRepository,
    counters_repo: ReferenceCounterRepository,
    invoice_due_days: int = DEFAULT_INVOICE_DUE_DAYS,
) -> Container:
    """Build every service over the given stores."""

    enrollment = EnrollmentResolver(schedules_repo, enrollments_repo, classes_repo, students_repo, tx=tx)
    materializer = ScheduleMaterializer(schedules_repo, classes_repo, students_repo, tx=tx)
    reconciler = AttendanceReconciler(attendance_repo, schedules_repo, classes_repo)
    references = ReferenceGenerator(counters_repo)
    summary_service = InvoiceSummaryService(schedules_repo, attendance_repo, classes_repo, students_repo)

    return Container(
        tx=tx,
        profiles_repo=profiles_repo,
        classes_repo=classes_repo,
        students_repo=students_repo,
        enrollments_repo=enrollments_repo,
        schedules_repo=schedules_repo,
        attendance_repo=attendance_repo,
        invoices_repo=invoices_repo,
        payments_repo=payments_repo,
        counters_repo=counters_repo,
        auth_service=AuthService(profiles_repo),
        profile_service=ProfileService(profiles_repo),
        enrollment=enrollment,
        materializer=materializer,
        class_service=ClassService(classes_repo, enrollment),
        student_service=StudentService(students_repo, enrollment, materializer),
        reconciler=reconciler,
        grid_service=AttendanceGridService(
            reconciler,
            attendance_repo,
            schedules_repo,
            classes_repo,
            students_repo,
            enrollment,
            tx=tx,
        ),
        references=references,
        summary_service=summary_service,
        invoice_service=InvoiceService(
            invoices_repo,
            payments_repo,
            summary_service,
            references,
            classes_repo,
            students_repo,
            profiles_repo,
            tx=tx,
            due_days=invoice_due_days,
        ),
        payment_ledger=PaymentLedger(payments_repo, invoices_repo, references, tx=tx),
    )


def build_container(*, db_config: dict, invoice_due_days: int = DEFAULT_INVOICE_DUE_DAYS) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
    )
    conn = DatabaseConnection.get_instance(config)

    return wire(
        tx=conn,
        profiles_repo=MySQLProfileRepository(conn),
        classes_repo=MySQLClassRepository(conn),
        students_repo=MySQLStudentRepository(conn),
        enrollments_repo=MySQLEnrollmentRepository(conn),
        schedules_repo=MySQLScheduleRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        invoices_repo=MySQLInvoiceRepository(conn),
        payments_repo=MySQLPaymentRepository(conn),
        counters_repo=MySQLReferenceCounterRepository(conn),
        invoice_due_days=invoice_due_days,
    )
