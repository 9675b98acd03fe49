"""Class Attendance Manager package.

This package is organized by feature modules (classes, students, attendance,
invoicing, payments, ...) with a thin Flask controller layer and
service/repository layers underneath.
"""
