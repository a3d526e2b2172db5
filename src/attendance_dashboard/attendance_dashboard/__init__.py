"""Attendance dashboard data layer.

This package is organized by feature modules (employees, attendance, payroll,
settings, analytics) around one in-process store (``DataService``) that
persists to a durable key-value storage and keeps several contexts in sync.
"""
