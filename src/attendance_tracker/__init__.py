"""Attendance tracker package.

Organized by feature modules (sessions, holidays, daystatus, stats, ...)
with a thin Flask controller layer on top of service/repository layers.
"""
