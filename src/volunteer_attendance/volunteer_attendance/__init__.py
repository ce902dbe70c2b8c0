"""Volunteer Attendance package.

This package is organized by feature modules (people, sessions, attendance,
reports) with a thin Flask controller layer and service/repository layers.
The attendance module owns facility presence and session logging.
"""
