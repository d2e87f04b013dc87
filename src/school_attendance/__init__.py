"""School Attendance package.

Organized by feature modules (attendance, announcements, users, reports, ...)
with a thin Flask controller layer over service/repository layers. Storage is
reached through the document store abstraction in ``database``.
"""
