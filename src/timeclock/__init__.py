"""Timeclock package.

Feature modules (attendance, statistics, audit, admin, users) each carry their
own model/repository/service/controller layers. The attendance lifecycle
engine in ``attendance.lifecycle`` is the only place where status changes.
"""
