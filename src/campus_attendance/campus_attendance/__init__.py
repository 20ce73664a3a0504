"""Campus attendance package.

This package is organized by feature modules (schedules, attendance, payroll,
requests, ...) with a thin Flask controller layer on top of service/repository
layers. The rule engines (conflict detection, status resolution, penalties,
payroll aggregation, approval workflow) are plain Python and hold no state
between calls.
"""
