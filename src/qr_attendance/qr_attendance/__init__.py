"""QR Attendance package.

This package is organized by feature modules (attendance, events, users,
stats, eligibility, ...) around a hierarchical tree store, with a thin Flask
controller layer in front of the reconciliation engine.
"""
