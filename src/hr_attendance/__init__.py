"""HR attendance engine.

Organized by feature modules (shifts, employees, attendance, leaves, reports)
with a thin Flask controller layer on top of service/repository layers.
The shift and attendance rules themselves live in ``attendance.shift_rules``
and perform no I/O.
"""

__version__ = "1.0.0"
