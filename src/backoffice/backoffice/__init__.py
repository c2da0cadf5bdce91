"""Back-office attendance & payroll core.

Organized by feature modules (attendance, overtime, payroll, analytics, ...)
with a thin Flask controller layer over service/repository layers.
"""
