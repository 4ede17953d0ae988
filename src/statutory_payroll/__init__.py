"""Statutory payroll computation engine and pay run services."""

__version__ = "1.0.0"
