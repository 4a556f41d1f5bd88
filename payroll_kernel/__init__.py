"""
Payroll Kernel

Pure domain layer for time-punch reconciliation and payroll computation:
- Immutable punch, session, compensation and payroll value objects
- Integer-cent money, Decimal hours
- Typed exceptions with machine-readable codes
- Structured JSON logging
"""

__version__ = "0.1.0"
