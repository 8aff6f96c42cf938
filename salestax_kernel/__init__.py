"""
Sales Tax Kernel

Shared foundations for the Canadian sales tax packages:
- Typed exceptions with machine-readable codes
- Structured JSON logging
- Injectable clock
- Decimal conversion and cent rounding
"""

__version__ = "0.1.0"
