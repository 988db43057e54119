"""Zero-based budgeting API: accounts, monthly category allocations and an assistant."""

__version__ = "0.1.0"
