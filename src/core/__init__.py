"""
Core domain models, mathematical primitives, contracts and ports.

This module contains the foundational building blocks of the stock holdings
core that are independent of external systems (price APIs, currency services,
storage, UI).
"""
