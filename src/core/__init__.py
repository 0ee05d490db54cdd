"""
Core domain models, money units, mathematical primitives, and record contracts.

This module contains the foundational building blocks that are independent
of external systems (checkout, storage, pricing jobs).
"""
