"""Turns cppreference migration tickets into verified draft pull requests."""
