"""Gym management backend package.

This package is organized by feature modules (members, registrations, attendance, ...)
with a thin Flask controller layer over service/repository layers backed by MongoDB.
"""
