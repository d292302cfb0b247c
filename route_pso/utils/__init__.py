# utils/__init__.py
# -*- coding: utf-8 -*-

from .report_generator import format_float, generate_route_report

__all__ = [
    "format_float",
    "generate_route_report",
]
