"""Ticket sales and discount allocation for co-located festivals."""

__version__ = "0.1.0"
