"""Reservation lifecycle and availability domain."""
