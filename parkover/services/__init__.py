"""Booking and availability services."""
