"""
slotbooker - publish bookable meeting types and take bookings without
double-booking a slot.
"""

__version__ = "0.1.0"
