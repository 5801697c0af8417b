"""
walkslots - turn open availability into bookable dog-walking and sitting slots.
"""

__version__ = "0.3.0"
