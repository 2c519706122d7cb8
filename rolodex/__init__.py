"""
rolodex - Personal address book with indexed search and snapshot merging.
"""

__version__ = "1.0.0"
