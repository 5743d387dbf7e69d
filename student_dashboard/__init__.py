"""
Student dashboard: student records, filtering, CSV import/export,
notifications and mock authentication served by Flask.
"""

__version__ = "0.1.0"
