# student_dashboard/utils/__init__.py
"""
Utility helpers package
"""
