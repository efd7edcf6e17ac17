"""
Log Converter: fetch ESS activity logs and export them as a monthly timesheet workbook.
"""

__version__ = "1.0.0"
