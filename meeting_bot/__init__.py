"""
Meeting Bot - joins Google Meet, Zoom and Microsoft Teams meetings
with Playwright.
"""

__version__ = "1.0.0"
