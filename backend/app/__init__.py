"""
ChapterDesk backend application package.
"""
