"""
GitHub PR Review Commenter

Places AI review findings on exact lines of a pull request diff and keeps the
posted GitHub comments in sync across repeated review runs.
"""

__version__ = "1.0.0"
__author__ = "Development Team"
__email__ = "dev@example.com"
