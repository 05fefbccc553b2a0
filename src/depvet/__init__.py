"""
depvet: commit history based vetting of dependency updates.
"""

__version__ = "0.1.0"
