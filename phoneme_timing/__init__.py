"""
Phoneme timing extraction for singing-voice projects.
"""

__version__ = "0.1.0"
