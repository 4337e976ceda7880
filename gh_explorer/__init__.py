"""gh-explorer: random highly-starred GitHub repositories per language"""

__version__ = "0.1.0"
