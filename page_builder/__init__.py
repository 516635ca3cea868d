"""
Page builder: compose a page out of an ordered list of typed blocks and
reconcile the submitted block list against the stored child records.
"""

__version__ = "0.1.0"
