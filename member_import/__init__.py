"""Member spreadsheet import pipeline.

Template generation, tolerant spreadsheet parsing, per-row normalization and
validation, and a batched commit of the valid rows.
"""

__version__ = "0.1.0"
