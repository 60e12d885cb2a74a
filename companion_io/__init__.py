"""Import / export engine for the companion record book.

Moves client, booking, finance and safety records between the record store
and flat CSV / XLSX files.
"""

__version__ = "0.1.0"
