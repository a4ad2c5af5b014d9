"""
schedgrid – academic schedule ingestion, conflict checking and export.

The package reads loosely structured schedule spreadsheets, turns them into
Course records, annotates conflicts, maps courses onto display slots and
writes the data back in the shape it was loaded from.
"""

__version__ = "0.1.0"
