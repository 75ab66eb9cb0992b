"""
Transitional care management (TCM) calculations.

Pure functions over plain values and duck-typed rows; nothing here touches the
database, the clock or the request. Callers pass `now` explicitly.
"""
