"""
Analytics App - Read-only purchase aggregations

Monthly discount standing, history, settlement totals and trends.
"""
