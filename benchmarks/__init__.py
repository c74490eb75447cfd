"""Performance benchmarks for hclasso.

Microbenchmarks for the batch dispatcher across worker counts, schedules and
linear-algebra backends.
"""
