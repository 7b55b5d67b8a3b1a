"""
Normalization helpers for standardizing source data.

Handles column naming, lenient date parsing and contact-field cleanup
so that rules, correctors and the loader agree on representations.
"""
