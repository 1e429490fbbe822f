"""
Engines. Only the SQL engine exists.
"""
