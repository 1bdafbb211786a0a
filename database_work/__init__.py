"""
Database schema and the script that applies it.
"""
