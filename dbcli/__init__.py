"""
dbcli – run SQL statements against MySQL, Oracle or PostgreSQL from the shell.
"""
__version__ = "1.0.0"
