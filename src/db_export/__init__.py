"""
db-export
=========

Exports rows of MySQL or SQL Server tables into JSON documents or SQL
INSERT scripts, driven by a JSON configuration file.
"""

from db_export.app.config import VERSION

__version__ = VERSION
