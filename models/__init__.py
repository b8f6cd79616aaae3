#!/usr/bin/env python3
"""Creates the process-wide DBStorage instance; create_app() binds it to a database."""
from models.db_storage import DBStorage

storage = DBStorage()
