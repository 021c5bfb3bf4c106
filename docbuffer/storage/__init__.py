# ==============================================
# TOPIC 2: STORAGE
# ==============================================
#
# This package writes flushed batches to the database.
#
# Modules:
# --------
# - mongo_client.py → MongoDB connection and bulk inserts
#
# ==============================================

from .mongo_client import InsertManyResult, MongoClient

__all__ = ["InsertManyResult", "MongoClient"]
