# eniqilo_store/errors.py
import asyncpg

# Failures raised by the driver or the socket underneath it
DRIVER_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)

class StorageError(Exception):
    """Underlying transaction or connection failure"""
