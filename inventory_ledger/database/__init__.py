from inventory_ledger.database.base import Base
from inventory_ledger.database.engine import create_db_engine, engine
from inventory_ledger.database.session import SessionLocal

__all__ = ["Base", "SessionLocal", "create_db_engine", "engine"]
