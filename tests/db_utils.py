from sqlalchemy.orm import sessionmaker

from inventory_ledger.database.base import Base
from inventory_ledger.database.engine import create_db_engine
from inventory_ledger.models import Category, Product, import_all_models


def make_session_factory(database_url="sqlite:///:memory:"):
    import_all_models()
    engine = create_db_engine(database_url)
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    return engine, factory


def add_product(db, sku="SKU-001", stock=0, min_stock=5, max_stock=None, price=20.0, cost=10.0,
                is_active=True, category=None, name=None):
    product = Product(
        sku=sku,
        name=name or "Product {}".format(sku),
        price=price,
        cost=cost,
        stock=stock,
        min_stock=min_stock,
        max_stock=max_stock,
        is_active=is_active,
        category=category,
    )
    db.add(product)
    db.commit()
    return product


def add_category(db, name="Tools"):
    category = Category(name=name)
    db.add(category)
    db.commit()
    return category
