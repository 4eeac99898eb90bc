import argparse
import logging

from sqlalchemy import delete, select

from inventory_ledger.core.logging import setup_logging
from inventory_ledger.database import Base, SessionLocal, engine
from inventory_ledger.models import Category, InventorySnapshot, Product, StockMovement, import_all_models
from inventory_ledger.schemas.movement import CreateStockMovementInput
from inventory_ledger.schemas.product import ProductCreate
from inventory_ledger.services.ledger_service import apply_movement
from inventory_ledger.services.product_service import create_product

logger = logging.getLogger(__name__)

SEED_ACTOR = "seed-script"


def parse_args():
    parser = argparse.ArgumentParser(description="Seed sample inventory data.")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Clear existing data (including the movement ledger) before seeding.",
    )
    return parser.parse_args()


def _reset(db):
    # The ledger is append-only through the ORM; a reset is a bulk wipe.
    db.execute(delete(StockMovement))
    db.execute(delete(InventorySnapshot))
    db.execute(delete(Product))
    db.execute(delete(Category))
    db.commit()


def main():
    setup_logging()
    args = parse_args()

    import_all_models()
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        if args.reset:
            _reset(db)

        has_product = db.execute(select(Product.id).limit(1)).first()
        if has_product:
            logger.info("Seed skipped: products already exist.")
            return

        categories = [
            Category(name="Electronics", description="Devices and accessories"),
            Category(name="Home & Garden", description="Household items"),
        ]
        db.add_all(categories)
        db.commit()

        products = [
            ProductCreate(
                sku="ELEC-USB-C-01",
                name="USB-C Charging Cable",
                category_id=categories[0].id,
                price=12.5,
                cost=4.0,
                stock=40,
                min_stock=10,
                max_stock=200,
            ),
            ProductCreate(
                sku="ELEC-MOUSE-02",
                name="Wireless Mouse",
                category_id=categories[0].id,
                price=24.0,
                cost=11.0,
                stock=3,
                min_stock=5,
            ),
            ProductCreate(
                sku="HOME-LAMP-01",
                name="Desk Lamp",
                category_id=categories[1].id,
                price=35.0,
                cost=18.0,
                stock=0,
                min_stock=4,
            ),
        ]
        created = [create_product(db, payload, SEED_ACTOR) for payload in products]

        apply_movement(
            db,
            CreateStockMovementInput(
                product_id=created[0].id,
                type="OUT",
                quantity=6,
                reason="Counter sales",
                reference="POS-0001",
            ),
            SEED_ACTOR,
        )
        logger.info("Seed data created: %d products.", len(created))
    finally:
        db.close()


if __name__ == "__main__":
    main()
