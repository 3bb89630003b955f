# app/data/seed.py
from decimal import Decimal

from app.data.database import Base, SessionLocal, engine
from app.data.models import ProductModel
from app.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

PRODUCTS = [
    {"id": 1, "name": "Handwoven Sadu Rug", "price": Decimal("249.00"), "stock": 12},
    {"id": 2, "name": "Brass Dallah Coffee Pot", "price": Decimal("89.50"), "stock": 30},
    {"id": 3, "name": "Oud Incense Set", "price": Decimal("35.00"), "stock": 100},
    {"id": 4, "name": "Calligraphy Print", "price": Decimal("120.00"), "stock": 5},
]


def seed():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        # not forcing: only seed if empty
        if db.query(ProductModel).first():
            logger.info("Catalog already seeded")
            return
        db.add_all(ProductModel(**p) for p in PRODUCTS)
        db.commit()
        logger.info(f"Seeded {len(PRODUCTS)} products")
    finally:
        db.close()


if __name__ == "__main__":
    configure_logging()
    seed()
