from decimal import Decimal
from sqlmodel import Session, select
from app.core.logging import setup_logging
from app.db.session import engine, create_db_and_tables
from app.models.catalog import Product, Promotion, AddOn
from app.models.user import User
from app.services.auth import AuthService

def seed_catalog(session: Session):
    existing_products = session.exec(select(Product)).all()
    if existing_products:
        print(f"Database already contains {len(existing_products)} products. Skipping catalog seed.")
        return

    print("Seeding catalog...")
    items = [
        Product(name="Espresso", category="coffee", description="Double shot, house blend.",
                price=Decimal("2.50"), stock_quantity=200),
        Product(name="Cappuccino", category="coffee", description="Espresso with steamed milk and foam.",
                price=Decimal("3.50"), stock_quantity=150),
        Product(name="Cold Brew", category="coffee", description="Steeped for 18 hours.",
                price=Decimal("4.00"), stock_quantity=60),
        Product(name="Butter Croissant", category="pastry", description="Baked every morning.",
                price=Decimal("2.75"), stock_quantity=40),
        Promotion(name="Breakfast Combo", description="Any coffee with a croissant.",
                  price=Decimal("5.50"), stock_quantity=30),
        Promotion(name="Afternoon Duo", description="Two cold brews.",
                  price=Decimal("7.00"), stock_quantity=20),
        AddOn(name="Extra Shot", price=Decimal("0.75"), stock_quantity=500),
        AddOn(name="Oat Milk", price=Decimal("0.60"), stock_quantity=300),
        AddOn(name="Vanilla Syrup", price=Decimal("0.50"), stock_quantity=300),
    ]
    for item in items:
        session.add(item)
    session.commit()
    print(f"Successfully seeded {len(items)} catalog items!")

def seed_admin(session: Session, email: str = "admin@brewandco.test", password: str = "admin"):
    service = AuthService(session)
    if service.get_user_by_email(email):
        print("Admin user already exists. Skipping.")
        return
    user = User(name="Admin", email=email, password_hash=service.get_password_hash(password), is_superuser=True)
    session.add(user)
    session.commit()
    print(f"Created admin user {email}")

if __name__ == "__main__":
    setup_logging()
    print("Creating database and tables...")
    create_db_and_tables()
    with Session(engine) as session:
        seed_catalog(session)
        seed_admin(session)
