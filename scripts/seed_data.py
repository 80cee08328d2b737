#!/usr/bin/env python3
"""
Database Seed Script

Populates the database with sample data for development.

USAGE:
    # Make sure you're in the project root with venv activated
    python scripts/seed_data.py

This script:
1. Connects to the database using app settings
2. Clears existing data (optional)
3. Creates categories, subcategories and companies through the catalog service
4. Creates a handful of users and lets them review the companies through
   the review service, so every invariant is enforced as in the API
"""

import random
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy import delete
from sqlalchemy.orm import Session

from reviewhub.database import SessionLocal, create_tables
from reviewhub.models import Category, Company, Review, Subcategory, User
from reviewhub.schemas.category import CategoryCreate, SubcategoryCreate
from reviewhub.schemas.company import CompanyCreate
from reviewhub.schemas.review import ReviewCreate
from reviewhub.services import catalog
from reviewhub.services.reviews import create_review
from reviewhub.services.security import hash_password

SEED_PASSWORD = "Password123"

TAXONOMY = {
    "Technology": {
        "Software": ["Acme Software", "Bytewise", "Cloudnine Hosting"],
        "Hardware": ["Circuit House", "Pixel Devices"],
    },
    "Travel": {
        "Airlines": ["SkyHop", "Northwind Air"],
        "Hotels": ["Harbor Inn", "Grand Palms Resort"],
    },
    "Food & Drink": {
        "Restaurants": ["Nonna's Kitchen", "Green Bowl"],
        "Delivery": ["QuickBite"],
    },
}

USERS = [
    ("Alice Martin", "alice@example.com"),
    ("Bob Chen", "bob@example.com"),
    ("Carla Ruiz", "carla@example.com"),
    ("Dev Patel", "dev@example.com"),
    ("Emma Novak", "emma@example.com"),
    ("Farid Haddad", "farid@example.com"),
]

COMMENTS = {
    5: "Outstanding service from start to finish, would recommend to anyone.",
    4: "Very good experience overall, only a couple of small hiccups.",
    3: "Decent, does the job but nothing that really stood out.",
    2: "Below expectations, support was slow to answer my questions.",
    1: "Very disappointing, I would not use this company again.",
}


def clear_data(db: Session) -> None:
    """Clear all existing data from the database."""
    print("Clearing existing data...")
    db.execute(delete(Review))
    db.execute(delete(Company))
    db.execute(delete(Subcategory))
    db.execute(delete(Category))
    db.execute(delete(User))
    db.commit()
    print("Data cleared.")


def create_catalog(db: Session) -> list[Company]:
    """Create the sample taxonomy and its companies."""
    print("Creating categories, subcategories and companies...")
    companies = []

    for category_name, subcategories in TAXONOMY.items():
        category = catalog.create_category(db, CategoryCreate(name=category_name))
        for subcategory_name, company_names in subcategories.items():
            subcategory = catalog.create_subcategory(
                db,
                SubcategoryCreate(name=subcategory_name, category_id=category.id),
            )
            for company_name in company_names:
                companies.append(
                    catalog.create_company(
                        db,
                        CompanyCreate(
                            name=company_name,
                            url=f"https://{catalog.slugify(company_name)}.example",
                            category_id=category.id,
                            subcategory_id=subcategory.id,
                        ),
                    )
                )

    # One company without a placement lands in General / General
    companies.append(catalog.create_company(db, CompanyCreate(name="Misc Goods Co")))

    print(f"Created {len(companies)} companies.")
    return companies


def create_users(db: Session) -> list[User]:
    """Create sample reviewers, all sharing SEED_PASSWORD."""
    print("Creating users...")
    users = [
        User(name=name, email=email, hashed_password=hash_password(SEED_PASSWORD))
        for name, email in USERS
    ]
    db.add_all(users)
    db.commit()
    for user in users:
        db.refresh(user)

    print(f"Created {len(users)} users.")
    return users


def create_reviews(
    db: Session,
    users: list[User],
    companies: list[Company],
    rng: random.Random,
) -> int:
    """Let each user review a random subset of the companies."""
    print("Creating reviews...")
    count = 0

    for user in users:
        for company in rng.sample(companies, k=len(companies) // 2):
            rating = rng.choices([5, 4, 3, 2, 1], weights=[5, 4, 3, 2, 1])[0]
            create_review(
                db,
                user,
                ReviewCreate(
                    company_id=company.id,
                    rating=rating,
                    title=f"{rating} stars for {company.name}",
                    comment=COMMENTS[rating],
                ),
            )
            count += 1

    print(f"Created {count} reviews.")
    return count


def seed_database(clear_existing: bool = True, seed: int = 42) -> None:
    """
    Main function to seed the database.

    Args:
        clear_existing: If True, clears existing data before seeding.
        seed: Seed for the review draw, so repeated runs give the same data.
    """
    print("=" * 60)
    print("Starting database seed...")
    print("=" * 60)

    create_tables()
    db = SessionLocal()

    try:
        if clear_existing:
            clear_data(db)

        companies = create_catalog(db)
        users = create_users(db)
        review_count = create_reviews(db, users, companies, random.Random(seed))

        print("=" * 60)
        print("Database seeding completed successfully!")
        print("=" * 60)
        print("\nSummary:")
        print(f"  - Companies: {len(companies)}")
        print(f"  - Users: {len(users)} (password: {SEED_PASSWORD})")
        print(f"  - Reviews: {review_count}")
        print("\nAPI documentation at http://localhost:5000/docs")

    except Exception as e:
        print(f"Error seeding database: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed_database()
