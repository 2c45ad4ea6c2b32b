"""
storefront/seed.py
──────────────────
Idempotent demo data: a small catalogue with reviews and the shopper
personas. Existing rows (matched by product name / persona id) are left
untouched, so running it twice is harmless.

Run directly with:  python -m storefront.seed
"""

import logging
import random
from typing import Any, Dict, List, Optional

from sqlmodel import Session, select

from storefront.models import Persona, Product, ProductReview

logger = logging.getLogger(__name__)

SAMPLE_PRODUCTS: List[Dict[str, Any]] = [
    {
        "name": "iPhone 15 Pro",
        "description": "Latest iPhone with advanced camera system and titanium design",
        "price": 999.99,
        "original_price": 1099.99,
        "category": "Electronics",
        "subcategory": "Smartphones",
        "brand": "Apple",
        "image_url": "https://images.pexels.com/photos/404280/pexels-photo-404280.jpeg",
        "tags": ["smartphone", "premium", "camera"],
        "features": ["A17 Pro chip", "Titanium design", "48MP camera", "120Hz display"],
        "stock_quantity": 50,
        "trending": True,
        "trending_score": 95,
        "rating": 4.8,
        "review_count": 1247,
    },
    {
        "name": "MacBook Air M3",
        "description": "Lightweight laptop with M3 chip for incredible performance",
        "price": 1299.99,
        "category": "Electronics",
        "subcategory": "Laptops",
        "brand": "Apple",
        "image_url": "https://images.pexels.com/photos/205421/pexels-photo-205421.jpeg",
        "tags": ["laptop", "productivity", "portable"],
        "features": ["M3 chip", "18-hour battery", "13.6-inch display", "2 Thunderbolt ports"],
        "stock_quantity": 30,
        "trending": True,
        "trending_score": 88,
        "rating": 4.7,
        "review_count": 892,
    },
    {
        "name": "Sony WH-1000XM5",
        "description": "Industry-leading noise canceling wireless headphones",
        "price": 349.99,
        "original_price": 399.99,
        "category": "Electronics",
        "subcategory": "Audio",
        "brand": "Sony",
        "image_url": "https://images.pexels.com/photos/3394650/pexels-photo-3394650.jpeg",
        "tags": ["headphones", "wireless", "noise-canceling"],
        "features": ["30-hour battery", "Quick charge", "Premium comfort", "Hi-Res Audio"],
        "stock_quantity": 100,
        "trending": True,
        "trending_score": 82,
        "rating": 4.6,
        "review_count": 2156,
    },
    {
        "name": "Nike Air Max 270",
        "description": "Comfortable running shoes with Air Max technology",
        "price": 149.99,
        "category": "Clothing",
        "subcategory": "Shoes",
        "brand": "Nike",
        "image_url": "https://images.pexels.com/photos/1598505/pexels-photo-1598505.jpeg",
        "tags": ["shoes", "running", "comfort"],
        "features": ["Air Max heel unit", "Mesh upper", "Durable rubber outsole", "Lightweight design"],
        "stock_quantity": 200,
        "trending": False,
        "trending_score": 65,
        "rating": 4.4,
        "review_count": 567,
    },
    {
        "name": "The Psychology of Money",
        "description": "Timeless lessons on wealth, greed, and happiness",
        "price": 16.99,
        "category": "Books",
        "subcategory": "Finance",
        "brand": "Morgan Housel",
        "image_url": "https://images.pexels.com/photos/159866/books-book-pages-read-literature-159866.jpeg",
        "tags": ["finance", "psychology", "bestseller"],
        "features": ["19 short stories", "Financial wisdom", "Behavioral economics", "Easy to read"],
        "stock_quantity": 150,
        "trending": True,
        "trending_score": 75,
        "rating": 4.9,
        "review_count": 3421,
    },
    {
        "name": "Instant Pot Duo 7-in-1",
        "description": "Multi-use pressure cooker for quick and easy meals",
        "price": 89.99,
        "original_price": 119.99,
        "category": "Kitchen & Dining",
        "subcategory": "Appliances",
        "brand": "Instant Pot",
        "image_url": "https://images.pexels.com/photos/4057754/pexels-photo-4057754.jpeg",
        "tags": ["kitchen", "cooking", "appliance"],
        "features": ["7-in-1 functionality", "6-quart capacity", "Smart programming", "Safety features"],
        "stock_quantity": 75,
        "trending": False,
        "trending_score": 70,
        "rating": 4.5,
        "review_count": 1876,
    },
    {
        "name": "Yoga Mat Premium",
        "description": "Non-slip yoga mat for all types of yoga practice",
        "price": 39.99,
        "category": "Sports Equipment",
        "subcategory": "Fitness",
        "brand": "YogaLife",
        "image_url": "https://images.pexels.com/photos/3822166/pexels-photo-3822166.jpeg",
        "tags": ["yoga", "fitness", "exercise"],
        "features": ["Non-slip surface", "Extra thick padding", "Eco-friendly material", "Carrying strap"],
        "stock_quantity": 120,
        "trending": False,
        "trending_score": 55,
        "rating": 4.3,
        "review_count": 345,
    },
    {
        "name": "Smart Watch Series X",
        "description": "Advanced fitness tracking with heart rate monitoring",
        "price": 279.99,
        "category": "Electronics",
        "subcategory": "Wearables",
        "brand": "TechWatch",
        "image_url": "https://images.pexels.com/photos/393047/pexels-photo-393047.jpeg",
        "tags": ["smartwatch", "fitness", "health"],
        "features": ["GPS tracking", "Heart rate monitor", "Sleep tracking", "Water resistant"],
        "stock_quantity": 80,
        "trending": True,
        "trending_score": 78,
        "rating": 4.2,
        "review_count": 789,
    },
]

REVIEW_TEXTS = [
    "Great product! Exactly what I was looking for.",
    "Good quality but could be better for the price.",
    "Excellent purchase, highly recommend!",
    "Works as expected, no complaints.",
    "Amazing quality and fast shipping!",
]

PERSONAS: List[Dict[str, Any]] = [
    {
        "id": "tech-enthusiast",
        "name": "Tech Enthusiast",
        "description": "Loves the latest gadgets and technology",
        "preferences": {
            "categories": ["Electronics", "Gaming", "Computers"],
            "brands": ["Apple", "Samsung", "Sony"],
            "priceRange": {"min": 100, "max": 2000},
        },
        "accessibility_settings": {"theme": "dark", "fontSize": "medium", "reducedMotion": False},
        "demographic_profile": {"ageRange": "25-35", "income": "high", "location": "urban"},
        "shopping_behavior": {
            "frequency": "weekly",
            "avgOrderValue": 500,
            "loyaltyTier": "gold",
            "preferredChannels": ["online"],
        },
        "ui_settings": {"theme": "dark", "fontSize": "medium", "reducedMotion": False, "layout": "grid"},
    },
    {
        "id": "accessibility-focused",
        "name": "Accessibility Focused",
        "description": "Prioritizes accessibility and inclusive design",
        "preferences": {
            "categories": ["Books", "Health & Beauty", "Home Decor"],
            "brands": [],
            "priceRange": {"min": 20, "max": 200},
            "accessibilityNeeds": ["High Contrast", "Large Fonts", "Screen Reader Support"],
        },
        "accessibility_settings": {
            "theme": "high-contrast",
            "fontSize": "large",
            "reducedMotion": True,
            "screenReader": True,
        },
        "demographic_profile": {"ageRange": "45-65", "income": "medium", "location": "suburban"},
        "shopping_behavior": {
            "frequency": "monthly",
            "avgOrderValue": 75,
            "loyaltyTier": "silver",
            "preferredChannels": ["online", "phone"],
        },
        "ui_settings": {"theme": "high-contrast", "fontSize": "large", "reducedMotion": True, "layout": "list"},
    },
    {
        "id": "budget-conscious",
        "name": "Budget Conscious",
        "description": "Hunts for value and waits for a good deal",
        "preferences": {
            "categories": ["Clothing", "Books", "Home & Garden"],
            "brands": [],
            "priceRange": {"min": 5, "max": 100},
        },
        "accessibility_settings": {"theme": "light", "fontSize": "medium", "reducedMotion": False},
        "demographic_profile": {},
        "shopping_behavior": {"frequency": "occasionally", "avgOrderValue": 45, "loyaltyTier": "bronze"},
        "ui_settings": {"theme": "light", "fontSize": "medium", "reducedMotion": False, "layout": "grid"},
    },
]


def seed_database(db: Session, rng: Optional[random.Random] = None) -> Dict[str, int]:
    """Insert missing demo rows and return how many of each kind were created."""
    rng = rng or random.Random(42)
    created = {"products": 0, "reviews": 0, "personas": 0}

    existing_names = set(db.exec(select(Product.name)).all())
    for data in SAMPLE_PRODUCTS:
        if data["name"] in existing_names:
            continue
        product = Product(**data)
        db.add(product)
        db.flush()
        created["products"] += 1

        for i in range(3):
            db.add(
                ProductReview(
                    product_id=product.id,
                    source="manual",
                    rating=rng.randint(4, 5),
                    title=f"Review {i + 1}",
                    content=rng.choice(REVIEW_TEXTS),
                    author=f"Customer {i + 1}",
                    verified=True,
                    helpful=rng.randint(0, 19),
                )
            )
            created["reviews"] += 1

    for data in PERSONAS:
        if db.get(Persona, data["id"]) is None:
            db.add(Persona(**data))
            created["personas"] += 1

    db.commit()
    logger.info(
        "Seed complete: %d products, %d reviews, %d personas created",
        created["products"],
        created["reviews"],
        created["personas"],
    )
    return created


if __name__ == "__main__":
    from storefront.database import create_db_and_tables, engine

    logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
    create_db_and_tables()
    with Session(engine) as session:
        seed_database(session)
