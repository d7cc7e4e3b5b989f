"""
Demo Data Seeder

Fills an empty database with restaurants, diners and about a year of orders
so the dashboard charts have something to show. Order times follow lunch and
dinner peaks; merchants are split between IDR and AUD.

    python -m merchant_analytics.ingestion.seed_db --merchants 12 --orders 20000
"""

import argparse
import asyncio
import random
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple

import structlog
from faker import Faker

from merchant_analytics.analytics.bucketing import utc_now
from merchant_analytics.config.logging import configure_logging
from merchant_analytics.database.connection import close_database, get_db, get_engine, init_database
from merchant_analytics.database.models import (
    Base,
    Customer,
    Merchant,
    Order,
    OrderItem,
    OrderStatus,
    OrderType,
    Payment,
    PaymentMethod,
)

logger = structlog.get_logger(__name__)

CHUNK_SIZE = 1000
HISTORY_DAYS = 400

# (status, weight)
ORDER_STATUSES = [
    (OrderStatus.COMPLETED, 0.80),
    (OrderStatus.CANCELLED, 0.08),
    (OrderStatus.PENDING, 0.03),
    (OrderStatus.ACCEPTED, 0.03),
    (OrderStatus.IN_PROGRESS, 0.03),
    (OrderStatus.READY, 0.03),
]

ORDER_TYPES = [
    (OrderType.DINE_IN, 0.55),
    (OrderType.TAKEAWAY, 0.30),
    (OrderType.DELIVERY, 0.15),
]

COUNTER_PAYMENT_METHODS = [
    (PaymentMethod.CASH_ON_COUNTER, 0.45),
    (PaymentMethod.CARD_ON_COUNTER, 0.55),
]

# Relative order volume per local hour, peaks at lunch and dinner
HOUR_WEIGHTS = [
    0.2, 0.1, 0.1, 0.1, 0.1, 0.2, 0.5, 1.0, 1.5, 1.5, 2.0, 4.0,
    6.0, 5.0, 2.5, 2.0, 2.5, 4.0, 6.5, 7.0, 5.0, 3.0, 1.5, 0.6,
]

DISHES = [
    "Nasi Goreng", "Mie Ayam", "Sate Ayam", "Rendang", "Gado-Gado", "Soto Betawi",
    "Flat White", "Long Black", "Smashed Avo", "Meat Pie", "Chicken Parma",
    "Fish and Chips", "Barramundi", "Iced Tea", "Lemon Tart", "Pavlova",
]

# (currency, min price, max price, price step)
PRICE_BANDS = {
    "IDR": (15000, 120000, 1000),
    "AUD": (5, 45, 1),
}


@dataclass
class MenuItem:
    menu_id: int
    name: str
    price: Decimal


def weighted_choice(rng: random.Random, options: Sequence[Tuple[object, float]]):
    values, weights = zip(*options)
    return rng.choices(values, weights=weights)[0]


def random_moment(rng: random.Random, now: datetime, days: int) -> datetime:
    """A moment within the last `days` days, hour drawn from HOUR_WEIGHTS."""
    day = now - timedelta(days=rng.randint(0, days))
    hour = rng.choices(range(24), weights=HOUR_WEIGHTS)[0]
    moment = day.replace(hour=hour, minute=rng.randint(0, 59), second=rng.randint(0, 59), microsecond=0)
    return min(moment, now)


def build_menu(rng: random.Random, currency: Optional[str], first_id: int) -> List[MenuItem]:
    low, high, step = PRICE_BANDS.get(currency or "IDR", PRICE_BANDS["IDR"])
    names = rng.sample(DISHES, k=8)
    return [
        MenuItem(first_id + i, name, Decimal(rng.randrange(low, high, step)))
        for i, name in enumerate(names)
    ]


class DemoSeeder:
    """Generates and inserts the demo data set"""

    def __init__(self, merchants: int, customers: int, orders: int, seed: int = 42):
        self.merchant_count = merchants
        self.customer_count = customers
        self.order_count = orders
        self.rng = random.Random(seed)
        self.fake = Faker(["id_ID", "en_AU"])
        Faker.seed(seed)
        self.now = utc_now().replace(microsecond=0)

    async def create_schema(self) -> None:
        async with get_engine().begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Schema ready")

    async def seed_merchants(self) -> List[Merchant]:
        logger.info("Seeding merchants...", count=self.merchant_count)
        merchants = []
        for i in range(self.merchant_count):
            # A few legacy merchants have no currency recorded
            currency = self.rng.choice(["IDR", "IDR", "AUD", "AUD", None])
            merchants.append(Merchant(
                code=f"M{i + 1:04d}",
                name=self.fake.company(),
                email=self.fake.company_email(),
                country="Indonesia" if currency != "AUD" else "Australia",
                currency=currency,
                created_at=self.now - timedelta(days=HISTORY_DAYS + 30),
            ))

        async with get_db() as db:
            db.add_all(merchants)
            await db.flush()
        return merchants

    async def seed_customers(self) -> List[int]:
        logger.info("Seeding customers...", count=self.customer_count)
        ids: List[int] = []
        for offset in range(0, self.customer_count, CHUNK_SIZE):
            chunk = [
                Customer(
                    name=self.fake.name(),
                    email=f"{offset + i}.{self.fake.user_name()}@example.com",
                    phone=self.fake.phone_number(),
                    created_at=random_moment(self.rng, self.now, HISTORY_DAYS),
                )
                for i in range(min(CHUNK_SIZE, self.customer_count - offset))
            ]
            async with get_db() as db:
                db.add_all(chunk)
                await db.flush()
                ids.extend(c.id for c in chunk)
        return ids

    async def seed_orders(self, merchants: List[Merchant], customer_ids: List[int]) -> int:
        logger.info("Seeding orders...", count=self.order_count)
        menus: Dict[int, List[MenuItem]] = {}
        for m in merchants:
            menus[m.id] = build_menu(self.rng, m.currency, first_id=m.id * 100)

        inserted = 0
        for offset in range(0, self.order_count, CHUNK_SIZE):
            size = min(CHUNK_SIZE, self.order_count - offset)
            async with get_db() as db:
                for i in range(size):
                    merchant = self.rng.choice(merchants)
                    db.add(self._build_order(merchant, menus[merchant.id], customer_ids, offset + i))
                await db.flush()
            inserted += size
            logger.info("Orders inserted", inserted=inserted)
        return inserted

    def _build_order(
        self,
        merchant: Merchant,
        menu: List[MenuItem],
        customer_ids: List[int],
        sequence: int,
    ) -> Order:
        placed_at = random_moment(self.rng, self.now, HISTORY_DAYS)
        items = []
        for dish in self.rng.sample(menu, k=self.rng.randint(1, 4)):
            quantity = self.rng.randint(1, 3)
            items.append(OrderItem(
                menu_id=dish.menu_id,
                menu_name=dish.name,
                menu_price=dish.price,
                quantity=quantity,
                subtotal=dish.price * quantity,
            ))

        subtotal = sum((item.subtotal for item in items), Decimal(0))
        tax = (subtotal * Decimal("0.10")).quantize(Decimal("0.01"))
        # Walk-in orders have no customer account
        customer_id = self.rng.choice(customer_ids) if customer_ids and self.rng.random() > 0.2 else None
        order_type = weighted_choice(self.rng, ORDER_TYPES)
        status = weighted_choice(self.rng, ORDER_STATUSES)

        # Only completed orders are settled
        payment = None
        if status is OrderStatus.COMPLETED:
            if order_type is OrderType.DELIVERY:
                method = PaymentMethod.CASH_ON_DELIVERY
            else:
                method = weighted_choice(self.rng, COUNTER_PAYMENT_METHODS)
            payment = Payment(payment_method=method, amount=subtotal + tax, paid_at=placed_at)

        return Order(
            merchant_id=merchant.id,
            customer_id=customer_id,
            order_number=f"{merchant.code}-{sequence + 1:07d}",
            order_type=order_type,
            status=status,
            subtotal=subtotal,
            tax_amount=tax,
            total_amount=subtotal + tax,
            placed_at=placed_at,
            created_at=placed_at,
            items=items,
            payment=payment,
        )

    async def run(self) -> None:
        await self.create_schema()
        merchants = await self.seed_merchants()
        customer_ids = await self.seed_customers()
        await self.seed_orders(merchants, customer_ids)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed the analytics database with demo data")
    parser.add_argument("--merchants", type=int, default=12)
    parser.add_argument("--customers", type=int, default=3000)
    parser.add_argument("--orders", type=int, default=20000)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--database-url", default=None, help="Overrides the configured database URL")
    return parser.parse_args(argv)


async def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    configure_logging()
    logger.info("Starting database seeding...")
    await init_database(args.database_url)

    try:
        await DemoSeeder(args.merchants, args.customers, args.orders, seed=args.seed).run()
        logger.info("Database seeding completed successfully!")
    except Exception as e:
        logger.error("Seeding failed", error=str(e))
        raise
    finally:
        await close_database()


def cli() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    cli()
