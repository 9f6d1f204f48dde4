"""
Seed a demo user with sample subscriptions and payment history.

Usage:
    DATABASE_URL=postgresql://... python seed_test_data.py
"""
from datetime import date
from decimal import Decimal

from app.application.subscriptions import CreateSubscriptionUseCase
from app.auth import get_user_by_email, hash_password
from app.infrastructure.db.models import User
from app.infrastructure.db.session import get_db
from app.infrastructure.db.subscription_repository import SubscriptionRepository

DEMO_EMAIL = "test@example.com"
DEMO_PASSWORD = "MySecure2024!Pass"

SUBSCRIPTIONS = [
    {"serviceName": "Netflix", "planType": "Premium", "cost": "15.99", "billingCycle": "monthly",
     "nextBillingDate": "2025-06-15", "category": "entertainment", "paymentMethod": "credit_card"},
    {"serviceName": "Spotify", "planType": "Premium Individual", "cost": "9.99", "billingCycle": "monthly",
     "nextBillingDate": "2025-06-08", "category": "entertainment", "paymentMethod": "credit_card"},
    {"serviceName": "Adobe Creative Cloud", "planType": "Individual", "cost": "59.99", "billingCycle": "monthly",
     "nextBillingDate": "2025-07-01", "category": "productivity", "paymentMethod": "paypal"},
    {"serviceName": "Microsoft 365", "planType": "Personal", "cost": "69.99", "billingCycle": "yearly",
     "nextBillingDate": "2026-01-15", "category": "productivity", "paymentMethod": "credit_card"},
    {"serviceName": "Gym Membership", "planType": "Premium", "cost": "49.99", "billingCycle": "monthly",
     "nextBillingDate": "2025-06-20", "category": "health", "paymentMethod": "bank_transfer"},
    {"serviceName": "Dropbox", "planType": "Plus", "cost": "119.88", "billingCycle": "yearly",
     "nextBillingDate": "2025-12-10", "category": "productivity", "paymentMethod": "credit_card",
     "status": "inactive", "autoRenewal": False},
]

# (subscription index, amount, date, status)
TRANSACTIONS = [
    (0, "15.99", date(2025, 5, 15), "completed"),
    (0, "15.99", date(2025, 4, 15), "completed"),
    (0, "15.99", date(2025, 5, 23), "pending"),
    (1, "9.99", date(2025, 5, 8), "completed"),
    (2, "59.99", date(2025, 5, 1), "completed"),
    (3, "69.99", date(2025, 1, 15), "completed"),
    (4, "49.99", date(2025, 5, 20), "completed"),
    (5, "119.88", date(2024, 12, 10), "completed"),
]


def main() -> None:
    db = next(get_db())
    try:
        user = get_user_by_email(db, DEMO_EMAIL)
        if user:
            print(f"User already exists: {DEMO_EMAIL} (ID: {user.id})")
            return

        user = User(email=DEMO_EMAIL, name="Test User", password_hash=hash_password(DEMO_PASSWORD))
        db.add(user)
        db.commit()

        repo = SubscriptionRepository(db)
        created = [CreateSubscriptionUseCase(repo).execute(user.id, data) for data in SUBSCRIPTIONS]
        for index, amount, paid_on, status in TRANSACTIONS:
            sub = created[index]
            repo.add_transaction(
                sub.id, user.id,
                amount=Decimal(amount), date=paid_on,
                payment_method=sub.payment_method, status=status,
            )

        print("Created user:")
        print(f"  Email: {DEMO_EMAIL}")
        print(f"  Password: {DEMO_PASSWORD}")
        print(f"  Subscriptions: {len(created)}, transactions: {len(TRANSACTIONS)}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
