"""
Create the database schema and load reference data.

Usage:
    uv run python apps/web/manage.py setup_database
    uv run python apps/web/manage.py setup_database --env production
    uv run python apps/web/manage.py setup_database --migrations-only
    uv run python apps/web/manage.py setup_database --seed-only

Reference data (roles and languages) is loaded in every environment. The demo
restaurant is only loaded for development.
"""

import logging
from decimal import Decimal
from typing import Any

from django.conf import settings
from django.core.management import call_command
from django.core.management.base import BaseCommand, CommandError
from django.db import connections, transaction

import psycopg
from psycopg import sql

from apps.web.accounts.models import Role, UserLocationAssignment, UserRole
from apps.web.accounts.roles import ensure_role, seed_roles
from apps.web.core.models import Restaurant, User
from apps.web.menu.models import (
    Language,
    MenuCategory,
    MenuCategoryTranslation,
    MenuItem,
    MenuItemCategory,
    MenuItemTranslation,
    RestaurantLanguage,
)
from apps.web.menu.seeds import seed_languages
from apps.web.restaurant.models import RestaurantLocation

logger = logging.getLogger(__name__)

ENVIRONMENTS = ("development", "test", "production")

DEMO_URL_NAME = "demo"
DEMO_PASSWORD = "demo-password-123"

# (pt-BR, en) category names -> [(sku, price, pt-BR name, en name)]
DEMO_MENU = {
    ("Entradas", "Starters"): [
        ("ENT-001", "24.90", "Bruschetta", "Bruschetta"),
        ("ENT-002", "32.00", "Bolinho de bacalhau", "Cod fritters"),
    ],
    ("Pratos principais", "Main courses"): [
        ("PRI-001", "58.90", "Feijoada", "Black bean stew"),
        ("PRI-002", "64.00", "Moqueca de peixe", "Fish moqueca"),
    ],
    ("Bebidas", "Drinks"): [
        ("BEB-001", "9.50", "Suco de laranja", "Orange juice"),
        ("BEB-002", "18.00", "Caipirinha", "Caipirinha"),
    ],
}


class Command(BaseCommand):
    help = "Run migrations and load roles, languages and demo data"

    def add_arguments(self, parser: Any) -> None:
        parser.add_argument(
            "--env",
            choices=ENVIRONMENTS,
            default=None,
            help="Target environment (default: ENVIRONMENT setting)",
        )
        group = parser.add_mutually_exclusive_group()
        group.add_argument(
            "--migrations-only",
            action="store_true",
            help="Create the database and apply migrations, skip seeds",
        )
        group.add_argument(
            "--seed-only",
            action="store_true",
            help="Load seed data into an already migrated database",
        )

    def handle(self, *_args: Any, **options: Any) -> None:
        env = options["env"] or settings.ENVIRONMENT
        if env not in ENVIRONMENTS:
            raise CommandError(f"Unknown environment: {env}")

        self.stdout.write(f"Setting up database for {env}...")

        if not options["seed_only"]:
            self.ensure_database()
            call_command("migrate", interactive=False, verbosity=options["verbosity"])

        if not options["migrations_only"]:
            self.seed(env)

        self.stdout.write(self.style.SUCCESS("Database setup complete"))

    def ensure_database(self) -> None:
        """Create the configured PostgreSQL database when it does not exist yet."""
        db = connections["default"].settings_dict
        if connections["default"].vendor != "postgresql":
            return

        params = {
            "host": db.get("HOST") or "localhost",
            "port": db.get("PORT") or 5432,
            "user": db.get("USER") or None,
            "password": db.get("PASSWORD") or None,
            "dbname": "postgres",
        }
        try:
            with psycopg.connect(**params, autocommit=True) as conn:
                exists = conn.execute(
                    "SELECT 1 FROM pg_database WHERE datname = %s", (db["NAME"],)
                ).fetchone()
                if exists:
                    self.stdout.write(f"  database {db['NAME']} already exists")
                    return
                conn.execute(
                    sql.SQL("CREATE DATABASE {} ENCODING 'UTF8'").format(
                        sql.Identifier(db["NAME"])
                    )
                )
        except psycopg.Error as e:
            raise CommandError(f"Could not create database {db['NAME']}: {e}") from e

        logger.info("Created database %s", db["NAME"])
        self.stdout.write(f"  created database {db['NAME']}")

    def seed(self, env: str) -> None:
        roles = seed_roles()
        languages = seed_languages()
        self.stdout.write(f"  roles: {roles} created")
        self.stdout.write(f"  languages: {languages} created")

        if env == "development":
            if self.seed_demo():
                self.stdout.write(f"  demo restaurant: /{DEMO_URL_NAME}")
            else:
                self.stdout.write("  demo restaurant already exists")

    @transaction.atomic
    def seed_demo(self) -> bool:
        """Load an active demo restaurant with an administrator and a menu."""
        if Restaurant.objects.filter(restaurant_url_name=DEMO_URL_NAME).exists():
            return False

        restaurant = Restaurant.objects.create(
            restaurant_url_name=DEMO_URL_NAME,
            restaurant_name="Demo Restaurant",
            owner_name="Demo Owner",
            email="owner@demo.example.com",
            cuisine_type="Brazilian",
            status=Restaurant.Status.ACTIVE,
            email_confirmed=True,
            terms_accepted=True,
        )
        location = RestaurantLocation.objects.create(
            restaurant=restaurant,
            name="Centro",
            url_name="centro",
            address_city="São Paulo",
            address_state="SP",
            is_primary=True,
        )

        admin = User(
            username="demo-admin",
            email="owner@demo.example.com",
            full_name="Demo Owner",
            restaurant=restaurant,
            status=User.Status.ACTIVE,
            email_confirmed=True,
        )
        admin.set_password(DEMO_PASSWORD)
        admin.save()
        UserRole.objects.create(
            user=admin,
            role=ensure_role(Role.RESTAURANT_ADMINISTRATOR),
            restaurant=restaurant,
            is_primary=True,
        )
        UserLocationAssignment.objects.create(
            user=admin, location=location, is_primary=True
        )

        portuguese = Language.objects.get(code="pt-BR")
        english = Language.objects.get(code="en")
        RestaurantLanguage.objects.bulk_create(
            [
                RestaurantLanguage(
                    restaurant=restaurant,
                    language=portuguese,
                    display_order=1,
                    is_default=True,
                ),
                RestaurantLanguage(
                    restaurant=restaurant, language=english, display_order=2
                ),
            ]
        )

        for position, ((pt_name, en_name), items) in enumerate(DEMO_MENU.items()):
            category = MenuCategory.objects.create(
                restaurant=restaurant, display_order=(position + 1) * 10
            )
            MenuCategoryTranslation.objects.bulk_create(
                [
                    MenuCategoryTranslation(
                        category=category, language=portuguese, name=pt_name
                    ),
                    MenuCategoryTranslation(
                        category=category, language=english, name=en_name
                    ),
                ]
            )
            for order, (sku, price, item_pt, item_en) in enumerate(items):
                item = MenuItem.objects.create(
                    restaurant=restaurant, sku=sku, base_price=Decimal(price)
                )
                MenuItemTranslation.objects.bulk_create(
                    [
                        MenuItemTranslation(
                            item=item, language_code="pt-BR", name=item_pt
                        ),
                        MenuItemTranslation(
                            item=item, language_code="en", name=item_en
                        ),
                    ]
                )
                MenuItemCategory.objects.create(
                    item=item, category=category, display_order=(order + 1) * 10
                )

        logger.info("Seeded demo restaurant %s", restaurant.pk)
        return True
