import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


def _id():
    return models.BigAutoField(
        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
    )


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("core", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Language",
            fields=[
                ("id", _id()),
                (
                    "code",
                    models.CharField(help_text="e.g. pt-BR", max_length=10, unique=True),
                ),
                ("name", models.CharField(max_length=100)),
                ("native_name", models.CharField(max_length=100)),
                ("flag_file", models.CharField(blank=True, max_length=100)),
                ("display_order", models.PositiveIntegerField(default=0)),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={"ordering": ["display_order", "name"]},
        ),
        migrations.CreateModel(
            name="RestaurantLanguage",
            fields=[
                ("id", _id()),
                ("display_order", models.PositiveIntegerField(default=1)),
                ("is_default", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "language",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="restaurant_links",
                        to="menu.language",
                    ),
                ),
                (
                    "restaurant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="languages",
                        to="core.restaurant",
                    ),
                ),
            ],
            options={
                "ordering": ["display_order"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("restaurant", "language"),
                        name="unique_restaurant_language",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(("is_default", True)),
                        fields=("restaurant",),
                        name="one_default_language_per_restaurant",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="MenuCategory",
            fields=[
                ("id", _id()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("display_order", models.PositiveIntegerField(default=0)),
                (
                    "status",
                    models.CharField(
                        choices=[("active", "Active"), ("inactive", "Inactive")],
                        default="active",
                        max_length=20,
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "parent",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="children",
                        to="menu.menucategory",
                    ),
                ),
                (
                    "restaurant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="%(class)ss",
                        to="core.restaurant",
                    ),
                ),
                (
                    "updated_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["display_order", "pk"],
                "verbose_name_plural": "menu categories",
                "indexes": [
                    models.Index(
                        fields=["restaurant", "status"],
                        name="category_rest_status_idx",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="MenuCategoryTranslation",
            fields=[
                ("id", _id()),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                (
                    "category",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="translations",
                        to="menu.menucategory",
                    ),
                ),
                (
                    "language",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="category_translations",
                        to="menu.language",
                    ),
                ),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(
                        fields=("category", "language"),
                        name="unique_category_translation",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="MenuItem",
            fields=[
                ("id", _id()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("sku", models.CharField(blank=True, max_length=100)),
                ("base_price", models.DecimalField(decimal_places=2, max_digits=10)),
                (
                    "preparation_time_minutes",
                    models.PositiveIntegerField(blank=True, null=True),
                ),
                (
                    "is_available",
                    models.BooleanField(
                        default=True, help_text="False = temporarily unavailable"
                    ),
                ),
                ("is_featured", models.BooleanField(default=False)),
                (
                    "restaurant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="%(class)ss",
                        to="core.restaurant",
                    ),
                ),
            ],
            options={
                "ordering": ["pk"],
                "indexes": [
                    models.Index(
                        fields=["restaurant", "is_available"],
                        name="item_rest_available_idx",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="MenuItemTranslation",
            fields=[
                ("id", _id()),
                ("language_code", models.CharField(max_length=10)),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("ingredients", models.TextField(blank=True)),
                ("preparation_method", models.TextField(blank=True)),
                (
                    "item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="translations",
                        to="menu.menuitem",
                    ),
                ),
            ],
            options={
                "ordering": ["language_code"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("item", "language_code"),
                        name="unique_item_translation_language",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="MenuItemCategory",
            fields=[
                ("id", _id()),
                ("display_order", models.PositiveIntegerField(default=0)),
                (
                    "category",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="item_links",
                        to="menu.menucategory",
                    ),
                ),
                (
                    "item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="category_links",
                        to="menu.menuitem",
                    ),
                ),
            ],
            options={
                "ordering": ["display_order"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("item", "category"), name="unique_item_category"
                    )
                ],
            },
        ),
        migrations.AddField(
            model_name="menuitem",
            name="categories",
            field=models.ManyToManyField(
                related_name="items",
                through="menu.MenuItemCategory",
                to="menu.menucategory",
            ),
        ),
    ]
