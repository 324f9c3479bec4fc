import uuid

import django.db.models.deletion
from django.db import migrations, models

import apps.web.restaurant.models


def _scoped(related_name):
    return [
        ("created_at", models.DateTimeField(auto_now_add=True)),
        ("updated_at", models.DateTimeField(auto_now=True)),
        (
            "restaurant",
            models.ForeignKey(
                on_delete=django.db.models.deletion.CASCADE,
                related_name=related_name,
                to="core.restaurant",
            ),
        ),
    ]


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("core", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="RestaurantLocation",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                *_scoped("%(class)ss"),
                ("name", models.CharField(max_length=255)),
                ("url_name", models.SlugField(max_length=100)),
                ("phone", models.CharField(blank=True, max_length=20)),
                ("whatsapp", models.CharField(blank=True, max_length=20)),
                ("address_zip_code", models.CharField(blank=True, max_length=10)),
                ("address_street", models.CharField(blank=True, max_length=255)),
                (
                    "address_street_number",
                    models.CharField(blank=True, max_length=20),
                ),
                ("address_complement", models.CharField(blank=True, max_length=255)),
                ("address_city", models.CharField(blank=True, max_length=100)),
                ("address_state", models.CharField(blank=True, max_length=50)),
                ("operating_hours", models.JSONField(blank=True, default=dict)),
                (
                    "selected_features",
                    models.JSONField(
                        blank=True,
                        default=list,
                        help_text='Feature flags (e.g., ["digital_menu", "waiter_call"])',
                    ),
                ),
                ("is_primary", models.BooleanField(default=False)),
                (
                    "status",
                    models.CharField(
                        choices=[("active", "Active"), ("inactive", "Inactive")],
                        default="active",
                        max_length=20,
                    ),
                ),
            ],
            options={
                "ordering": ["-is_primary", "name"],
                "indexes": [
                    models.Index(
                        fields=["restaurant", "status"],
                        name="location_rest_status_idx",
                    )
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("restaurant", "url_name"),
                        name="unique_location_url_name_per_restaurant",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(("is_primary", True)),
                        fields=("restaurant",),
                        name="one_primary_location_per_restaurant",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="BillingAddress",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                *_scoped("%(class)ss"),
                ("zip_code", models.CharField(blank=True, max_length=10)),
                ("street", models.CharField(blank=True, max_length=255)),
                ("street_number", models.CharField(blank=True, max_length=20)),
                ("complement", models.CharField(blank=True, max_length=255)),
                ("city", models.CharField(blank=True, max_length=100)),
                ("state", models.CharField(blank=True, max_length=50)),
                (
                    "same_as_restaurant",
                    models.BooleanField(
                        default=False,
                        help_text="Copied from the primary location address",
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "billing addresses",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("restaurant",),
                        name="unique_billing_address_per_restaurant",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="PaymentInfo",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                *_scoped("%(class)ss"),
                (
                    "card_token",
                    models.CharField(
                        help_text="Stripe PaymentMethod ID (pm_xxx)", max_length=255
                    ),
                ),
                ("card_brand", models.CharField(blank=True, max_length=20)),
                ("card_last4", models.CharField(blank=True, max_length=4)),
                (
                    "expiry_month",
                    models.PositiveSmallIntegerField(blank=True, null=True),
                ),
                (
                    "expiry_year",
                    models.PositiveSmallIntegerField(blank=True, null=True),
                ),
                ("cardholder_name", models.CharField(blank=True, max_length=255)),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={
                "verbose_name_plural": "payment info",
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("is_active", True)),
                        fields=("restaurant",),
                        name="one_active_payment_info_per_restaurant",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="RestaurantMedia",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                *_scoped("%(class)ss"),
                (
                    "media_type",
                    models.CharField(
                        choices=[
                            ("logo", "Logo"),
                            ("favicon", "Favicon"),
                            ("cover", "Cover"),
                            ("gallery", "Gallery"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "file",
                    models.FileField(
                        upload_to=apps.web.restaurant.models.media_upload_path
                    ),
                ),
                ("original_name", models.CharField(max_length=255)),
                ("mime_type", models.CharField(max_length=100)),
                ("size", models.PositiveIntegerField()),
                ("is_active", models.BooleanField(default=True)),
                (
                    "location",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="media",
                        to="restaurant.restaurantlocation",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "verbose_name_plural": "restaurant media",
                "indexes": [
                    models.Index(
                        fields=["restaurant", "media_type", "is_active"],
                        name="media_rest_type_active_idx",
                    )
                ],
            },
        ),
    ]
