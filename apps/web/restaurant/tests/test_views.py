"""
Tests for restaurant, location, payment and media views.
"""

from unittest.mock import patch

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import Client as DjangoTestClient
from django.urls import reverse

import pytest

from apps.web.core.models import Restaurant
from apps.web.core.tests.factories import RestaurantFactory
from apps.web.menu.tests.factories import translated_item
from apps.web.orders.tests.factories import OrderFactory
from apps.web.payments.services import PaymentError
from apps.web.restaurant.models import (
    LocationStatus,
    MediaType,
    PaymentInfo,
    RestaurantLocation,
    RestaurantMedia,
)
from apps.web.restaurant.tests.factories import (
    BillingAddressFactory,
    LocationFactory,
    PaymentInfoFactory,
)

PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01"
    b"\x08\x06\x00\x00\x00\x1f\x15\xc4\x89\x00\x00\x00\rIDATx\x9cc\x00\x01"
    b"\x00\x00\x05\x00\x01\r\n-\xb4\x00\x00\x00\x00IEND\xaeB`\x82"
)


@pytest.fixture
def http_client() -> DjangoTestClient:
    return DjangoTestClient()


def json_call(http_client, method, url, headers, data=None):
    return getattr(http_client, method)(
        url, data=data or {}, content_type="application/json", **headers
    )


@pytest.mark.django_db
class TestPublicRestaurantViews:
    """Listing, lookup by URL name and URL availability."""

    def test_list_shows_only_active(self, http_client, restaurant):
        RestaurantFactory(
            restaurant_name="Closed Diner", status=Restaurant.Status.INACTIVE
        )

        response = http_client.get("/api/v1/restaurants")

        assert response.status_code == 200
        names = [r["restaurant_name"] for r in response.json()["data"]]
        assert names == ["Tony's Pizza"]
        assert "email" not in response.json()["data"][0]

    def test_list_search(self, http_client, restaurant):
        RestaurantFactory(restaurant_name="Sushi Place")

        response = http_client.get("/api/v1/restaurants?search=tony")

        assert [r["restaurant_url_name"] for r in response.json()["data"]] == [
            "tonys-pizza"
        ]

    def test_superadmin_sees_every_status(
        self, http_client, auth_headers, superadmin, restaurant
    ):
        RestaurantFactory(
            restaurant_name="Pending Place", status=Restaurant.Status.PENDING
        )

        response = http_client.get(
            "/api/v1/restaurants?status=pending", **auth_headers(superadmin)
        )

        assert [r["restaurant_name"] for r in response.json()["data"]] == [
            "Pending Place"
        ]

    def test_by_url(self, http_client, restaurant, location):
        LocationFactory(restaurant=restaurant, status=LocationStatus.INACTIVE)

        response = http_client.get(
            reverse("v1:restaurants:by_url", args=["tonys-pizza"])
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["restaurant_name"] == "Tony's Pizza"
        assert [loc["url_name"] for loc in data["locations"]] == ["centro"]
        assert data["favicon_url"] is None

    def test_by_url_hides_inactive_restaurants(self, http_client):
        RestaurantFactory(restaurant_url_name="gone", status=Restaurant.Status.INACTIVE)

        response = http_client.get(reverse("v1:restaurants:by_url", args=["gone"]))

        assert response.status_code == 404

    def test_check_url(self, http_client, restaurant):
        taken = http_client.get(
            reverse("v1:restaurants:check_url", args=["Tonys-Pizza"])
        )
        free = http_client.get(reverse("v1:restaurants:check_url", args=["new-place"]))
        own = http_client.get(
            reverse("v1:restaurants:check_url", args=["tonys-pizza"])
            + f"?exclude_id={restaurant.pk}"
        )

        assert taken.json()["data"] == {"url_name": "tonys-pizza", "available": False}
        assert free.json()["data"]["available"] is True
        assert own.json()["data"]["available"] is True

    def test_check_url_rejects_malformed_exclude_id(self, http_client, restaurant):
        response = http_client.get(
            reverse("v1:restaurants:check_url", args=["tonys-pizza"])
            + "?exclude_id=abc"
        )

        assert response.status_code == 400
        errors = response.json()["error"]["details"]["errors"]
        assert errors[0]["field"] == "exclude_id"


@pytest.mark.django_db
class TestRestaurantDetail:
    """GET/PUT/DELETE /api/v1/restaurants/{id} and stats."""

    def url(self, restaurant):
        return reverse("v1:restaurants:detail", args=[restaurant.pk])

    def test_member_sees_private_fields(
        self, http_client, auth_headers, waiter, restaurant
    ):
        BillingAddressFactory(restaurant=restaurant)
        PaymentInfoFactory(restaurant=restaurant)

        response = http_client.get(self.url(restaurant), **auth_headers(waiter))

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["email"] == restaurant.email
        assert data["billing_address"]["street"] == "Av. Paulista"
        assert data["payment"]["card_last4"] == "4242"
        assert "card_token" not in data["payment"]

    def test_other_restaurant_is_forbidden(self, http_client, auth_headers, waiter):
        other = RestaurantFactory()

        response = http_client.get(self.url(other), **auth_headers(waiter))

        assert response.status_code == 403

    def test_admin_updates_profile(
        self, http_client, auth_headers, restaurant_admin, restaurant
    ):
        response = json_call(
            http_client,
            "put",
            self.url(restaurant),
            auth_headers(restaurant_admin),
            {"restaurantName": "Tony's Pizzeria", "status": "inactive"},
        )

        assert response.status_code == 200
        restaurant.refresh_from_db()
        assert restaurant.restaurant_name == "Tony&#x27;s Pizzeria"
        assert restaurant.status == Restaurant.Status.ACTIVE

    def test_superadmin_can_change_status(
        self, http_client, auth_headers, superadmin, restaurant
    ):
        json_call(
            http_client,
            "patch",
            self.url(restaurant),
            auth_headers(superadmin),
            {"status": "inactive"},
        )

        restaurant.refresh_from_db()
        assert restaurant.status == Restaurant.Status.INACTIVE

    def test_waiter_cannot_update(self, http_client, auth_headers, waiter, restaurant):
        response = json_call(
            http_client,
            "put",
            self.url(restaurant),
            auth_headers(waiter),
            {"restaurantName": "Hijacked"},
        )

        assert response.status_code == 403
        assert response.json()["error"]["message"] == (
            "You do not have permission to modify this restaurant"
        )

    def test_url_name_conflict(
        self, http_client, auth_headers, restaurant_admin, restaurant
    ):
        RestaurantFactory(restaurant_url_name="taken")

        response = json_call(
            http_client,
            "put",
            self.url(restaurant),
            auth_headers(restaurant_admin),
            {"restaurantUrlName": "taken"},
        )

        assert response.status_code == 409

    def test_plan_downgrade_checks_locations(
        self, http_client, auth_headers, restaurant_admin, restaurant, location
    ):
        restaurant.subscription_plan = Restaurant.Plan.PROFESSIONAL
        restaurant.save()
        LocationFactory(restaurant=restaurant)

        response = json_call(
            http_client,
            "put",
            self.url(restaurant),
            auth_headers(restaurant_admin),
            {"subscriptionPlan": "starter"},
        )

        assert response.status_code == 400

    def test_delete_is_soft(
        self, http_client, auth_headers, restaurant_admin, restaurant, location
    ):
        response = http_client.delete(
            self.url(restaurant), **auth_headers(restaurant_admin)
        )

        assert response.status_code == 200
        restaurant.refresh_from_db()
        location.refresh_from_db()
        assert restaurant.status == Restaurant.Status.INACTIVE
        assert location.status == LocationStatus.INACTIVE

    def test_stats(self, http_client, auth_headers, waiter, restaurant, customer):
        translated_item(restaurant, "Margherita")
        translated_item(restaurant, "Calabresa", is_available=False)
        OrderFactory(restaurant=restaurant, user=customer)

        response = http_client.get(
            reverse("v1:restaurants:stats", args=[restaurant.pk]),
            **auth_headers(waiter),
        )

        data = response.json()["data"]
        assert data["locations"] == {"total": 1, "active": 1}
        assert data["menu_items"] == {"total": 2, "available": 1}
        assert data["users"]["total"] == 1
        assert data["orders"] == {"total": 1, "by_status": {"pending": 1}}


@pytest.mark.django_db
class TestUpdatePayment:
    """PUT /api/v1/restaurants/{id}/payment."""

    @patch("apps.web.restaurant.services.detach_payment_method")
    @patch("apps.web.restaurant.services.describe_payment_method")
    def test_replaces_card_and_detaches_old_one(
        self,
        mock_describe,
        mock_detach,
        http_client,
        auth_headers,
        restaurant_admin,
        restaurant,
    ):
        old = PaymentInfoFactory(restaurant=restaurant, card_token="pm_old")
        mock_describe.return_value = {
            "card_token": "pm_new",
            "card_brand": "mastercard",
            "card_last4": "4444",
            "expiry_month": 1,
            "expiry_year": 2031,
        }

        response = json_call(
            http_client,
            "put",
            reverse("v1:restaurants:payment", args=[restaurant.pk]),
            auth_headers(restaurant_admin),
            {"paymentMethodToken": "pm_new"},
        )

        assert response.status_code == 200
        assert response.json()["data"]["card_last4"] == "4444"
        old.refresh_from_db()
        assert old.is_active is False
        active = PaymentInfo.objects.get(restaurant=restaurant, is_active=True)
        assert active.card_token == "pm_new"
        mock_detach.assert_called_once_with("pm_old")

    @patch("apps.web.restaurant.services.detach_payment_method")
    @patch("apps.web.restaurant.services.describe_payment_method")
    def test_detach_failure_keeps_new_card(
        self,
        mock_describe,
        mock_detach,
        http_client,
        auth_headers,
        restaurant_admin,
        restaurant,
    ):
        PaymentInfoFactory(restaurant=restaurant, card_token="pm_old")
        mock_describe.return_value = {"card_token": "pm_new", "card_last4": "4444"}
        mock_detach.side_effect = PaymentError("Already detached")

        response = json_call(
            http_client,
            "put",
            reverse("v1:restaurants:payment", args=[restaurant.pk]),
            auth_headers(restaurant_admin),
            {"paymentMethodToken": "pm_new"},
        )

        assert response.status_code == 200
        assert PaymentInfo.objects.get(is_active=True).card_token == "pm_new"

    def test_token_format_is_validated(
        self, http_client, auth_headers, restaurant_admin, restaurant
    ):
        response = json_call(
            http_client,
            "put",
            reverse("v1:restaurants:payment", args=[restaurant.pk]),
            auth_headers(restaurant_admin),
            {"paymentMethodToken": "4242424242424242"},
        )

        assert response.status_code == 400


@pytest.mark.django_db
class TestLocations:
    """Location endpoints."""

    def new_location(self, url_name="norte", **extra):
        return {"name": "Norte", "urlName": url_name, **extra}

    def test_list(self, http_client, auth_headers, waiter, restaurant, location):
        LocationFactory(restaurant=restaurant, status=LocationStatus.INACTIVE)

        everything = http_client.get(
            reverse("v1:restaurants:locations", args=[restaurant.pk]),
            **auth_headers(waiter),
        )
        active = http_client.get(
            reverse("v1:restaurants:locations", args=[restaurant.pk])
            + "?status=active",
            **auth_headers(waiter),
        )

        assert len(everything.json()["data"]) == 2
        assert [loc["url_name"] for loc in active.json()["data"]] == ["centro"]

    def test_starter_plan_allows_one_location(
        self, http_client, auth_headers, restaurant_admin, restaurant, location
    ):
        response = json_call(
            http_client,
            "post",
            reverse("v1:restaurants:locations", args=[restaurant.pk]),
            auth_headers(restaurant_admin),
            self.new_location(),
        )

        assert response.status_code == 400
        assert "starter plan" in response.json()["error"]["message"]

    def test_second_location_converts_to_multi(
        self, http_client, auth_headers, restaurant_admin, restaurant, location
    ):
        restaurant.subscription_plan = Restaurant.Plan.PROFESSIONAL
        restaurant.save()

        response = json_call(
            http_client,
            "post",
            reverse("v1:restaurants:locations", args=[restaurant.pk]),
            auth_headers(restaurant_admin),
            self.new_location(address={"zipCode": "02000000", "city": "São Paulo"}),
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["is_primary"] is False
        assert data["address"]["zip_code"] == "02000000"
        restaurant.refresh_from_db()
        assert restaurant.business_type == Restaurant.BusinessType.MULTI

    def test_new_primary_location_demotes_old_one(
        self, http_client, auth_headers, restaurant_admin, restaurant, location
    ):
        restaurant.subscription_plan = Restaurant.Plan.PROFESSIONAL
        restaurant.save()

        json_call(
            http_client,
            "post",
            reverse("v1:restaurants:locations", args=[restaurant.pk]),
            auth_headers(restaurant_admin),
            self.new_location(isPrimary=True),
        )

        location.refresh_from_db()
        assert location.is_primary is False
        assert RestaurantLocation.objects.get(is_primary=True).url_name == "norte"

    def test_duplicate_url_name(
        self, http_client, auth_headers, restaurant_admin, restaurant, location
    ):
        restaurant.subscription_plan = Restaurant.Plan.PROFESSIONAL
        restaurant.save()

        response = json_call(
            http_client,
            "post",
            reverse("v1:restaurants:locations", args=[restaurant.pk]),
            auth_headers(restaurant_admin),
            self.new_location(url_name="centro"),
        )

        assert response.status_code == 409

    def test_get_location(self, http_client, auth_headers, waiter, location):
        response = http_client.get(
            reverse("v1:locations:detail", args=[location.pk]), **auth_headers(waiter)
        )

        assert response.status_code == 200
        assert response.json()["data"]["operating_hours"]["monday"]["open"] == "11:00"

    def test_update_location(
        self, http_client, auth_headers, restaurant_admin, location
    ):
        response = json_call(
            http_client,
            "patch",
            reverse("v1:locations:detail", args=[location.pk]),
            auth_headers(restaurant_admin),
            {"phone": "11911112222", "operatingHours": {"sunday": {"closed": True}}},
        )

        assert response.status_code == 200
        location.refresh_from_db()
        assert location.phone == "11911112222"
        assert location.operating_hours == {"sunday": {"closed": True}}
        assert location.name.startswith("Location")

    def test_invalid_hours_are_rejected(
        self, http_client, auth_headers, restaurant_admin, location
    ):
        response = json_call(
            http_client,
            "patch",
            reverse("v1:locations:detail", args=[location.pk]),
            auth_headers(restaurant_admin),
            {"operatingHours": {"monday": {"open": "25:00", "close": "23:00"}}},
        )

        assert response.status_code == 400

    def test_waiter_cannot_update_location(
        self, http_client, auth_headers, waiter, location
    ):
        response = json_call(
            http_client,
            "patch",
            reverse("v1:locations:detail", args=[location.pk]),
            auth_headers(waiter),
            {"phone": "11911112222"},
        )

        assert response.status_code == 403

    def test_primary_location_cannot_be_deactivated(
        self, http_client, auth_headers, restaurant_admin, location
    ):
        response = http_client.delete(
            reverse("v1:locations:detail", args=[location.pk]),
            **auth_headers(restaurant_admin),
        )

        assert response.status_code == 400
        assert response.json()["error"]["message"] == (
            "The primary location cannot be deactivated"
        )

    def test_deactivate_secondary_location(
        self, http_client, auth_headers, restaurant_admin, restaurant
    ):
        secondary = LocationFactory(restaurant=restaurant)

        response = http_client.delete(
            reverse("v1:locations:detail", args=[secondary.pk]),
            **auth_headers(restaurant_admin),
        )

        assert response.status_code == 200
        secondary.refresh_from_db()
        assert secondary.status == LocationStatus.INACTIVE

    def test_set_primary(
        self, http_client, auth_headers, restaurant_admin, restaurant, location
    ):
        secondary = LocationFactory(restaurant=restaurant)

        response = http_client.post(
            reverse("v1:locations:primary", args=[secondary.pk]),
            **auth_headers(restaurant_admin),
        )

        assert response.status_code == 200
        location.refresh_from_db()
        secondary.refresh_from_db()
        assert secondary.is_primary is True
        assert location.is_primary is False

    def test_inactive_location_cannot_be_primary(
        self, http_client, auth_headers, restaurant_admin, restaurant
    ):
        closed = LocationFactory(restaurant=restaurant, status=LocationStatus.INACTIVE)

        response = http_client.post(
            reverse("v1:locations:primary", args=[closed.pk]),
            **auth_headers(restaurant_admin),
        )

        assert response.status_code == 400

    def test_unknown_location(self, http_client, auth_headers, restaurant_admin):
        response = http_client.get(
            reverse(
                "v1:locations:detail", args=["00000000-0000-0000-0000-000000000000"]
            ),
            **auth_headers(restaurant_admin),
        )

        assert response.status_code == 404


@pytest.mark.django_db
class TestMedia:
    """Media upload, listing and removal."""

    @pytest.fixture(autouse=True)
    def _media_root(self, settings, tmp_path):
        settings.MEDIA_ROOT = str(tmp_path)

    def upload(self, http_client, headers, restaurant, media_type="logo", **extra):
        png = SimpleUploadedFile("logo.png", PNG_BYTES, content_type="image/png")
        return http_client.post(
            reverse("v1:restaurants:media", args=[restaurant.pk]),
            {"file": png, "media_type": media_type, **extra},
            **headers,
        )

    def test_upload_logo(
        self, http_client, auth_headers, restaurant_admin, restaurant
    ):
        response = self.upload(http_client, auth_headers(restaurant_admin), restaurant)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["media_type"] == "logo"
        assert data["mime_type"] == "image/png"
        assert data["size"] == len(PNG_BYTES)
        assert data["url"].startswith(f"/media/restaurants/{restaurant.pk}/logo/")

    def test_new_logo_replaces_previous(
        self, http_client, auth_headers, restaurant_admin, restaurant
    ):
        headers = auth_headers(restaurant_admin)
        self.upload(http_client, headers, restaurant)
        self.upload(http_client, headers, restaurant)

        logos = RestaurantMedia.objects.filter(
            restaurant=restaurant, media_type=MediaType.LOGO
        )
        assert logos.count() == 2
        assert logos.filter(is_active=True).count() == 1

    def test_gallery_keeps_every_image(
        self, http_client, auth_headers, restaurant_admin, restaurant
    ):
        headers = auth_headers(restaurant_admin)
        self.upload(http_client, headers, restaurant, media_type="gallery")
        self.upload(http_client, headers, restaurant, media_type="gallery")

        response = http_client.get(
            reverse("v1:restaurants:media", args=[restaurant.pk])
            + "?media_type=gallery",
            **headers,
        )

        assert len(response.json()["data"]) == 2

    def test_location_media(
        self, http_client, auth_headers, restaurant_admin, restaurant, location
    ):
        response = self.upload(
            http_client,
            auth_headers(restaurant_admin),
            restaurant,
            media_type="cover",
            location_id=str(location.pk),
        )

        assert response.status_code == 201
        assert response.json()["data"]["location_id"] == str(location.pk)

    def test_rejects_unknown_type_and_mime(
        self, http_client, auth_headers, restaurant_admin, restaurant
    ):
        text = SimpleUploadedFile("notes.txt", b"hello", content_type="text/plain")

        response = http_client.post(
            reverse("v1:restaurants:media", args=[restaurant.pk]),
            {"file": text, "media_type": "poster"},
            **auth_headers(restaurant_admin),
        )

        assert response.status_code == 400
        fields = {e["field"] for e in response.json()["error"]["details"]["errors"]}
        assert fields == {"media_type", "file"}

    def test_rejects_large_files(
        self, http_client, auth_headers, restaurant_admin, restaurant, settings
    ):
        settings.MAX_UPLOAD_SIZE = 10

        response = self.upload(http_client, auth_headers(restaurant_admin), restaurant)

        assert response.status_code == 400

    def test_rejects_svg_with_script(
        self, http_client, auth_headers, restaurant_admin, restaurant
    ):
        svg = SimpleUploadedFile(
            "logo.svg",
            b'<svg xmlns="http://www.w3.org/2000/svg">'
            b"<script>alert(document.cookie)</script></svg>",
            content_type="image/svg+xml",
        )

        response = http_client.post(
            reverse("v1:restaurants:media", args=[restaurant.pk]),
            {"file": svg, "media_type": "logo"},
            **auth_headers(restaurant_admin),
        )

        assert response.status_code == 400
        errors = response.json()["error"]["details"]["errors"]
        assert errors == [{"field": "file", "message": "Unsupported file type"}]
        assert not RestaurantMedia.objects.exists()

    def test_malformed_location_id_is_rejected(
        self, http_client, auth_headers, restaurant_admin, restaurant
    ):
        response = self.upload(
            http_client,
            auth_headers(restaurant_admin),
            restaurant,
            location_id="abc",
        )

        assert response.status_code == 400
        errors = response.json()["error"]["details"]["errors"]
        assert errors == [{"field": "location_id", "message": "Must be a valid UUID"}]
        assert not RestaurantMedia.objects.exists()

    def test_file_is_required(
        self, http_client, auth_headers, restaurant_admin, restaurant
    ):
        response = http_client.post(
            reverse("v1:restaurants:media", args=[restaurant.pk]),
            {"media_type": "logo"},
            **auth_headers(restaurant_admin),
        )

        assert response.status_code == 400

    def test_delete_media(
        self, http_client, auth_headers, restaurant_admin, restaurant
    ):
        headers = auth_headers(restaurant_admin)
        media_id = self.upload(http_client, headers, restaurant).json()["data"]["id"]

        first = http_client.delete(
            reverse("v1:restaurants:media_detail", args=[restaurant.pk, media_id]),
            **headers,
        )
        second = http_client.delete(
            reverse("v1:restaurants:media_detail", args=[restaurant.pk, media_id]),
            **headers,
        )

        assert first.status_code == 200
        assert second.status_code == 404

    def test_favicon_redirects_to_tenant_upload(
        self, http_client, auth_headers, restaurant_admin, restaurant
    ):
        self.upload(
            http_client,
            auth_headers(restaurant_admin),
            restaurant,
            media_type="favicon",
        )

        response = http_client.get(
            reverse("favicon"), HTTP_X_RESTAURANT_SLUG="tonys-pizza"
        )

        assert response.status_code == 302
        assert f"/restaurants/{restaurant.pk}/favicon/" in response["Location"]

    def test_favicon_falls_back_to_default(self, http_client, db):
        response = http_client.get(reverse("favicon"))

        assert response.status_code == 302
        assert response["Location"] == "/static/favicon.ico"
