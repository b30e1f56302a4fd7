"""Tests for settings, error mapping and identity checks."""

import uuid

import pytest

import storefront
from storefront.config import Settings
from storefront.domain import Role
from storefront.errors import (
    Forbidden,
    NotFound,
    PersistenceFailure,
    PersistenceFailureKind,
    Unauthenticated,
    on_store_error,
)
from storefront.identity import User, require_role, require_user


class TestSettings:
    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings == Settings()
        assert settings.free_shipping_threshold == 50000

    def test_reads_prefixed_variables(self):
        settings = Settings.from_env(
            {
                "STOREFRONT_SHIPPING_FEE": "7500",
                "STOREFRONT_ORDER_TIMEOUT_SECONDS": "2.5",
                "STOREFRONT_ORDER_NUMBER_PREFIX": "SHOP",
                "SHIPPING_FEE": "1",
            }
        )
        assert settings.shipping_fee == 7500
        assert settings.order_timeout_seconds == 2.5
        assert settings.order_number_prefix == "SHOP"

    @pytest.mark.parametrize(
        "name,value",
        [
            ("STOREFRONT_SHIPPING_FEE", "-1"),
            ("STOREFRONT_ORDER_NUMBER_ATTEMPTS", "0"),
            ("STOREFRONT_ORDER_TIMEOUT_SECONDS", "0"),
            ("STOREFRONT_CACHE_SIZE", "0"),
        ],
    )
    def test_rejects_invalid_values(self, name, value):
        with pytest.raises(ValueError):
            Settings.from_env({name: value})


class TestOnStoreError:
    def test_storefront_errors_pass_through(self):
        error = NotFound("Product", 1)
        assert on_store_error(error) is error

    def test_unexpected(self):
        mapped = on_store_error(RuntimeError("disk on fire"))
        assert isinstance(mapped, PersistenceFailure)
        assert mapped.kind is PersistenceFailureKind.STORE
        assert mapped.message == "disk on fire"


class TestIdentity:
    def test_require_user(self):
        user = User(uuid.uuid4(), "a@example.com")
        assert require_user(user).value is user
        assert isinstance(require_user(None).error, Unauthenticated)

    def test_require_role(self):
        seller = User(uuid.uuid4(), "s@example.com", Role.SELLER)
        assert require_role(seller, (Role.SELLER, Role.ADMIN), "sell").value is seller
        customer = User(uuid.uuid4(), "c@example.com")
        error = require_role(customer, (Role.ADMIN,), "manage categories").error
        assert isinstance(error, Forbidden)
        assert error.message == "Not allowed to manage categories"

    def test_staff(self):
        assert User(uuid.uuid4(), "a@example.com", Role.ADMIN).is_staff
        assert not User(uuid.uuid4(), "c@example.com").is_staff


class TestPackage:
    def test_exports_resolve(self):
        assert all(hasattr(storefront, name) for name in storefront.__all__)
        assert not {"Lazy", "Pure", "LCR", "NoError"} & set(storefront.__all__)
