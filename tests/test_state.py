import math
import os
import sys
import unittest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from db.models import PLACEHOLDER_IMAGE, AuthForm, Product, ProductForm, User  # noqa: E402
from db.storage import MemoryStorage  # noqa: E402
from utils.errors import (  # noqa: E402
    DuplicateUsernameError,
    ImportFormatError,
    RoleMismatchError,
    UnknownUserError,
    ValidationError,
)
from utils.state import StorefrontState  # noqa: E402

NOW = 1_700_000_000.0  # seconds, as time.time() returns


def fixed_clock():
    return NOW


class StateTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.storage = MemoryStorage()
        self.state = StorefrontState(storage=self.storage, clock=fixed_clock)

    def fresh_state(self, **kwargs) -> StorefrontState:
        """A second process start over the same storage."""
        return StorefrontState(storage=self.storage, clock=fixed_clock, **kwargs)

    # ---------- Auth ----------

    async def test_signup_adds_user_and_starts_session(self):
        user = await self.state.signup(AuthForm("alice", "Alice", "buyer"))

        self.assertEqual(user, User("alice", "Alice", "buyer"))
        self.assertEqual(self.state.user, user)
        self.assertEqual(self.state.role, "buyer")
        self.assertEqual(await self.storage.load_users(), [user])
        self.assertEqual(await self.storage.load_current_user(), user)

    async def test_signup_duplicate_username_fails(self):
        await self.state.signup(AuthForm("alice", "Alice", "buyer"))
        await self.state.logout()

        with self.assertRaises(DuplicateUsernameError) as ctx:
            await self.state.signup(AuthForm("alice", "Other", "seller"))
        self.assertEqual(str(ctx.exception), "Username already exists!")
        self.assertEqual(len(await self.storage.load_users()), 1)
        self.assertIsNone(self.state.user)

    async def test_usernames_are_case_sensitive(self):
        await self.state.signup(AuthForm("alice", "alice", "buyer"))
        await self.state.signup(AuthForm("Alice", "Alice", "seller"))
        self.assertEqual(len(await self.storage.load_users()), 2)

    async def test_signup_rejects_blank_username(self):
        with self.assertRaises(ValidationError):
            await self.state.signup(AuthForm("", "", "buyer"))
        self.assertEqual(await self.storage.load_users(), [])
        self.assertIsNone(self.state.user)

    async def test_login_with_matching_role(self):
        stored = await self.state.signup(AuthForm("bob", "Bob", "seller"))
        await self.state.logout()

        user = await self.state.login(AuthForm("bob", "bob", "seller"))
        self.assertEqual(user, stored)
        self.assertEqual(user.name, "Bob")
        self.assertEqual(self.state.user, stored)

    async def test_login_role_mismatch_reports_stored_role(self):
        await self.state.signup(AuthForm("bob", "Bob", "seller"))
        await self.state.logout()

        with self.assertRaises(RoleMismatchError) as ctx:
            await self.state.login(AuthForm("bob", "bob", "buyer"))
        self.assertEqual(ctx.exception.actual_role, "seller")
        self.assertEqual(str(ctx.exception), "Role mismatch! This account is a seller")
        self.assertIsNone(self.state.user)

    async def test_login_unknown_user(self):
        with self.assertRaises(UnknownUserError) as ctx:
            await self.state.login(AuthForm("ghost", "ghost", "buyer"))
        self.assertEqual(str(ctx.exception), "Account not found. Please sign up.")
        self.assertIsNone(await self.storage.load_current_user())

    async def test_authenticate_follows_auth_mode(self):
        self.assertEqual(self.state.auth_mode, "login")
        with self.assertRaises(UnknownUserError):
            await self.state.authenticate(AuthForm("carol", "carol", "buyer"))

        self.assertEqual(self.state.toggle_auth_mode(), "signup")
        await self.state.authenticate(AuthForm("carol", "carol", "buyer"))
        self.assertEqual(self.state.user.username, "carol")

        self.state.set_auth_mode("login")
        await self.state.logout()
        await self.state.authenticate(AuthForm("carol", "carol", "buyer"))
        self.assertEqual(self.state.user.username, "carol")

    async def test_logout_clears_session_and_snapshot(self):
        await self.state.signup(AuthForm("alice", "alice", "buyer"))
        await self.state.logout()
        self.assertIsNone(self.state.user)
        self.assertIsNone(await self.storage.load_current_user())

        # logging out twice is fine
        await self.state.logout()
        self.assertIsNone(self.state.user)

    async def test_restart_resumes_session_and_catalog(self):
        await self.state.signup(AuthForm("alice", "Alice", "seller"))
        await self.state.add_product(ProductForm("Mug", "9.99", ""))
        self.state.add_to_cart(self.state.products[0])

        restarted = self.fresh_state()
        user = await restarted.restore()

        self.assertEqual(user, User("alice", "Alice", "seller"))
        self.assertEqual(restarted.user, user)
        self.assertEqual(restarted.products, self.state.products)
        self.assertEqual(restarted.cart, {})
        self.assertEqual(restarted.auth_mode, "login")

    async def test_restore_without_snapshot(self):
        self.assertIsNone(await self.state.restore())
        self.assertEqual(self.state.products, [])

    async def test_restore_does_not_revalidate_snapshot(self):
        await self.storage.save_current_user(User("orphan", "Orphan", "buyer"))
        self.assertEqual((await self.state.restore()).username, "orphan")

    # ---------- Cart ----------

    async def test_cart_quantities_and_total(self):
        mug = Product(1, "Mug", 9.99)
        pen = Product(2, "Pen", 5.0)

        self.assertEqual(self.state.add_to_cart(mug), 1)
        self.assertEqual(self.state.add_to_cart(mug), 2)
        self.assertEqual(self.state.add_to_cart(pen), 1)
        self.assertEqual(self.state.cart_count, 2)
        self.assertAlmostEqual(self.state.total, 24.98)

        self.assertTrue(self.state.remove_from_cart(mug.id))
        self.assertEqual(self.state.qty(mug.id), 1)
        self.assertTrue(self.state.remove_from_cart(mug.id))
        self.assertNotIn(mug.id, self.state.cart)
        self.assertAlmostEqual(self.state.total, 5.0)

    async def test_remove_absent_line_signals_not_found(self):
        self.assertFalse(self.state.remove_from_cart(42))
        self.assertEqual(self.state.cart, {})

    async def test_cart_is_kept_on_logout_by_default(self):
        await self.state.signup(AuthForm("alice", "alice", "buyer"))
        self.state.add_to_cart(Product(1, "Mug", 9.99))
        await self.state.logout()
        self.assertEqual(self.state.qty(1), 1)

    async def test_cart_can_be_cleared_on_logout(self):
        state = self.fresh_state(clear_cart_on_logout=True)
        await state.signup(AuthForm("alice", "alice", "buyer"))
        state.add_to_cart(Product(1, "Mug", 9.99))
        await state.logout()
        self.assertEqual(state.cart, {})

    async def test_cart_lines_are_snapshots(self):
        self.state.add_to_cart(Product(1, "Mug", 9.99))
        self.state.add_to_cart(Product(1, "Renamed Mug", 1.0))
        line = self.state.cart[1]
        self.assertEqual((line.name, line.price, line.qty), ("Mug", 9.99, 2))

    # ---------- Catalog ----------

    async def test_add_product_manually(self):
        product = await self.state.add_product(ProductForm("Mug", "9.99", ""))

        self.assertEqual(product, Product(int(NOW * 1000), "Mug", 9.99, PLACEHOLDER_IMAGE))
        self.assertEqual(self.state.products, [product])
        self.assertEqual(await self.storage.load_products(), [product])

    async def test_add_product_keeps_unparseable_price(self):
        product = await self.state.add_product(
            ProductForm("Thing", "abc", "https://example.com/t.png")
        )
        self.assertTrue(math.isnan(product.price))
        self.assertEqual(product.image, "https://example.com/t.png")

    async def test_ids_stay_unique_within_same_millisecond(self):
        first = await self.state.add_product(ProductForm("A", "1", ""))
        second = await self.state.add_product(ProductForm("B", "2", ""))
        self.assertEqual(second.id, first.id + 1)

    async def test_bulk_import(self):
        await self.state.add_product(ProductForm("Existing", "1", ""))

        imported = await self.state.import_products(
            '[{"name":"Mug","price":"9.99"},{"name":"Pen","price":5}]'
        )

        self.assertEqual(len(imported), 2)
        self.assertEqual([p.name for p in imported], ["Mug", "Pen"])
        self.assertEqual(imported[0].price, 9.99)
        self.assertEqual(imported[1].price, 5.0)
        self.assertEqual(imported[1].id, imported[0].id + 1)
        self.assertEqual(len({p.id for p in self.state.products}), 3)
        self.assertEqual(self.state.products[1:], imported)
        self.assertEqual(await self.storage.load_products(), self.state.products)

    async def test_bulk_import_defaults_and_malformed_items(self):
        imported = await self.state.import_products(
            '[{"name":"Lamp","price":"12","image":"https://example.com/l.png"},'
            ' {"price":"n/a"}]'
        )
        self.assertEqual(imported[0].image, "https://example.com/l.png")
        self.assertEqual(imported[1].name, "")
        self.assertEqual(imported[1].image, PLACEHOLDER_IMAGE)
        self.assertTrue(math.isnan(imported[1].price))

    async def test_bulk_import_rejects_invalid_json(self):
        await self.state.add_product(ProductForm("Existing", "1", ""))
        before = list(self.state.products)

        for text in ("not json", '{"name": "Mug"}', "[1, 2]", '[{"name": "A"}, null]'):
            with self.subTest(text=text):
                with self.assertRaises(ImportFormatError) as ctx:
                    await self.state.import_products(text)
                self.assertEqual(str(ctx.exception), "Invalid JSON file!")
                self.assertEqual(self.state.products, before)
                self.assertEqual(await self.storage.load_products(), before)

    async def test_bulk_import_of_empty_array(self):
        self.assertEqual(await self.state.import_products("[]"), [])
        self.assertEqual(self.state.products, [])


if __name__ == "__main__":
    unittest.main()
