import json
import os
import tempfile
import unittest

from state.cart import CartState
from state.notice import NoticeBoard
from utils.storage import CART_KEY, LocalStorage

WALLET = {"id": 1, "name": "Leather Wallet", "price": "$10.00", "img": None}
STICKER = {"id": 2, "name": "Sticker", "price": "free"}


class CartTestCase(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.temp_dir.name, "storage.json")
        self.storage = LocalStorage(self.path)
        self.cart = CartState(self.storage)

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_add_merges_same_product(self):
        self.cart.add(WALLET, 2)
        self.cart.add(WALLET, 3)
        self.assertEqual(len(self.cart), 1)
        self.assertEqual(self.cart.find(1).qty, 5)
        self.assertEqual(self.cart.count(), 5)

    def test_change_quantity(self):
        self.cart.add(WALLET)
        self.cart.add(STICKER)
        self.cart.change_quantity(1, 4)
        self.assertEqual(self.cart.find(1).qty, 4)

        self.cart.change_quantity(1, 0)
        self.assertIsNone(self.cart.find(1))
        self.cart.change_quantity(2, -1)
        self.assertTrue(self.cart.is_empty())

        # unknown id is a no-op
        self.cart.change_quantity(99, 3)
        self.assertTrue(self.cart.is_empty())

    def test_total_ignores_unparseable_prices(self):
        self.cart.add(WALLET, 2)
        self.cart.add(STICKER, 5)
        self.assertEqual(self.cart.total(), 20.0)

    def test_remove_and_clear(self):
        self.cart.add(WALLET)
        self.cart.add(STICKER)
        self.cart.remove(1)
        self.assertEqual([it.id for it in self.cart.items], [2])
        self.cart.clear()
        self.assertTrue(self.cart.is_empty())
        self.assertEqual(json.loads(self.storage.get_item(CART_KEY)), [])

    def test_persisted_after_every_mutation(self):
        self.cart.add(WALLET, 2)
        self.cart.add(STICKER)
        self.cart.change_quantity(2, 7)

        again = CartState(LocalStorage(self.path))
        self.assertEqual(
            [(it.id, it.name, it.price, it.qty) for it in again.items],
            [(1, "Leather Wallet", "$10.00", 2), (2, "Sticker", "free", 7)],
        )

    def test_corrupt_storage_is_empty_cart(self):
        for raw in ("{not json", '{"an": "object"}', '[{"id": "x"}]'):
            self.storage.set_item(CART_KEY, raw)
            self.assertTrue(CartState(self.storage).is_empty(), raw)

    def test_unreadable_storage_file_is_empty_cart(self):
        with open(self.path, "w", encoding="utf-8") as f:
            f.write("garbage")
        self.assertTrue(CartState(LocalStorage(self.path)).is_empty())

    def test_purge_drops_the_key(self):
        self.cart.add(WALLET)
        self.assertIn(CART_KEY, self.storage)
        self.cart.purge()
        self.assertTrue(self.cart.is_empty())
        self.assertNotIn(CART_KEY, self.storage)


class CartNoticeTestCase(unittest.IsolatedAsyncioTestCase):
    async def test_add_posts_notice(self):
        with tempfile.TemporaryDirectory() as d:
            notices = NoticeBoard(ttl=10)
            cart = CartState(LocalStorage(os.path.join(d, "s.json")), notices)
            cart.add(WALLET)
            self.assertEqual(notices.current, "Leather Wallet added to cart")
            notices.dismiss()
