import asyncio
import json
import os
import tempfile
import unittest

import httpx

from client.shop_client import ShopClient
from state.cart import CartState
from state.checkout import CheckoutStatus
from state.models import Identity
from utils.state import AppState
from utils.storage import CART_KEY, LocalStorage

WALLET = {"id": 1, "name": "Leather Wallet", "price": "$10.00"}
MUG = {"id": 2, "name": "Mug", "price": "free"}
JANE = {"id": 5, "name": "Jane", "email": "jane@x.io", "is_admin": False}


class OrdersBackend:
    def __init__(self):
        self.status = 200
        self.text = None
        self.fail = False
        self.orders = []
        # when set, requests wait for it before being answered
        self.gate = None

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise httpx.ConnectError("connection refused", request=request)
        if self.text is not None:
            return httpx.Response(self.status, text=self.text)
        self.orders.append(json.loads(request.content))
        return httpx.Response(200, json={"id": len(self.orders), "created_at": "2025-01-01T00:00:00+00:00"})


class CheckoutTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.storage = LocalStorage(os.path.join(self.temp_dir.name, "storage.json"))
        self.backend = OrdersBackend()

    async def asyncSetUp(self):
        self.state = self.make_state()

    def make_state(self) -> AppState:
        client = ShopClient("http://shop.test", transport=httpx.MockTransport(self.backend))
        return AppState(storage=self.storage, client=client, success_delay=0)

    async def asyncTearDown(self):
        self.state.notices.dismiss()
        await self.state.aclose()

    def tearDown(self):
        self.temp_dir.cleanup()

    def sign_in(self):
        self.state.session.identity = Identity(**JANE)

    # ---------- opening ----------

    async def test_empty_cart_is_refused(self):
        self.sign_in()
        self.assertFalse(self.state.checkout.open())
        self.assertEqual(self.state.checkout.status, CheckoutStatus.IDLE)
        self.assertEqual(self.state.notices.current, "Cart is empty")

    async def test_needs_a_session(self):
        self.state.cart.add(WALLET)
        flow = self.state.checkout
        self.assertFalse(flow.open())
        self.assertEqual(flow.status, CheckoutStatus.IDLE)
        self.assertEqual(self.state.notices.current, "You must be logged in to checkout")
        self.assertEqual(flow.error, "Please sign in to continue")
        self.assertFalse(await flow.submit())
        self.assertEqual(self.backend.orders, [])

    async def test_open_prefills_locked_email(self):
        self.sign_in()
        self.state.cart.add(WALLET)
        flow = self.state.checkout
        self.assertTrue(flow.open())
        self.assertEqual(flow.status, CheckoutStatus.AWAITING_CONFIRMATION)
        self.assertTrue(flow.email_locked)
        flow.set_email("other@x.io")
        self.assertEqual(flow.email, "jane@x.io")

    async def test_cancel(self):
        self.sign_in()
        self.state.cart.add(WALLET)
        flow = self.state.checkout
        flow.open()
        self.assertTrue(flow.cancel())
        self.assertEqual(flow.status, CheckoutStatus.IDLE)
        self.assertFalse(flow.cancel())
        self.assertEqual(len(self.state.cart), 1)

    # ---------- submitting ----------

    async def test_success_clears_cart(self):
        self.sign_in()
        self.state.cart.add(WALLET, 2)
        self.state.cart.add(MUG, 5)
        flow = self.state.checkout
        seen = []
        flow.listener = seen.append
        flow.open()

        self.assertTrue(await flow.submit())
        self.assertEqual(
            self.backend.orders,
            [{
                "email": "jane@x.io",
                "items": [
                    {"id": 1, "name": "Leather Wallet", "price": "$10.00", "qty": 2},
                    {"id": 2, "name": "Mug", "price": "free", "qty": 5},
                ],
                "total": 20.0,
            }],
        )
        self.assertEqual(flow.order_id, 1)
        self.assertEqual(flow.success, "Order recorded. Thank you!")
        self.assertIn(CheckoutStatus.SUCCEEDED, seen)
        self.assertEqual(flow.status, CheckoutStatus.IDLE)
        self.assertTrue(self.state.cart.is_empty())
        self.assertNotIn(CART_KEY, self.storage)

    async def wait_for(self, status: CheckoutStatus) -> None:
        for _ in range(200):
            if self.state.checkout.status == status:
                return
            await asyncio.sleep(0.005)
        self.fail(f"checkout never reached {status}")

    async def test_second_submit_while_submitting_is_refused(self):
        self.sign_in()
        self.state.cart.add(WALLET)
        flow = self.state.checkout
        flow.open()

        self.backend.gate = asyncio.Event()
        first = asyncio.create_task(flow.submit())
        await self.wait_for(CheckoutStatus.SUBMITTING)

        self.assertFalse(await flow.submit())
        self.backend.gate.set()
        self.assertTrue(await first)
        self.assertEqual(len(self.backend.orders), 1)

        # closed again: a further submit is refused as well
        self.assertFalse(await flow.submit())
        self.assertEqual(len(self.backend.orders), 1)

    async def test_cart_kept_until_success_hold_ends(self):
        self.sign_in()
        self.state.cart.add(WALLET)
        flow = self.state.checkout
        flow.success_delay = 0.2
        flow.open()

        task = asyncio.create_task(flow.submit())
        await self.wait_for(CheckoutStatus.SUCCEEDED)
        self.assertEqual(len(self.state.cart), 1)
        self.assertIn(CART_KEY, self.storage)

        self.assertTrue(await task)
        self.assertEqual(flow.status, CheckoutStatus.IDLE)
        self.assertTrue(self.state.cart.is_empty())
        self.assertNotIn(CART_KEY, self.storage)

    async def test_interrupted_success_hold_still_clears_cart(self):
        self.sign_in()
        self.state.cart.add(WALLET)
        flow = self.state.checkout
        flow.success_delay = 5
        flow.open()

        task = asyncio.create_task(flow.submit())
        await self.wait_for(CheckoutStatus.SUCCEEDED)
        task.cancel()
        with self.assertRaises(asyncio.CancelledError):
            await task

        self.assertEqual(len(self.backend.orders), 1)
        self.assertEqual(flow.status, CheckoutStatus.IDLE)
        self.assertTrue(self.state.cart.is_empty())
        self.assertNotIn(CART_KEY, self.storage)
        # a restart finds no cart to re-order
        self.assertTrue(CartState(LocalStorage(self.storage.path)).is_empty())

    async def test_rejected_keeps_cart(self):
        self.sign_in()
        self.state.cart.add(WALLET)
        flow = self.state.checkout
        flow.open()

        self.backend.status, self.backend.text = 400, "email and items required"
        self.assertFalse(await flow.submit())
        self.assertEqual(flow.error, "email and items required")
        self.assertEqual(flow.status, CheckoutStatus.AWAITING_CONFIRMATION)
        self.assertEqual(len(self.state.cart), 1)
        self.assertIn(CART_KEY, self.storage)

        self.backend.status, self.backend.text = 500, ""
        self.assertFalse(await flow.submit())
        self.assertEqual(flow.error, "Checkout failed")

    async def test_network_error_keeps_cart(self):
        self.sign_in()
        self.state.cart.add(WALLET)
        flow = self.state.checkout
        flow.open()

        self.backend.fail = True
        self.assertFalse(await flow.submit())
        self.assertEqual(flow.error, "Network error. Please try again.")
        self.assertEqual(len(self.state.cart), 1)

        # retry from the same dialog
        self.backend.fail = False
        self.assertTrue(await flow.submit())
        self.assertIsNone(flow.error)
        self.assertTrue(self.state.cart.is_empty())
