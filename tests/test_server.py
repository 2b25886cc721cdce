import os
import tempfile
import unittest

import httpx

from api.server import app
from db import database as db_database
from utils import config

ADMIN = {"x-admin": "true"}


class ServerTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        db_database.DB_PATH = os.path.join(self.temp_dir.name, "test.sqlite")
        db_database._initialized = False

    async def asyncSetUp(self):
        self.http = httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://test"
        )

    async def asyncTearDown(self):
        await self.http.aclose()

    def tearDown(self):
        self.temp_dir.cleanup()

    # ---------- Users ----------

    async def test_login_ok_and_rejected(self):
        res = await self.http.post(
            "/users/login",
            json={"email": config.ADMIN_EMAIL, "password": config.ADMIN_PASSWORD},
        )
        self.assertEqual(res.status_code, 200)
        body = res.json()
        self.assertEqual(set(body), {"id", "name", "email", "is_admin"})
        self.assertEqual(body["is_admin"], 1)

        res = await self.http.post(
            "/users/login", json={"email": config.ADMIN_EMAIL, "password": "nope"}
        )
        self.assertEqual(res.status_code, 401)
        self.assertEqual(res.text, "Invalid email or password")
        self.assertTrue(res.headers["content-type"].startswith("text/plain"))

    async def test_register_then_duplicate(self):
        payload = {"name": "Jane", "email": "jane@example.com", "password": "secret1"}
        res = await self.http.post("/users/register", json=payload)
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["is_admin"], 0)
        self.assertNotIn("password", res.json())

        res = await self.http.post("/users/register", json=payload)
        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.text, "Email already registered")

    async def test_register_missing_fields(self):
        res = await self.http.post("/users/register", json={"name": "Jane"})
        self.assertEqual(res.status_code, 400)

    async def test_logout(self):
        res = await self.http.post("/users/logout")
        self.assertEqual(res.text, "Logout successful")

    async def test_malformed_body_is_plain_text_400(self):
        res = await self.http.post(
            "/users/login",
            content="{not json",
            headers={"content-type": "application/json"},
        )
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.text, "Invalid request body")
        self.assertTrue(res.headers["content-type"].startswith("text/plain"))

    # ---------- Products ----------

    async def test_list_products(self):
        res = await self.http.get("/products")
        self.assertEqual(res.status_code, 200)
        products = res.json()
        self.assertEqual(len(products), 6)
        self.assertEqual(products[0]["name"], "Slim Laptop Sleeve")

    async def test_admin_routes_need_marker(self):
        for method, url in [
            ("POST", "/products"),
            ("PUT", "/products/1"),
            ("DELETE", "/products/1"),
            ("GET", "/orders"),
        ]:
            kwargs = {"json": {"name": "x", "price": "1"}} if method in ("POST", "PUT") else {}
            res = await self.http.request(method, url, **kwargs)
            self.assertEqual(res.status_code, 403, url)
            self.assertEqual(res.text, "Admin required")

            res = await self.http.request(method, url, headers={"x-admin": "yes"}, **kwargs)
            self.assertEqual(res.status_code, 403, url)

    async def test_product_crud_as_admin(self):
        res = await self.http.post("/products", json={"name": "Lamp"}, headers=ADMIN)
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.text, "name and price required")

        res = await self.http.post(
            "/products", json={"name": "Lamp", "price": "$45.00"}, headers=ADMIN
        )
        self.assertEqual(res.status_code, 200)
        pid = res.json()["id"]

        res = await self.http.put(
            f"/products/{pid}",
            json={"name": "Desk Lamp", "price": "$49.00", "tag": "home"},
            headers=ADMIN,
        )
        self.assertEqual(res.text, "Updated")
        newest = (await self.http.get("/products")).json()[0]
        self.assertEqual(
            newest, {"id": pid, "name": "Desk Lamp", "price": "$49.00", "img": "", "tag": "home"}
        )

        res = await self.http.delete(f"/products/{pid}", headers=ADMIN)
        self.assertEqual(res.text, "Deleted")
        ids = [p["id"] for p in (await self.http.get("/products")).json()]
        self.assertNotIn(pid, ids)

    # ---------- Orders ----------

    async def test_orders_roundtrip(self):
        order = {
            "email": "jane@example.com",
            "items": [{"id": 3, "name": "Canvas Tote Bag", "price": "$24.50", "qty": 2}],
            "total": 49.0,
        }
        res = await self.http.post("/orders", json=order)
        self.assertEqual(res.status_code, 200)
        created = res.json()
        self.assertIn("id", created)
        self.assertIn("created_at", created)

        res = await self.http.get("/orders", headers=ADMIN)
        self.assertEqual(res.status_code, 200)
        orders = res.json()
        self.assertEqual(orders[0]["id"], created["id"])
        self.assertEqual(orders[0]["items"], order["items"])
        self.assertEqual(orders[0]["total"], 49.0)

    async def test_order_requires_email_and_items(self):
        res = await self.http.post("/orders", json={"items": []})
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.text, "email and items required")

        res = await self.http.post("/orders", json={"email": "a@b.c"})
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.text, "email and items required")

        for items in ("nope", {"id": 1}, 3):
            res = await self.http.post("/orders", json={"email": "a@b.c", "items": items})
            self.assertEqual(res.status_code, 400, items)
            self.assertEqual(res.text, "email and items required")

    async def test_order_items_stored_as_sent(self):
        items = [
            {"id": 3, "name": "Bag", "price": 10, "qty": "2", "img": "x.png"},
            {"id": 1, "name": None, "qty": 1},
            "loose note",
        ]
        res = await self.http.post(
            "/orders", json={"email": "jane@example.com", "items": items, "total": "abc"}
        )
        self.assertEqual(res.status_code, 200)

        orders = (await self.http.get("/orders", headers=ADMIN)).json()
        self.assertEqual(orders[0]["items"], items)
        self.assertEqual(orders[0]["total"], 0.0)

        res = await self.http.post(
            "/orders", json={"email": "jane@example.com", "items": [], "total": "12.5"}
        )
        self.assertEqual(res.status_code, 200)
        orders = (await self.http.get("/orders", headers=ADMIN)).json()
        self.assertEqual(orders[0]["items"], [])
        self.assertEqual(orders[0]["total"], 12.5)
