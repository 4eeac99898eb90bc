import unittest

from fastapi import FastAPI
from fastapi.testclient import TestClient

from inventory_ledger.core.security import Actor
from inventory_ledger.dependencies import get_actor, get_db
from inventory_ledger.routers import (
    alerts_router,
    health_router,
    movements_router,
    products_router,
    stats_router,
)

from tests.db_utils import make_session_factory


def build_app(session_factory):
    app = FastAPI()
    for router in (health_router, products_router, movements_router, alerts_router, stats_router):
        app.include_router(router)

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    return app


class InventoryApiTest(unittest.TestCase):
    def setUp(self):
        self.engine, self.Session = make_session_factory()
        self.app = build_app(self.Session)
        self.actor = Actor(id="clerk", role="staff")
        self.app.dependency_overrides[get_actor] = lambda: self.actor
        self.client = TestClient(self.app)

    def tearDown(self):
        self.client.close()
        self.engine.dispose()

    def create_product(self, **overrides):
        body = {"sku": "MUG-01", "name": "Coffee mug", "price": 9.5, "cost": 3.0, "min_stock": 5}
        body.update(overrides)
        response = self.client.post("/products", json=body)
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()["data"]

    def post_movement(self, product_id, type_, quantity, reason="initial stock"):
        return self.client.post(
            "/inventory/movements",
            json={"product_id": product_id, "type": type_, "quantity": quantity, "reason": reason},
        )

    def test_health(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ok")

    def test_receive_then_oversell(self):
        product = self.create_product(stock=0)
        self.assertEqual(
            self.client.get("/products/{}/stock".format(product["id"])).json()["data"]["stock_status"],
            "OUT_OF_STOCK",
        )

        received = self.post_movement(product["id"], "IN", 10)
        self.assertEqual(received.status_code, 201)
        self.assertEqual(received.json()["data"]["new_stock"], 10)

        view = self.client.get("/products/{}/stock".format(product["id"])).json()["data"]
        self.assertEqual((view["stock"], view["stock_status"]), (10, "IN_STOCK"))

        oversold = self.post_movement(product["id"], "OUT", 12)
        self.assertEqual(oversold.status_code, 400)
        body = oversold.json()
        self.assertFalse(body["success"])
        self.assertEqual(body["code"], "INSUFFICIENT_STOCK")
        self.assertNotIn("data", body)

        view = self.client.get("/products/{}/stock".format(product["id"])).json()["data"]
        self.assertEqual(view["stock"], 10)

        movements = self.client.get("/inventory/movements", params={"product_id": product["id"]})
        self.assertEqual(len(movements.json()["data"]), 1)

    def test_malformed_movement_is_422(self):
        product = self.create_product()
        response = self.post_movement(product["id"], "IN", 0.5)
        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json()["code"], "VALIDATION_ERROR")

    def test_missing_product_is_404(self):
        response = self.post_movement(999, "IN", 1)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["code"], "PRODUCT_NOT_FOUND")

    def test_alerts_and_stats(self):
        empty = self.create_product(sku="MUG-01")
        low = self.create_product(sku="MUG-02", stock=4)
        self.create_product(sku="MUG-03", stock=50)

        alerts = self.client.get("/inventory/alerts").json()["data"]
        self.assertEqual([a["product_id"] for a in alerts], [empty["id"], low["id"]])

        stats = self.client.get("/inventory/stats", params={"trend": "true"}).json()["data"]
        self.assertEqual(stats["total_products"], 3)
        self.assertEqual(stats["out_of_stock_products"], 1)
        self.assertEqual(stats["total_value"], 162.0)
        self.assertEqual(stats["trends"], {})

    def test_admin_only_routes(self):
        product = self.create_product()
        self.assertEqual(self.client.delete("/products/{}".format(product["id"])).status_code, 403)
        self.assertEqual(self.client.post("/inventory/stats/snapshot").status_code, 403)

        self.actor = Actor(id="boss", role="admin")
        self.assertEqual(self.client.post("/inventory/stats/snapshot").status_code, 201)
        response = self.client.delete("/products/{}".format(product["id"]))
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()["data"]["is_active"])

        inactive = self.post_movement(product["id"], "IN", 1)
        self.assertEqual(inactive.json()["code"], "INACTIVE_PRODUCT")

    def test_stock_edit_through_patch(self):
        product = self.create_product(stock=8)
        response = self.client.patch(
            "/products/{}".format(product["id"]),
            json={"stock": 6, "stock_reason": "Two mugs broken in transit"},
        )
        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(response.json()["data"]["stock"], 6)

        movements = self.client.get("/inventory/movements", params={"product_id": product["id"]}).json()["data"]
        self.assertEqual([m["type"] for m in movements], ["ADJUSTMENT", "IN"])

    def test_null_price_in_patch_is_422(self):
        product = self.create_product()
        response = self.client.patch("/products/{}".format(product["id"]), json={"price": None})
        self.assertEqual(response.status_code, 422, response.text)
        self.assertEqual(response.json()["code"], "VALIDATION_ERROR")

    def test_write_requests_log_validation_metrics(self):
        product = self.create_product(stock=2)
        with self.assertLogs("inventory_ledger.dependencies", level="INFO") as logs:
            response = self.post_movement(product["id"], "OUT", 5)
        self.assertEqual(response.json()["code"], "INSUFFICIENT_STOCK")
        [record] = logs.records
        self.assertEqual(record.validations, {"stock_movement": 1})
        self.assertEqual(record.errors, {"stock_movement:INSUFFICIENT_STOCK": 1})


class AnonymousApiTest(unittest.TestCase):
    def test_requests_without_credentials_are_refused(self):
        engine, Session = make_session_factory()
        try:
            with TestClient(build_app(Session)) as client:
                response = client.get("/inventory/alerts")
            self.assertEqual(response.status_code, 403)
            self.assertEqual(response.json()["code"], "FORBIDDEN")
        finally:
            engine.dispose()


if __name__ == "__main__":
    unittest.main()
