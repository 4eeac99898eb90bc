import unittest
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from inventory_ledger.schemas.movement import CreateStockMovementInput
from inventory_ledger.services.alert_service import build_alerts, load_stock_alerts, urgency_score
from inventory_ledger.services.ledger_service import apply_movement

from tests.db_utils import add_category, add_product, make_session_factory

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def product(id_, stock, min_stock=5, is_active=True, category_name=None):
    return SimpleNamespace(
        id=id_,
        name="Product {}".format(id_),
        sku="SKU-{:03d}".format(id_),
        stock=stock,
        min_stock=min_stock,
        is_active=is_active,
        category_name=category_name,
    )


class UrgencyScoreTest(unittest.TestCase):
    def test_base_scores(self):
        self.assertEqual(urgency_score("OUT_OF_STOCK", None, NOW), 10)
        self.assertEqual(urgency_score("CRITICAL_STOCK", None, NOW), 8)
        self.assertEqual(urgency_score("LOW_STOCK", None, NOW), 5)

    def test_staleness_bonuses(self):
        self.assertEqual(urgency_score("LOW_STOCK", NOW - timedelta(days=3), NOW), 5)
        self.assertEqual(urgency_score("LOW_STOCK", NOW - timedelta(days=7), NOW), 5)
        self.assertEqual(urgency_score("LOW_STOCK", NOW - timedelta(days=8), NOW), 7)
        self.assertEqual(urgency_score("LOW_STOCK", NOW - timedelta(days=31), NOW), 10)


class BuildAlertsTest(unittest.TestCase):
    def test_out_of_stock_before_low_stock(self):
        alerts = build_alerts([product(2, 4), product(1, 0)], {}, now=NOW)
        self.assertEqual([a.product_id for a in alerts], [1, 2])
        self.assertEqual(alerts[0].status, "OUT_OF_STOCK")
        self.assertEqual(alerts[0].priority_label, "High")
        self.assertEqual(alerts[1].status, "LOW_STOCK")
        self.assertEqual(alerts[1].priority, 2)

    def test_skips_healthy_and_inactive_products(self):
        alerts = build_alerts(
            [product(1, 10), product(2, 0, is_active=False), product(3, 3)],
            {},
            now=NOW,
        )
        self.assertEqual([a.product_id for a in alerts], [3])

    def test_stale_low_stock_can_outrank_critical(self):
        movements = {
            1: [NOW - timedelta(days=1)],
            2: [NOW - timedelta(days=40), NOW - timedelta(days=60)],
        }
        alerts = build_alerts([product(1, 1), product(2, 4)], movements, now=NOW)
        self.assertEqual([(a.product_id, a.urgency_score) for a in alerts], [(2, 10), (1, 8)])
        self.assertEqual(alerts[0].last_movement, NOW - timedelta(days=40))

    def test_ties_prefer_lower_stock_then_input_order(self):
        alerts = build_alerts(
            [product(1, 5), product(2, 3), product(3, 3)],
            {},
            now=NOW,
        )
        self.assertEqual([a.product_id for a in alerts], [2, 3, 1])

    def test_movement_objects_and_uncategorized_label(self):
        movements = {1: [SimpleNamespace(created_at=datetime(2024, 5, 1, 12, 0))]}
        alerts = build_alerts([product(1, 0)], movements, now=NOW)
        self.assertEqual(alerts[0].category, "Uncategorized")
        self.assertEqual(alerts[0].urgency_score, 15)
        self.assertEqual(alerts[0].last_movement, datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc))


class LoadStockAlertsTest(unittest.TestCase):
    def setUp(self):
        self.engine, self.Session = make_session_factory()
        self.db = self.Session()

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def test_reads_active_products_and_last_movements(self):
        tools = add_category(self.db, "Tools")
        empty = add_product(self.db, sku="EMPTY-1", stock=0, category=tools)
        low = add_product(self.db, sku="LOW-1", stock=0)
        add_product(self.db, sku="FULL-1", stock=40)
        add_product(self.db, sku="GONE-1", stock=0, is_active=False)

        apply_movement(
            self.db,
            CreateStockMovementInput(product_id=low.id, type="IN", quantity=4, reason="Restock"),
            "user-1",
            now=NOW - timedelta(days=10),
        )

        alerts = load_stock_alerts(self.db, now=NOW)
        self.assertEqual([a.product_sku for a in alerts], ["EMPTY-1", "LOW-1"])
        self.assertEqual(alerts[0].category, "Tools")
        self.assertIsNone(alerts[0].last_movement)
        self.assertEqual(alerts[1].urgency_score, 7)
        self.assertEqual(alerts[1].category, "Uncategorized")
        self.assertEqual(empty.id, alerts[0].product_id)


if __name__ == "__main__":
    unittest.main()
