"""Checkout journeys.

PayLaterJourney:  pay-later checkout -> counter payment -> kitchen flow -> served
PrePayJourney:    intent -> simulated gateway capture -> verify -> kitchen flow
EditBeforeCookingJourney: pay-later checkout -> change a quantity -> remove lines

The pre-pay journey signs callbacks with PAYMENT_KEY_SECRET, so it only works
against a server running the fake gateway with the same secret.
"""

import os
import uuid

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import checkout_data
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import CheckoutState
from ordering.gateway import DEFAULT_KEY_SECRET
from ordering.payment.verification import compute_signature

KEY_SECRET = os.environ.get("PAYMENT_KEY_SECRET", DEFAULT_KEY_SECRET)

KITCHEN_FLOW = ["preparing", "ready", "served"]


class _OrderJourney(SequentialTaskSet):
    def on_start(self):
        self.state = CheckoutState()

    def _advance(self, status):
        for order_id in self.state.order_ids:
            with self.client.patch(
                f"/orders/{order_id}/status",
                json={"status": status, "expected_revision": self.state.revisions.get(order_id)},
                catch_response=True,
                name=f"PATCH /orders/{{id}}/status [{status}]",
            ) as resp:
                if resp.status_code == 200:
                    self.state.revisions[order_id] = resp.json()["revision"]
                else:
                    resp.failure(f"Move to {status} failed: {resp.status_code} — {extract_error_detail(resp)}")

    def _follow_group(self):
        if not self.state.group_id:
            return
        with self.client.get(
            f"/orders/group/{self.state.group_id}",
            catch_response=True,
            name="GET /orders/group/{id}",
        ) as resp:
            if resp.status_code != 200 or resp.json()["count"] != len(self.state.order_ids):
                resp.failure(f"Group read mismatch: {resp.status_code} — {extract_error_detail(resp)}")


class PayLaterJourney(_OrderJourney):
    @task
    def checkout(self):
        with self.client.post("/checkout/pay-later", json=checkout_data(), catch_response=True, name="POST /checkout/pay-later") as resp:
            if resp.status_code == 201:
                body = resp.json()
                self.state.group_id = body["group_id"]
                self.state.remember(body["orders"])
            else:
                resp.failure(f"Pay-later checkout failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def pay_at_counter(self):
        for order_id in self.state.order_ids:
            with self.client.post(
                f"/orders/{order_id}/payment",
                json={"payment_method": "cash"},
                catch_response=True,
                name="POST /orders/{id}/payment",
            ) as resp:
                if resp.status_code == 200:
                    self.state.revisions[order_id] = resp.json()["revision"]
                else:
                    resp.failure(f"Payment failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def kitchen(self):
        for status in KITCHEN_FLOW:
            self._advance(status)

    @task
    def reconcile(self):
        self._follow_group()
        self.interrupt()


class PrePayJourney(_OrderJourney):
    @task
    def create_intent(self):
        payload = checkout_data()
        self.state.items = payload["items"]
        with self.client.post("/checkout/intents", json={"items": self.state.items}, catch_response=True, name="POST /checkout/intents") as resp:
            if resp.status_code == 201:
                self.state.intent_id = resp.json()["intent_id"]
            else:
                resp.failure(f"Intent failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def verify(self):
        transaction_id = f"lt_pay_{uuid.uuid4().hex[:14]}"
        payload = {
            "intent_id": self.state.intent_id,
            "transaction_id": transaction_id,
            "signature": compute_signature(KEY_SECRET, self.state.intent_id, transaction_id),
            "items": self.state.items,
        }
        with self.client.post("/checkout/verify", json=payload, catch_response=True, name="POST /checkout/verify") as resp:
            if resp.status_code == 201:
                body = resp.json()
                self.state.group_id = body["group_id"]
                self.state.remember(body["orders"])
            else:
                resp.failure(f"Verify failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def kitchen(self):
        for status in KITCHEN_FLOW:
            self._advance(status)

    @task
    def reconcile(self):
        self._follow_group()
        self.interrupt()


class EditBeforeCookingJourney(_OrderJourney):
    @task
    def checkout(self):
        with self.client.post("/checkout/pay-later", json=checkout_data(restaurant_count=1), catch_response=True, name="POST /checkout/pay-later") as resp:
            if resp.status_code == 201:
                self.order = resp.json()["orders"][0]
            else:
                resp.failure(f"Checkout failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def change_quantity(self):
        line = self.order["lines"][0]
        with self.client.patch(
            f"/orders/{self.order['id']}/lines/{line['id']}/quantity",
            json={"quantity": line["quantity"] + 1},
            catch_response=True,
            name="PATCH /orders/{id}/lines/{id}/quantity",
        ) as resp:
            if resp.status_code == 200:
                self.order = resp.json()
            else:
                resp.failure(f"Quantity change failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def remove_all_lines(self):
        for line in list(self.order["lines"]):
            with self.client.delete(
                f"/orders/{self.order['id']}/lines/{line['id']}",
                catch_response=True,
                name="DELETE /orders/{id}/lines/{id}",
            ) as resp:
                if resp.status_code == 200:
                    self.order = resp.json()
                else:
                    resp.failure(f"Remove line failed: {resp.status_code} — {extract_error_detail(resp)}")
        if self.order["status"] != "cancelled":
            self.client.get(f"/orders/{self.order['id']}", name="GET /orders/{id}")
        self.interrupt()


class GuestUser(HttpUser):
    wait_time = between(1, 3)
    tasks = {PayLaterJourney: 3, PrePayJourney: 3, EditBeforeCookingJourney: 1}
