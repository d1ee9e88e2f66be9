"""Tests for the delivery status machine."""

import json
from itertools import product

import pytest

from reporthub.models.order import Order
from reporthub.models.report import Report
from reporthub.services import delivery
from reporthub.services.delivery import DeliveryStatus, STEPS


def _order(status="pending", **kwargs):
    return Order(
        id=1,
        user_id=1,
        report_id=1,
        delivery_address=json.dumps({"address": "x", "coordinates": {"lat": 19.1, "lng": 77.3}}),
        total_amount=103,
        delivery_status=status,
        **kwargs,
    )


class TestNormalize:
    def test_canonical_values(self):
        for s in DeliveryStatus:
            assert delivery.normalize_status(s.value) is s

    def test_tracking_vocabulary(self):
        assert delivery.normalize_status("printed") is DeliveryStatus.PRINTING
        assert delivery.normalize_status("shipped") is DeliveryStatus.OUT_FOR_DELIVERY

    def test_case_and_whitespace(self):
        assert delivery.normalize_status(" Delivered ") is DeliveryStatus.DELIVERED

    def test_unknown_raises(self):
        with pytest.raises(ValueError):
            delivery.normalize_status("lost")


class TestAdvance:
    @pytest.mark.parametrize("current,new", [
        (a, b) for a, b in product(STEPS, STEPS) if STEPS.index(b) < STEPS.index(a)
    ])
    def test_backward_rejected(self, current, new):
        order = _order(current.value)
        assert delivery.advance(order, new) is False
        assert order.delivery_status == current.value

    @pytest.mark.parametrize("status", STEPS)
    def test_same_status_rejected(self, status):
        assert delivery.advance(_order(status.value), status) is False

    def test_forward_steps(self):
        order = _order()
        for status in STEPS[1:]:
            assert delivery.advance(order, status) is True
            assert order.delivery_status == status.value

    def test_forward_jump_accepted(self):
        order = _order("pending")
        assert delivery.advance(order, "out_for_delivery") is True
        assert order.delivery_status == "out_for_delivery"

    @pytest.mark.parametrize("status", STEPS[:-1])
    def test_cancel_from_non_terminal(self, status):
        order = _order(status.value)
        assert delivery.advance(order, DeliveryStatus.CANCELLED) is True
        assert order.delivery_status == "cancelled"

    @pytest.mark.parametrize("terminal", ["delivered", "cancelled"])
    def test_terminal_states_are_final(self, terminal):
        for status in DeliveryStatus:
            order = _order(terminal)
            assert delivery.advance(order, status) is False
            assert order.delivery_status == terminal

    def test_unknown_status_is_noop(self):
        order = _order("confirmed")
        assert delivery.advance(order, "teleported") is False
        assert order.delivery_status == "confirmed"

    def test_alias_input(self):
        order = _order("printing")
        assert delivery.advance(order, "shipped") is True
        assert order.delivery_status == "out_for_delivery"


class TestDeriveSteps:
    @pytest.mark.parametrize("current", STEPS)
    def test_completed_and_current_flags(self, current):
        steps = delivery.derive_steps(current.value)
        assert [s.status for s in steps] == [s.value for s in STEPS]
        for step in steps:
            expected = STEPS.index(DeliveryStatus(step.status)) <= STEPS.index(current)
            assert step.completed is expected
        assert [s.status for s in steps if s.current] == [current.value]

    def test_cancelled_has_no_progress(self):
        steps = delivery.derive_steps("cancelled")
        assert not any(s.completed for s in steps)
        assert not any(s.current for s in steps)

    def test_views_share_progress_but_not_labels(self):
        order_view = delivery.derive_steps("printing", view="order")
        tracking_view = delivery.derive_steps("printing", view="tracking")
        assert [s.completed for s in order_view] == [s.completed for s in tracking_view]
        assert order_view[2].label != tracking_view[2].label
        assert tracking_view[2].label == "Printing in Progress"

    def test_legacy_status_renders(self):
        steps = delivery.derive_steps("shipped", view="tracking")
        assert [s.status for s in steps if s.current] == ["out_for_delivery"]

    def test_badge_text(self):
        assert delivery.badge_text("out_for_delivery") == "Shipped"
        assert delivery.badge_text("cancelled") == "Cancelled"
        assert delivery.badge_text("bogus") == "Unknown"


class TestApplyStatus:
    def _seed(self, ctx, order_status="out_for_delivery"):
        from reporthub.models.user import User

        with ctx.session() as session:
            user = User(email="a@example.com")
            session.add(user)
            session.commit()
            report = Report(user_id=user.id, title="T", topic="t", pages=10, format="ieee", status="completed", price=35)
            session.add(report)
            session.commit()
            order = Order(
                user_id=user.id,
                report_id=report.id,
                delivery_address=json.dumps({"address": "x", "coordinates": {"lat": 1, "lng": 2}}),
                total_amount=85,
                delivery_status=order_status,
            )
            session.add(order)
            session.commit()
            return order.id, report.id

    def test_delivery_marks_report_delivered(self, ctx):
        order_id, report_id = self._seed(ctx)
        with ctx.session() as session:
            order = session.get(Order, order_id)
            assert delivery.apply_status(session, order, "delivered") is True
        with ctx.session() as session:
            assert session.get(Order, order_id).delivery_status == "delivered"
            assert session.get(Report, report_id).status == "delivered"

    def test_other_transitions_leave_report_alone(self, ctx):
        order_id, report_id = self._seed(ctx, order_status="confirmed")
        with ctx.session() as session:
            order = session.get(Order, order_id)
            assert delivery.apply_status(session, order, "printing") is True
        with ctx.session() as session:
            assert session.get(Report, report_id).status == "completed"

    def test_rejected_transition_writes_nothing(self, ctx):
        order_id, report_id = self._seed(ctx, order_status="out_for_delivery")
        with ctx.session() as session:
            order = session.get(Order, order_id)
            assert delivery.apply_status(session, order, "pending") is False
        with ctx.session() as session:
            assert session.get(Order, order_id).delivery_status == "out_for_delivery"
            assert session.get(Report, report_id).status == "completed"
