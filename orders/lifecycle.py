"""
Order lifecycle: creation, status transitions, line-item progress, payment
and the ingredient deduction that runs when an order is confirmed.

Every status change goes through ``TRANSITIONS``; each target status has a
hook that stamps the order and a follow-up that touches other entities
(tables, stock). All writes for one request share a transaction.
"""
import logging
from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from authentication.exceptions import BusinessRuleError, get_or_404
from inventory.models import InventoryItem
from inventory.stock import SUBTRACT, apply_stock_operation
from menu.models import MenuItem
from .models import Order, OrderItem, Table, to_money

logger = logging.getLogger(__name__)

TRANSITIONS = {
    Order.PENDING: (Order.CONFIRMED, Order.CANCELLED),
    Order.CONFIRMED: (Order.PREPARING, Order.CANCELLED),
    Order.PREPARING: (Order.READY,),
    Order.READY: (Order.SERVED,),
    Order.SERVED: (Order.PAID,),
    Order.PAID: (),
    Order.CANCELLED: (),
}


class InvalidTransition(BusinessRuleError):
    default_detail = 'Invalid status transition'


def can_transition(current, target):
    return target in TRANSITIONS.get(current, ())


# =============== TRANSITION HOOKS ===============

def _on_confirmed(order, actor, now):
    order.confirmed_at = now


def _on_ready(order, actor, now):
    order.ready_at = now
    if order.confirmed_at:
        order.actual_prep_time = round((now - order.confirmed_at).total_seconds() / 60)


def _on_served(order, actor, now):
    order.served_at = now


def _on_paid(order, actor, now):
    order.paid_at = now
    order.payment_status = Order.PAYMENT_PAID
    if actor is not None:
        order.cashier = actor


def _on_cancelled(order, actor, now):
    order.cancelled_at = now


ON_ENTER = {
    Order.CONFIRMED: _on_confirmed,
    Order.READY: _on_ready,
    Order.SERVED: _on_served,
    Order.PAID: _on_paid,
    Order.CANCELLED: _on_cancelled,
}


def _release_table(order):
    if order.is_dine_in:
        table = Table.objects.select_for_update().get(pk=order.table_id)
        table.set_status(Table.STATUS_AVAILABLE)


AFTER_ENTER = {
    Order.CONFIRMED: lambda order: deduct_ingredients(order),
    Order.SERVED: _release_table,
    Order.CANCELLED: _release_table,
}


def _enter(order, target, actor):
    now = timezone.now()
    order.status = target
    hook = ON_ENTER.get(target)
    if hook:
        hook(order, actor, now)
    order.save()

    follow_up = AFTER_ENTER.get(target)
    if follow_up:
        follow_up(order)
    logger.info("Order %s moved to %s", order.order_number, target)


def advance(order, target, actor=None, cancellation_reason=None):
    """Move a locked ``order`` to ``target`` through the transition table."""
    if not can_transition(order.status, target):
        raise InvalidTransition()
    if target == Order.CANCELLED:
        if not cancellation_reason or not cancellation_reason.strip():
            raise BusinessRuleError('Cancellation reason is required')
        order.cancellation_reason = cancellation_reason.strip()
    _enter(order, target, actor)
    return order


def locked_order(order_id):
    return get_or_404(Order.objects.select_for_update(), 'Order not found', pk=order_id)


@transaction.atomic
def transition(order_id, target, actor=None, cancellation_reason=None):
    order = locked_order(order_id)
    return advance(order, target, actor, cancellation_reason)


# =============== ORDER CREATION ===============

@transaction.atomic
def create_order(actor, table_id, items, order_type=Order.DINE_IN, customer=None, notes='', discount=0):
    """
    Validate the table and every requested menu item, then persist a pending
    order with price snapshots. Stock is only checked here, never deducted.
    """
    table = get_or_404(Table.objects.select_for_update(), 'Table not found', pk=table_id)
    if table.status == Table.STATUS_OUT_OF_ORDER:
        raise BusinessRuleError('Table is out of order')

    lines = []
    subtotal = Decimal('0.00')
    estimated_prep_time = 0
    for entry in items:
        menu_item_id = entry['menuItemId']
        menu_item = get_or_404(MenuItem, f'Menu item not found: {menu_item_id}', pk=menu_item_id)
        if not menu_item.is_available or not menu_item.is_active:
            raise BusinessRuleError(f'Menu item is not available: {menu_item.name}')
        if not menu_item.can_be_prepared():
            raise BusinessRuleError(f'Insufficient ingredients for: {menu_item.name}')

        quantity = entry['quantity']
        line_total = to_money(menu_item.price * quantity)
        subtotal += line_total
        estimated_prep_time = max(estimated_prep_time, menu_item.preparation_time)
        lines.append((menu_item, quantity, entry.get('specialInstructions', '')))

    subtotal = to_money(subtotal)
    tax = to_money(subtotal * settings.ORDER_TAX_RATE)
    discount = to_money(discount)
    if discount > subtotal + tax:
        raise BusinessRuleError('Discount cannot exceed the order amount')

    customer = customer or {}
    order = Order.objects.create(
        table=table,
        customer_name=customer.get('name', ''),
        customer_phone=customer.get('phone', ''),
        customer_email=(customer.get('email') or '').lower(),
        subtotal=subtotal,
        tax=tax,
        discount=discount,
        total=to_money(subtotal + tax - discount),
        order_type=order_type,
        notes=notes or '',
        estimated_prep_time=estimated_prep_time or 30,
        waiter=actor,
        created_by=actor,
    )
    for menu_item, quantity, instructions in lines:
        OrderItem.objects.create(
            order=order,
            menu_item=menu_item,
            quantity=quantity,
            unit_price=menu_item.price,
            total_price=to_money(menu_item.price * quantity),
            special_instructions=instructions or '',
        )

    if order.is_dine_in:
        table.set_status(Table.STATUS_OCCUPIED)

    logger.info("Order %s created on %s by %s (total %s)", order.order_number, table, actor, order.total)
    return order


# =============== LINE ITEM PROGRESS ===============

@transaction.atomic
def update_item_status(order_id, item_id, status, actor=None):
    """
    Record a line item's kitchen progress. When every line is ready (order
    preparing) or served (order ready) the order follows.
    """
    order = locked_order(order_id)
    if order.status in Order.TERMINAL_STATUSES:
        raise BusinessRuleError(f'Cannot update items of a {order.status} order')

    item = get_or_404(order.items.all(), 'Order item not found', pk=item_id)
    now = timezone.now()
    item.status = status
    if status == OrderItem.STATUS_READY:
        item.prepared_at = now
    elif status == OrderItem.STATUS_SERVED:
        item.served_at = now
    item.save()

    statuses = set(order.items.values_list('status', flat=True))
    if statuses == {OrderItem.STATUS_READY} and order.status == Order.PREPARING:
        advance(order, Order.READY, actor)
    elif statuses == {OrderItem.STATUS_SERVED} and order.status == Order.READY:
        advance(order, Order.SERVED, actor)

    return order


# =============== PAYMENT ===============

@transaction.atomic
def process_payment(order_id, payment_method, amount_paid, actor=None):
    """
    Settle an order in full. Returns ``(order, change)``.

    A served order moves to ``paid`` through the transition table; an order
    paid before it is served is settled directly from its current state.
    """
    order = locked_order(order_id)
    if order.payment_status == Order.PAYMENT_PAID or order.status == Order.PAID:
        raise BusinessRuleError('Order is already paid')
    if order.status == Order.CANCELLED:
        raise BusinessRuleError('Cannot process payment for a cancelled order')

    try:
        amount_paid = to_money(amount_paid)
    except (InvalidOperation, TypeError, ValueError):
        raise BusinessRuleError('Valid payment amount is required')
    if amount_paid < order.total:
        raise BusinessRuleError('Insufficient payment amount')

    order.payment_method = payment_method
    if order.status == Order.SERVED:
        advance(order, Order.PAID, actor)
    else:
        settle_early(order, actor)

    change = amount_paid - order.total
    logger.info(
        "Payment of %s (%s) recorded for order %s by %s, change %s",
        amount_paid, payment_method, order.order_number, actor, change
    )
    return order, change


def settle_early(order, actor):
    """Mark an unserved order paid; the table is freed like on service."""
    _on_paid(order, actor, timezone.now())
    order.status = Order.PAID
    order.save()
    _release_table(order)
    logger.info("Order %s settled before service", order.order_number)


# =============== INGREDIENT DEDUCTION ===============

def deduct_ingredients(order):
    """
    Subtract every line's recipe from stock (ingredient quantity times line
    quantity, clamped at zero).

    Problems never propagate: each ingredient runs in its own savepoint and
    shortages or failures are logged and recorded in ``deduction_errors``
    with an overall ``deduction_status``.
    """
    errors = []
    processed = 0

    order.deduction_status = Order.DEDUCTION_PENDING
    lines = order.items.select_related('menu_item').prefetch_related('menu_item__ingredients')
    for line in lines:
        for ingredient in line.menu_item.ingredients.all():
            processed += 1
            needed = ingredient.quantity * line.quantity
            if ingredient.inventory_item_id is None:
                errors.append({
                    'menuItem': line.menu_item.name,
                    'error': 'Inventory item no longer exists',
                })
                continue
            try:
                with transaction.atomic():
                    stock_item = InventoryItem.objects.select_for_update().get(pk=ingredient.inventory_item_id)
                    available = stock_item.current_stock
                    apply_stock_operation(
                        stock_item, needed, SUBTRACT, reason=f'Order {order.order_number} confirmed'
                    )
            except Exception as exc:
                logger.error(
                    "Error deducting %s for order %s: %s", ingredient, order.order_number, exc
                )
                errors.append({
                    'menuItem': line.menu_item.name,
                    'inventoryItem': ingredient.inventory_item_id,
                    'error': str(exc),
                })
                continue

            if available < needed:
                logger.warning(
                    "Stock shortage for %s on order %s: needed %s, had %s",
                    stock_item.name, order.order_number, needed, available
                )
                errors.append({
                    'menuItem': line.menu_item.name,
                    'inventoryItem': stock_item.pk,
                    'error': f'Insufficient stock for {stock_item.name}: needed {needed}, had {available}',
                })

    if processed == 0:
        order.deduction_status = Order.DEDUCTION_NOT_APPLICABLE
    elif not errors:
        order.deduction_status = Order.DEDUCTION_COMPLETED
    elif len(errors) < processed:
        order.deduction_status = Order.DEDUCTION_PARTIAL
    else:
        order.deduction_status = Order.DEDUCTION_FAILED
    order.deduction_errors = errors
    order.save(update_fields=['deduction_status', 'deduction_errors', 'updated_at'])
    return order.deduction_status
