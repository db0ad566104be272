"""
Stock ledger: the add/subtract/set operations applied to an inventory
item's ``current_stock``. Stock is clamped at zero and never goes negative.
"""
import logging
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import APIException

from authentication.exceptions import BusinessRuleError, flatten_errors, get_or_404

from .models import InventoryItem

logger = logging.getLogger(__name__)

ADD = 'add'
SUBTRACT = 'subtract'
SET = 'set'
OPERATIONS = (ADD, SUBTRACT, SET)
QUANTITY_STEP = Decimal('0.001')


class InvalidStockOperation(BusinessRuleError):
    default_detail = 'Invalid operation. Use add, subtract, or set'


def to_quantity(value):
    try:
        quantity = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise BusinessRuleError('Valid quantity is required')
    if not quantity.is_finite():
        raise BusinessRuleError('Valid quantity is required')
    return quantity.quantize(QUANTITY_STEP)


def apply_stock_operation(item, quantity, operation, reason=None):
    """
    Apply one ledger operation to ``item`` and save it.

    Returns ``(old_stock, new_stock)``.
    """
    if operation not in OPERATIONS:
        raise InvalidStockOperation()

    quantity = to_quantity(quantity)
    old_stock = item.current_stock
    update_fields = ['current_stock', 'updated_at']

    if operation == ADD:
        item.current_stock = max(Decimal('0'), old_stock + quantity)
        item.last_restocked = timezone.now()
        update_fields.append('last_restocked')
    elif operation == SUBTRACT:
        item.current_stock = max(Decimal('0'), old_stock - quantity)
    else:
        item.current_stock = max(Decimal('0'), quantity)

    item.save(update_fields=update_fields)
    logger.info(
        "Stock updated for %s: %s -> %s (%s %s) - Reason: %s",
        item.name, old_stock, item.current_stock, operation, quantity, reason or 'Not specified'
    )
    return old_stock, item.current_stock


def adjust_stock(item_id, quantity, operation, reason=None):
    """
    Lock the inventory row and apply one ledger operation to it.

    Returns ``(item, old_stock, new_stock)``.
    """
    if operation not in OPERATIONS:
        raise InvalidStockOperation()
    with transaction.atomic():
        item = get_or_404(InventoryItem.objects.select_for_update(), 'Inventory item not found', pk=item_id)
        old_stock, new_stock = apply_stock_operation(item, quantity, operation, reason)
    return item, old_stock, new_stock


def bulk_adjust_stock(updates, entry_serializer_class):
    """
    Apply a list of ``{id, quantity, operation, reason}`` entries.

    Each entry is validated with ``entry_serializer_class`` and runs in its
    own transaction; an invalid or failed entry is reported and does not
    affect the others.
    """
    successful = []
    failed = []

    for update in updates:
        item_id = update.get('id')
        entry = entry_serializer_class(data=update)
        if not entry.is_valid():
            error = '; '.join(flatten_errors(entry.errors))
            logger.warning("Bulk stock update rejected entry for item %s: %s", item_id, error)
            failed.append({'id': item_id, 'error': error})
            continue

        data = entry.validated_data
        quantity = to_quantity(data['quantity'])
        try:
            item, old_stock, new_stock = adjust_stock(data['id'], quantity, data['operation'], data.get('reason'))
        except APIException as exc:
            logger.warning("Bulk stock update failed for item %s: %s", item_id, exc.detail)
            failed.append({'id': item_id, 'error': str(exc.detail)})
            continue

        successful.append({
            'id': item.pk,
            'name': item.name,
            'oldStock': old_stock,
            'newStock': new_stock,
            'operation': data['operation'],
            'quantity': quantity,
            'reason': data.get('reason'),
        })

    return {
        'successful': successful,
        'failed': failed,
        'totalProcessed': len(updates),
        'successCount': len(successful),
        'errorCount': len(failed),
    }
