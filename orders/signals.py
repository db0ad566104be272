# Keep order totals in step with their line items
import logging

from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver

from .models import Order, OrderItem

logger = logging.getLogger(__name__)


@receiver([post_save, post_delete], sender=OrderItem)
def update_order_totals_on_item_change(sender, instance, **kwargs):
    """Update order totals when items are added/removed/modified"""
    try:
        order = Order.objects.get(pk=instance.order_id)
    except Order.DoesNotExist:
        # Order itself is being deleted
        return
    order.calculate_totals()
    order.save(update_fields=['subtotal', 'total', 'updated_at'])
    logger.debug("Totals for %s recalculated: %s", order.order_number, order.total)
