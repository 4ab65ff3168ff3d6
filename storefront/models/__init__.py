from storefront.models.craftsman import Craftsman
from storefront.models.order import Order
from storefront.models.product import Product

__all__ = ["Craftsman", "Order", "Product"]
