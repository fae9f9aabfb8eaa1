"""Items module"""

from .models import Item
from .service import ItemService
from .router import router, public_router

__all__ = ["Item", "ItemService", "router", "public_router"]
