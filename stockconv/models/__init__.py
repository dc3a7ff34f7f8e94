from stockconv.models.conversion import ConversionRecord
from stockconv.models.inventory import Depot, DepotVariant, Product

__all__ = [
    "ConversionRecord",
    "Depot",
    "DepotVariant",
    "Product",
]
