"""Gateway composition root, operation catalog and invoke options."""

from .catalog import OperationCatalog, with_overrides
from .gateway import OperationGateway
from .options import InvokeOptions

__all__ = [
    "OperationGateway",
    "OperationCatalog",
    "InvokeOptions",
    "with_overrides",
]
