from .connection import CanvasClient
from .mirror import OperationMirror

__all__ = ["CanvasClient", "OperationMirror"]
