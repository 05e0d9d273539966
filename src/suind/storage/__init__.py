from .gateway import DuckDBGateway

__all__ = ["DuckDBGateway"]
