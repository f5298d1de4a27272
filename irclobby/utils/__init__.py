from .retry import retry_network_operation

__all__ = ["retry_network_operation"]
