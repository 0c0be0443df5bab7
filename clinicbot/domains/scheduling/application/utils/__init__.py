from .phone import to_gateway_number

__all__ = ["to_gateway_number"]
