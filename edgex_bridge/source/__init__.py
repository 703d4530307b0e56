from .edgex import EdgexSource, SubscriptionState, emit_tuple

__all__ = ["EdgexSource", "SubscriptionState", "emit_tuple"]
