from .sui import SourceError, SubscriptionError, SuiEventSource, parse_event

__all__ = ["SourceError", "SubscriptionError", "SuiEventSource", "parse_event"]
