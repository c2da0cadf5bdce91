from .resolver import DateInterval, format_period, parse_period, resolve_interval

__all__ = ["DateInterval", "format_period", "parse_period", "resolve_interval"]
