class SmartOrderError(Exception):
    """Base exception for SmartOrder"""
    pass


class ConfigurationError(SmartOrderError):
    """Raised when a store is built with an unusable configuration"""
    pass


class InvalidEntityError(SmartOrderError, ValueError):
    """Raised when an entity attribute breaks a model invariant"""
    pass
