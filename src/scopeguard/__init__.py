"""ScopeGuard - record-scope and custom-action authorization."""

__version__ = "0.1.0"
