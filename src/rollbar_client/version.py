"""Package identity reported in every payload's ``notifier`` block."""

NOTIFIER_NAME = "rollbar-client"
__version__ = "0.4.0"
