"""RelayGate: approval-gated bulk SMS relay.

An operator approves individual Telegram users; approved users upload a
list of phone numbers and broadcast one message to every number through a
throttled, sequential send loop.  Approval state survives restarts.
"""

__version__ = "0.1.0"
__description__ = "Approval-gated bulk SMS relay driven by a Telegram bot"

__all__ = ["__version__"]
