"""
Constants for order states, environments and event names.
Using plain ints/strings (not Enums) so values map 1:1 to stored columns.
"""


class OpenOrderStatus:
    PENDING = 0
    SUCCESS = 1
    FAILED = 2


class Environment:
    LIVE = "live"
    SANDBOX = "sandbox"


class PaymentEvent:
    ORDER_ADDED = "payment.order_added"
    SUCCESSFUL = "payment.successful"
    FAILED = "payment.failed"


class Mpay24TransactionStatus:
    BILLED = "BILLED"
    RESERVED = "RESERVED"
    ERROR = "ERROR"
    REVERSED = "REVERSED"
    CREDITED = "CREDITED"
    SUSPENDED = "SUSPENDED"
