"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidAmountError(DomainException):
    """Amount is negative, malformed or otherwise unusable"""

    pass


class BalanceMismatchError(DomainException):
    """Down payment plus installments does not add up to the document total"""

    def __init__(self, message: str, difference=None):
        super().__init__(message)
        self.difference = difference


class InvalidPaymentError(DomainException):
    """Payment amount or target entry is not acceptable"""

    pass


class IntegrityViolationError(DomainException):
    """Operation would leave the ledger inconsistent (e.g. deleting paid entries)"""

    pass
