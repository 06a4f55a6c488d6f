"""
Checker Exceptions

Two families never mix: configuration/precondition errors (the expected
state handed to the checker is malformed) and chain errors (the RPC
collaborator failed). Drift itself is never raised; it goes to the ledger.
"""

from typing import Dict


class CheckerError(Exception):
    """Base exception for checker errors"""
    pass


# =========================================================================
# Configuration / precondition errors
# =========================================================================

class ConfigurationError(CheckerError):
    """Expected-state input is malformed"""
    pass


class MissingAddressError(ConfigurationError):
    """A proxied address set is missing one of beacon/proxy/implementation"""

    def __init__(self, name: str, field_name: str):
        self.name = name
        self.field_name = field_name
        super().__init__(f"Proxied contract {name!r} has no {field_name} address")


class InvalidAddressError(ConfigurationError):
    """Value is not a 20-byte hex address"""
    pass


class UnknownDomainError(ConfigurationError):
    """Domain is not part of the application"""

    def __init__(self, domain: int):
        self.domain = domain
        super().__init__(f"No provider registered for domain: {domain}")


class MissingOwnerError(ConfigurationError):
    """No expected owner declared for a domain"""

    def __init__(self, domain: int):
        self.domain = domain
        super().__init__(f"No expected owner declared for domain: {domain}")


# =========================================================================
# Chain errors
# =========================================================================

class RpcError(CheckerError):
    """JSON-RPC request failed or returned an error object"""

    def __init__(self, message: str, code: int = None, domain: int = None):
        self.code = code
        self.domain = domain
        super().__init__(message)


class StorageDecodeError(CheckerError):
    """Storage word does not have the 32-byte layout"""
    pass


# =========================================================================
# Check outcome errors
# =========================================================================

class OwnershipMismatchError(CheckerError):
    """On-chain owner differs from the declared owner"""

    def __init__(self, domain: int, contract: str, expected: str, actual: str):
        self.domain = domain
        self.contract = contract
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Owner mismatch on domain {domain} for {contract}: "
            f"expected {expected}, actual {actual}"
        )


class DomainCheckError(CheckerError):
    """One or more per-domain checks failed"""

    def __init__(self, failures: Dict[int, BaseException]):
        self.failures = failures
        summary = ", ".join(
            f"{domain}: {type(exc).__name__}: {exc}"
            for domain, exc in sorted(failures.items())
        )
        super().__init__(f"Check failed for {len(failures)} domain(s) - {summary}")


class UnhandledViolationError(CheckerError):
    """Violation kind has no handler in a dispatcher"""
    pass
