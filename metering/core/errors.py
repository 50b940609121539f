"""
Metering error types

Denials are ordinary return values (AdmissionDecision), never exceptions.
The types here cover infrastructure failures and bad caller input.
"""


class MeteringError(Exception):
    """Base class for metering errors"""


class LedgerUnavailableError(MeteringError):
    """The usage ledger store could not be read or written. Retryable."""

    def __init__(self, message: str = "Usage ledger unavailable"):
        super().__init__(message)
        self.retryable = True


class UnknownBundleError(MeteringError, LookupError):
    """No prepaid bundle with the requested id"""

    def __init__(self, bundle_id: str):
        super().__init__(f"Unknown prepaid bundle: {bundle_id}")
        self.bundle_id = bundle_id


class InvalidPricingScheduleError(MeteringError, ValueError):
    """Pricing bands are unsorted, overlapping, gapped or bounded at the top"""
