"""
Provisioning Errors
Every failed check aborts the run by raising one of these
"""


class ProvisionError(Exception):
    """Base class for all provisioning failures"""


class ConfigurationError(ProvisionError):
    """Missing or invalid environment / network configuration"""


class ValidationError(ProvisionError):
    """Invalid command line arguments"""


class SafetyCheckError(ProvisionError):
    """A pre-submission safety check failed and the operator did not override it"""


class SubmissionError(ProvisionError):
    """Proposing or verifying a Safe transaction failed"""
