"""Exception hierarchy for fatal conversion failures

Warnings never raise; they travel as ``ConversionWarning`` records on the
result objects. Anything in this module aborts the current file.
"""


class RefDbcError(Exception):
    """Base exception for all refdbc errors"""


class ContainerError(RefDbcError):
    """The reference container could not be read (truncated or malformed framing)"""


class ConfigError(RefDbcError, ValueError):
    """Invalid converter configuration (unknown key, wrong type)"""


class DBCReadBackError(RefDbcError):
    """Generated DBC text was rejected when read back with cantools"""
