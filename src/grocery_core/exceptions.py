"""Domain-specific exceptions for grocery_core.

All exceptions inherit from GroceryCoreError so callers can catch any
package error with a single except clause.
"""


class GroceryCoreError(Exception):
    """Base exception for all grocery_core errors."""

    pass


class ConfigError(GroceryCoreError):
    """Raised when there is a configuration error.

    This exception is raised when:
    - Invalid paths or option values are provided
    - A required configuration value is missing
    """

    pass


class DataQualityError(GroceryCoreError):
    """Raised when the sales dataset cannot be used as a record store.

    This exception is raised when:
    - Required columns are missing from the input data
    - The source file format is not supported
    """

    pass


class ETLError(GroceryCoreError):
    """Raised when a pipeline stage (clean or mart build) fails."""

    pass
