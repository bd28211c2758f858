class LinkyError(Exception):
    """Base exception for all application-specific errors."""

    error_code = 'app:linky_error'


class ValidationError(LinkyError):
    """Raised when link creation input is missing or invalid."""

    error_code = 'app:validation_error'


class ConfigurationError(LinkyError):
    """Base exception for all configuration errors."""

    error_code = 'config:configuration_error'


class MissingEnvironmentVariableError(ConfigurationError):
    """Raised when a required environment variable is missing."""

    error_code = 'config:missing_environment_variable_error'


class BadConfigurationError(ConfigurationError):
    """Raised when the application is configured with invalid parameters."""

    error_code = 'config:bad_configuration_error'


class InfrastructureError(LinkyError):
    """Base exception for all infrastructure (AWS) errors."""

    error_code = 'infra:infrastructure_error'


class MalformedResponseError(InfrastructureError):
    """Raised when an AWS service responds with a malformed payload."""

    error_code = 'infra:malformed_response_error'


class AppConfigError(InfrastructureError):
    """Raised when AppConfig responds with erroneous data."""

    error_code = 'infra:appconfig_error'


class PrivilegeRequiredError(LinkyError):
    """Raised when an operation needs the operator's super secret."""

    error_code = 'auth:privilege_required_error'
