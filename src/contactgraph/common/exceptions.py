"""
Custom exception hierarchy for the contactgraph library.

This module defines the exceptions raised while loading contact traces,
validating parameters, and building synthetic graphs from Edge-Markovian
models.

The hierarchy:
- NetworkAnalysisError: root of every library error
- ValidationError: bad input data (DataFormatError for malformed traces,
  InvalidDistributionError for unusable delay histograms)
- GraphConstructionError: a ContactGraph whose invariants do not hold
- ConfigurationError: invalid model or workflow parameters
- ComputationError: failures while producing outputs (e.g. export)
"""

from typing import Dict, Any, Optional, List, Union


class NetworkAnalysisError(Exception):
    """
    Base exception for all contactgraph errors.

    All other custom exceptions inherit from this class, allowing users to
    catch every library-specific error with a single except clause.

    Parameters
    ----------
    message : str
        Human-readable error message describing what went wrong
    details : Dict[str, Any], optional
        Additional structured information about the error for debugging
        or programmatic handling
    cause : Exception, optional
        The underlying exception that caused this error (for exception chaining)
    context : Dict[str, Any], optional
        Additional context about the operation that failed

    Examples
    --------
    >>> raise NetworkAnalysisError("Trace analysis failed")
    >>> raise NetworkAnalysisError(
    ...     "Invalid trace size",
    ...     details={"nodes": 0, "contacts": 10}
    ... )
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        self.message = message
        self.details = details or {}
        self.cause = cause
        self.context = context or {}

        full_message = message

        if self.details:
            detail_parts = []
            for key, value in self.details.items():
                if isinstance(value, (list, dict, tuple)) and len(str(value)) > 100:
                    # Truncate long collections
                    detail_parts.append(f"{key}=<{type(value).__name__} with {len(value)} items>")
                else:
                    detail_parts.append(f"{key}={value}")

            if detail_parts:
                full_message += f" (Details: {', '.join(detail_parts)})"

        if self.context:
            context_parts = [f"{k}={v}" for k, v in self.context.items()]
            if context_parts:
                full_message += f" (Context: {', '.join(context_parts)})"

        super().__init__(full_message)

        if cause is not None:
            self.__cause__ = cause


class ValidationError(NetworkAnalysisError):
    """
    Exception raised for input validation errors.

    Raised when input data does not meet the requirements for processing,
    for example a series that is too short for the requested duration.

    Parameters
    ----------
    message : str
        Descriptive error message explaining the validation failure
    field : str, optional
        Name of the field that failed validation
    value : Any, optional
        The invalid value that caused the error
    expected : str, optional
        Description of what was expected
    details : Dict[str, Any], optional
        Additional details about the validation failure

    Examples
    --------
    >>> raise ValidationError("Contact ends before it starts", field="end")
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        expected: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        **kwargs
    ) -> None:
        self.field = field
        self.value = value
        self.expected = expected

        enhanced_details = details or {}
        if field is not None:
            enhanced_details["field"] = field
        if value is not None:
            enhanced_details["invalid_value"] = value
        if expected is not None:
            enhanced_details["expected"] = expected

        if field:
            enhanced_message = f"Validation error in field '{field}': {message}"
        else:
            enhanced_message = f"Validation error: {message}"

        super().__init__(enhanced_message, details=enhanced_details, **kwargs)


class GraphConstructionError(NetworkAnalysisError):
    """
    Exception raised when a ContactGraph cannot be assembled.

    Covers contact lists that break the graph invariants: pairs that are
    not in canonical order, contacts ending before they start, or contacts
    not sorted by start time.

    Parameters
    ----------
    message : str
        Description of the graph construction error
    node_count : int, optional
        Number of nodes in the graph when error occurred
    contact_count : int, optional
        Number of contacts processed when error occurred
    operation : str, optional
        Specific operation that failed (e.g., "check_order")

    Examples
    --------
    >>> raise GraphConstructionError(
    ...     "Contacts are not sorted by start time",
    ...     operation="check_order",
    ...     contact_count=1500
    ... )
    """

    def __init__(
        self,
        message: str,
        node_count: Optional[int] = None,
        contact_count: Optional[int] = None,
        operation: Optional[str] = None,
        **kwargs
    ) -> None:
        self.node_count = node_count
        self.contact_count = contact_count
        self.operation = operation

        context = {}
        if node_count is not None:
            context["node_count"] = node_count
        if contact_count is not None:
            context["contact_count"] = contact_count
        if operation:
            context["operation"] = operation

        super().__init__(message, context=context, **kwargs)


class ConfigurationError(NetworkAnalysisError):
    """
    Exception raised for invalid configuration or parameter values.

    Handles invalid model parameters (negative duration, probability
    sequences too short for the simulated horizon) and unsupported options
    such as unknown export formats.

    Parameters
    ----------
    message : str
        Description of the configuration error
    parameter : str, optional
        Name of the problematic parameter
    value : Any, optional
        The invalid parameter value
    valid_options : List[Any], optional
        List of valid options for the parameter
    function : str, optional
        Name of the function where the error occurred

    Examples
    --------
    >>> raise ConfigurationError(
    ...     "Invalid export format",
    ...     parameter="format",
    ...     value="gexf",
    ...     valid_options=["start_end", "create_delete"]
    ... )
    """

    def __init__(
        self,
        message: str,
        parameter: Optional[str] = None,
        value: Optional[Any] = None,
        valid_options: Optional[List[Any]] = None,
        function: Optional[str] = None,
        **kwargs
    ) -> None:
        self.parameter = parameter
        self.value = value
        self.valid_options = valid_options
        self.function = function

        details = kwargs.get('details', {})
        if parameter:
            details["parameter"] = parameter
        if value is not None:
            details["invalid_value"] = value
        if valid_options:
            details["valid_options"] = valid_options
        if function:
            details["function"] = function

        enhanced_message = message
        if parameter and valid_options:
            enhanced_message += f". Valid options for '{parameter}': {valid_options}"

        kwargs["details"] = details
        super().__init__(enhanced_message, **kwargs)


class ComputationError(NetworkAnalysisError):
    """
    Exception raised when producing an output fails.

    Used to wrap low-level failures (e.g. while writing an export file)
    with the operation that triggered them.

    Parameters
    ----------
    message : str
        Description of the computational error
    operation : str, optional
        The operation that failed
    error_type : str, optional
        Type of error (e.g., "export_failure")
    resource_info : Dict[str, Any], optional
        Information about the resources involved when the error occurred
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        error_type: Optional[str] = None,
        resource_info: Optional[Dict[str, Any]] = None,
        **kwargs
    ) -> None:
        self.operation = operation
        self.error_type = error_type
        self.resource_info = resource_info or {}

        context = kwargs.get('context', {})
        if operation:
            context["operation"] = operation
        if error_type:
            context["error_type"] = error_type

        details = kwargs.get('details', {})
        details.update(self.resource_info)

        kwargs["details"] = details
        kwargs["context"] = context

        super().__init__(message, **kwargs)


class DataFormatError(ValidationError):
    """
    Exception raised for malformed contact traces.

    This is the parse error of the trace loader: wrong field count,
    non-integer tokens, self-loops or an empty trace.

    Parameters
    ----------
    message : str
        Description of the format error
    format_type : str, optional
        Expected format (e.g., "start_end")
    file_path : str, optional
        Path to the problematic file
    line_number : int, optional
        Line number where error occurred (1-based)

    Examples
    --------
    >>> raise DataFormatError(
    ...     "Expected 4 fields, got 3",
    ...     format_type="start_end",
    ...     line_number=12
    ... )
    """

    def __init__(
        self,
        message: str,
        format_type: Optional[str] = None,
        file_path: Optional[str] = None,
        line_number: Optional[int] = None,
        **kwargs
    ) -> None:
        self.line_number = line_number
        self.file_path = file_path
        details = kwargs.get('details', {})

        if format_type:
            details["format_type"] = format_type
        if file_path:
            details["file_path"] = file_path
        if line_number is not None:
            details["line_number"] = line_number

        kwargs["details"] = details
        super().__init__(message, **kwargs)


class InvalidDistributionError(ValidationError):
    """
    Exception raised when a histogram cannot be used as a distribution.

    A delay histogram must contain at least one positive, finite weight
    and no negative weights, otherwise no value could ever be drawn.

    Parameters
    ----------
    message : str
        Description of the problem
    total_weight : float, optional
        Sum of the histogram weights
    bucket_count : int, optional
        Number of buckets in the histogram
    """

    def __init__(
        self,
        message: str,
        total_weight: Optional[float] = None,
        bucket_count: Optional[int] = None,
        **kwargs
    ) -> None:
        self.total_weight = total_weight
        self.bucket_count = bucket_count
        details = kwargs.get('details', {})

        if total_weight is not None:
            details["total_weight"] = total_weight
        if bucket_count is not None:
            details["bucket_count"] = bucket_count

        kwargs["details"] = details
        super().__init__(message, field="histogram", **kwargs)


# Convenience functions for common error patterns

def validate_parameter(
    value: Any,
    valid_options: List[Any],
    parameter_name: str,
    function_name: Optional[str] = None
) -> None:
    """
    Validate that a parameter value is in the list of valid options.

    Parameters
    ----------
    value : Any
        The parameter value to validate
    valid_options : List[Any]
        List of valid options
    parameter_name : str
        Name of the parameter
    function_name : str, optional
        Name of the function being called

    Raises
    ------
    ConfigurationError
        If value is not in valid_options
    """
    if value not in valid_options:
        raise ConfigurationError(
            f"Invalid value for parameter '{parameter_name}': {value}",
            parameter=parameter_name,
            value=value,
            valid_options=valid_options,
            function=function_name
        )


def require_positive(
    value: Union[int, float],
    parameter_name: str,
    allow_zero: bool = False
) -> None:
    """
    Validate that a numeric parameter is positive.

    Parameters
    ----------
    value : Union[int, float]
        The numeric value to validate
    parameter_name : str
        Name of the parameter
    allow_zero : bool, default False
        Whether to allow zero values

    Raises
    ------
    ConfigurationError
        If value is not positive (or non-negative if allow_zero=True)
    """
    if allow_zero and value < 0:
        raise ConfigurationError(
            f"Parameter '{parameter_name}' must be non-negative, got {value}",
            parameter=parameter_name,
            value=value
        )
    elif not allow_zero and value <= 0:
        raise ConfigurationError(
            f"Parameter '{parameter_name}' must be positive, got {value}",
            parameter=parameter_name,
            value=value
        )
