"""Domain errors and failure typing."""


class PipelineError(Exception):
    """Base class for engine failures."""

    error_code = "PIPELINE_ERROR"


class ConfigError(PipelineError):
    """Raised for invalid or missing configuration, including the query catalog."""

    error_code = "CONFIG_ERROR"


class InputError(PipelineError):
    """Raised for an out-of-range location or radius."""

    error_code = "INPUT_ERROR"


class StageError(PipelineError):
    """Raised for stage failures that should halt the run."""

    error_code = "STAGE_ERROR"
