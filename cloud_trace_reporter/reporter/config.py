"""
Reporter - Configuration

Configuration immuable du reporter, validée par pydantic.

Options:
    project_id (obligatoire), service_name, attribute_name_mappings,
    use_opentelemetry_mapping, status_converter, span_kind_converter,
    stack_trace_converter, max_in_flight_batches, max_queued_spans,
    retry_max_attempts, retry_backoff_policy, attempt_timeout,
    shutdown_timeout, log_level
"""

from typing import Any, Dict, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    ValidationError,
    field_validator,
    model_validator,
)

from ..conversion import (
    AttributeMapper,
    DefaultSpanKindConverter,
    DefaultStackTraceConverter,
    DefaultStatusConverter,
    ISpanKindConverter,
    IStackTraceConverter,
    IStatusConverter,
    as_span_kind_converter,
    as_stack_trace_converter,
    as_status_converter,
    opentelemetry_semantic_mapping,
)
from ..export import RetryPolicy
from ..logging import LogLevel, parse_log_level


# ══════════════════════════════════════════════════════════════════════════════
# EXCEPTIONS
# ══════════════════════════════════════════════════════════════════════════════


class ReporterError(Exception):
    """Erreur de base du reporter."""

    pass


class ConfigurationError(ReporterError):
    """Configuration invalide ou incomplète."""

    def __init__(self, message: str, options: Optional[List[str]] = None) -> None:
        self.options = list(options or [])
        super().__init__(message)

    @property
    def option(self) -> Optional[str]:
        """Première option en cause."""
        return self.options[0] if self.options else None

    @classmethod
    def from_validation_error(cls, error: ValidationError) -> "ConfigurationError":
        """Traduit une erreur pydantic en ConfigurationError."""
        options: List[str] = []
        details: List[str] = []
        for item in error.errors():
            option = ".".join(str(part) for part in item.get("loc", ())) or "<config>"
            options.append(option)
            details.append(f"{option}: {item.get('msg', 'invalid value')}")
        return cls("Invalid reporter configuration: " + "; ".join(details), options)


# ══════════════════════════════════════════════════════════════════════════════
# MODELS
# ══════════════════════════════════════════════════════════════════════════════


class BackoffPolicy(BaseModel):
    """
    Backoff exponentiel entre tentatives.

    delay = min(initial_delay * multiplier ** attempt, max_delay)
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    initial_delay: float = Field(default=0.2, ge=0)
    max_delay: float = Field(default=30.0, ge=0)
    multiplier: float = Field(default=2.0, ge=1)

    @model_validator(mode="after")
    def check_bounds(self) -> "BackoffPolicy":
        if self.max_delay < self.initial_delay:
            raise ValueError("max_delay must be >= initial_delay")
        return self


class ReporterConfig(BaseModel):
    """
    Configuration du reporter, immuable une fois construite.

    Les converters acceptent une implémentation de l'interface ou un simple
    callable; None sélectionne le converter par défaut.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    project_id: str
    service_name: Optional[str] = None
    attribute_name_mappings: Dict[str, str] = Field(default_factory=dict)
    use_opentelemetry_mapping: bool = False

    status_converter: IStatusConverter = Field(default_factory=DefaultStatusConverter)
    span_kind_converter: ISpanKindConverter = Field(default_factory=DefaultSpanKindConverter)
    stack_trace_converter: IStackTraceConverter = Field(
        default_factory=DefaultStackTraceConverter
    )

    max_in_flight_batches: int = Field(default=4, ge=1)
    max_queued_spans: int = Field(default=2048, ge=1)
    retry_max_attempts: int = Field(default=3, ge=1)
    retry_backoff_policy: BackoffPolicy = Field(default_factory=BackoffPolicy)
    attempt_timeout: Optional[float] = Field(default=30.0, gt=0)
    shutdown_timeout: float = Field(default=10.0, ge=0)

    log_level: LogLevel = LogLevel.INFO

    _attribute_mapper: AttributeMapper = PrivateAttr()

    @field_validator("project_id")
    @classmethod
    def check_project_id(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("project_id must not be empty")
        return value

    @field_validator("service_name")
    @classmethod
    def normalize_service_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None

    @field_validator("status_converter", mode="before")
    @classmethod
    def wrap_status_converter(cls, value: Any) -> IStatusConverter:
        try:
            return as_status_converter(value)
        except TypeError as e:
            raise ValueError(str(e)) from e

    @field_validator("span_kind_converter", mode="before")
    @classmethod
    def wrap_span_kind_converter(cls, value: Any) -> ISpanKindConverter:
        try:
            return as_span_kind_converter(value)
        except TypeError as e:
            raise ValueError(str(e)) from e

    @field_validator("stack_trace_converter", mode="before")
    @classmethod
    def wrap_stack_trace_converter(cls, value: Any) -> IStackTraceConverter:
        try:
            return as_stack_trace_converter(value)
        except TypeError as e:
            raise ValueError(str(e)) from e

    @field_validator("retry_backoff_policy", mode="before")
    @classmethod
    def default_backoff(cls, value: Any) -> Any:
        return BackoffPolicy() if value is None else value

    @field_validator("log_level", mode="before")
    @classmethod
    def resolve_log_level(cls, value: Any) -> LogLevel:
        if isinstance(value, LogLevel):
            return value
        return parse_log_level(value)

    def model_post_init(self, __context: Any) -> None:
        mappings: Dict[str, str] = {}
        if self.use_opentelemetry_mapping:
            mappings.update(opentelemetry_semantic_mapping())
        # Les mappings explicites priment sur la table OpenTelemetry
        mappings.update(self.attribute_name_mappings)
        self._attribute_mapper = AttributeMapper(mappings)

    @property
    def attribute_mapper(self) -> AttributeMapper:
        return self._attribute_mapper

    @property
    def retry_policy(self) -> RetryPolicy:
        backoff = self.retry_backoff_policy
        return RetryPolicy(
            max_attempts=self.retry_max_attempts,
            initial_delay=backoff.initial_delay,
            max_delay=backoff.max_delay,
            multiplier=backoff.multiplier,
            attempt_timeout=self.attempt_timeout,
        )


def build_config(**options: Any) -> ReporterConfig:
    """
    Valide les options et construit une ReporterConfig immuable.

    Example:
        config = build_config(project_id="my-project", service_name="checkout")

    Raises:
        ConfigurationError: Option manquante, inconnue ou invalide
    """
    try:
        return ReporterConfig(**options)
    except ValidationError as e:
        raise ConfigurationError.from_validation_error(e) from e
