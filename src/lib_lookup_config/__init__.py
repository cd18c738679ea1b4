"""Public package surface for ``lib_lookup_config``.

Declare lookup keys on dataclass fields with :func:`tag`, build a sequence of
sources (command line, environment, files, defaults), and call :func:`lookup`
to populate a record in one pass.

>>> from dataclasses import dataclass
>>> @dataclass
... class Settings:
...     port: UInt16 = tag(lookup="PORT", default=0)
>>> settings = Settings()
>>> lookup(settings, ArgsSource("-", ["-PORT=9000"]), MapSource(PORT="8080"))
>>> settings.port
9000
"""

from __future__ import annotations

from .adapters.args.default import ArgsSource
from .adapters.dotenv.default import DotEnvSource
from .adapters.env.default import ENV, EnvSource, default_env_prefix
from .adapters.file_loaders.source import FileSource
from .adapters.http.default import FormSource, JSONRequestSource
from .adapters.mapping.default import CallableSource, MapSource, PairSource
from .application.coerce import coerce
from .application.ports import Reporter, Source
from .application.resolve import lookup_key
from .core import lookup
from .domain.errors import (
    ConfigError,
    InvalidFormat,
    InvalidRecordArgument,
    MissingRequiredField,
    NotFound,
    ResolutionError,
    SourceError,
    SourceLookupFailed,
    TypeCoercionFailed,
)
from .domain.fields import FieldSpec, describe_record, extract_tag, tag
from .domain.kinds import (
    Float32,
    Float64,
    Int8,
    Int16,
    Int32,
    Int64,
    Scanner,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
)
from .observability import bind_trace_id, get_logger
from .reporters import (
    DISCARD,
    FanOutReporter,
    FmtReporter,
    LoggingReporter,
    MapReporter,
    RedactingReporter,
    render_value,
)

__all__ = [
    "ArgsSource",
    "CallableSource",
    "ConfigError",
    "DISCARD",
    "DotEnvSource",
    "ENV",
    "EnvSource",
    "FanOutReporter",
    "FieldSpec",
    "FileSource",
    "Float32",
    "Float64",
    "FmtReporter",
    "FormSource",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "InvalidFormat",
    "InvalidRecordArgument",
    "JSONRequestSource",
    "LoggingReporter",
    "MapReporter",
    "MapSource",
    "MissingRequiredField",
    "NotFound",
    "PairSource",
    "RedactingReporter",
    "Reporter",
    "ResolutionError",
    "Scanner",
    "Source",
    "SourceError",
    "SourceLookupFailed",
    "TypeCoercionFailed",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
    "bind_trace_id",
    "coerce",
    "default_env_prefix",
    "describe_record",
    "extract_tag",
    "get_logger",
    "lookup",
    "lookup_key",
    "render_value",
    "tag",
]
