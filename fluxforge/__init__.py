from .models import (
    AppConfig, Theme, JobKind, PageMode, FileItem, PdfInfo, VideoInfo,
    GifEstimate, ToolOptions, JobDescriptor, ConvertResult,
)
from .errors import (
    FluxForgeError, ValidationError, ValidationCode, NoInputError,
    EmptyPageSelectionError, InvalidOptionError, PageRangeError,
    ProbeError, PersistError, ConversionError, JobInFlightError,
)
from .config import ConfigStore, JsonConfigFile, SaveFailurePolicy
from .file_queue import FileQueue
from .tools import ToolKind, ToolProfile, TOOL_PROFILES, profile_for
from .backend import ConverterBackend, CommandBackend
from .results import aggregate
from .runner import run_job

__all__ = [
    "AppConfig", "Theme", "JobKind", "PageMode", "FileItem", "PdfInfo", "VideoInfo",
    "GifEstimate", "ToolOptions", "JobDescriptor", "ConvertResult",
    "FluxForgeError", "ValidationError", "ValidationCode", "NoInputError",
    "EmptyPageSelectionError", "InvalidOptionError", "PageRangeError",
    "ProbeError", "PersistError", "ConversionError", "JobInFlightError",
    "ConfigStore", "JsonConfigFile", "SaveFailurePolicy",
    "FileQueue",
    "ToolKind", "ToolProfile", "TOOL_PROFILES", "profile_for",
    "ConverterBackend", "CommandBackend",
    "aggregate",
    "run_job",
]
