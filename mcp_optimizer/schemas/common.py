"""Common schemas and enums shared across the application."""

from enum import Enum


class FormFactor(str, Enum):
    """Device emulated by the audit engine."""

    MOBILE = "mobile"
    DESKTOP = "desktop"


class ScoreDisplayMode(str, Enum):
    """Lighthouse audit display modes the optimizer cares about."""

    NUMERIC = "numeric"
    BINARY = "binary"
    NOT_APPLICABLE = "notApplicable"
    INFORMATIVE = "informative"
    MANUAL = "manual"
    ERROR = "error"
