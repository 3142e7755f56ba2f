# -*- coding: utf-8 -*-

"""
Filename: errors.py
Author: storro
Date: 2026-02-11
Description: Exception types raised by the ocean pipeline
"""


class OceanError(Exception):
    """Base class for every error raised by oceanfft."""


class OceanConfigError(OceanError, ValueError):
    """Invalid simulation parameters, detected before any GPU allocation."""


class BackendCapabilityError(OceanError, RuntimeError):
    """The compute backend cannot provide something a stage needs."""

    def __init__(self, message: str, stage: str | None = None, resource: str | None = None) -> None:
        self.stage = stage
        self.resource = resource
        self.reason = message

        context = []
        if stage is not None:
            context.append(f"stage={stage}")
        if resource is not None:
            context.append(f"resource={resource}")
        if context:
            message = f"{message} ({', '.join(context)})"
        super().__init__(message)

    def with_stage(self, stage: str) -> "BackendCapabilityError":
        if self.stage is not None:
            return self
        return BackendCapabilityError(self.reason, stage=stage, resource=self.resource)


class PipelineStateError(OceanError, RuntimeError):
    """An operation was attempted in the wrong pipeline state."""
