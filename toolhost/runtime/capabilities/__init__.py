from .provider import (
    CapabilityContext,
    CapabilityContribution,
    CapabilityModule,
    FunctionCapabilityModule,
)

__all__ = ["CapabilityContext", "CapabilityContribution", "CapabilityModule", "FunctionCapabilityModule"]
