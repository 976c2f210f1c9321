"""
Infrastructure layer - external system integrations.
Keeps business logic clean from implementation details.
"""

from .integrations import Integrations, build_integrations
from .image_host import ImageKitClient, ImageHostError, ImageHostNotConfiguredError
from .mailer import ResendMailer, Attachment, EmailDeliveryError, EmailNotConfiguredError
from .slug_ai import GeminiSlugClient, SlugGenerationError

__all__ = [
    'Integrations', 'build_integrations',
    'ImageKitClient', 'ImageHostError', 'ImageHostNotConfiguredError',
    'ResendMailer', 'Attachment', 'EmailDeliveryError', 'EmailNotConfiguredError',
    'GeminiSlugClient', 'SlugGenerationError',
]
