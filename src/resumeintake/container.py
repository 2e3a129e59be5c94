"""Dependency injection container for the intake pipeline."""

from __future__ import annotations

from dependency_injector import containers, providers

from .core import (
    ContentValidator,
    DocxReaderConfig,
    DocxTextReader,
    ExtractionVerifier,
    FormatSniffer,
    ValidatorConfig,
    VerifierConfig,
)
from .pipeline import IntakePipeline
from .remote import HTTPPdfExtractorClient, HTTPStructuredExtractor


class IntakeContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition."""

    config = providers.Configuration()

    sniffer = providers.Singleton(FormatSniffer)
    docx_reader = providers.Singleton(DocxTextReader)
    content_validator = providers.Singleton(ContentValidator)
    verifier = providers.Singleton(ExtractionVerifier)

    pdf_client = providers.Singleton(
        HTTPPdfExtractorClient,
        endpoint=config.remote.pdf_endpoint,
        api_key=config.remote.api_key,
        timeout=config.remote.timeout,
    )

    structured_extractor = providers.Singleton(
        HTTPStructuredExtractor,
        endpoint=config.remote.extraction_endpoint,
        api_key=config.remote.api_key,
        timeout=config.remote.timeout,
    )

    pipeline = providers.Factory(
        IntakePipeline,
        sniffer=sniffer,
        docx_reader=docx_reader,
        validator=content_validator,
        verifier=verifier,
        pdf_client=pdf_client,
    )


def create_container(*, settings: dict | None = None) -> IntakeContainer:
    """Instantiate container with optional overrides."""

    container = IntakeContainer()

    if not settings:
        return container

    remote_settings = settings.get("remote", {}) if isinstance(settings, dict) else {}
    if remote_settings:
        container.config.from_dict({"remote": remote_settings})

    if "verifier" in settings:
        verifier_config = VerifierConfig(**settings["verifier"])
        container.verifier.override(
            providers.Singleton(ExtractionVerifier, config=verifier_config)
        )

    if "validation" in settings:
        validator_config = ValidatorConfig(**settings["validation"])
        container.content_validator.override(
            providers.Singleton(ContentValidator, config=validator_config)
        )

    docx_values = dict(settings.get("docx", {}))
    if "marker_window" in settings.get("validation", {}):
        docx_values.setdefault("marker_window", settings["validation"]["marker_window"])
    if docx_values:
        docx_config = DocxReaderConfig(**docx_values)
        container.docx_reader.override(providers.Singleton(DocxTextReader, config=docx_config))

    return container
