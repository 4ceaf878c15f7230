"""Core video service — page → catalog → selection → merged file.

This is the central service class consumed by the CLI layer.  Every
collaborator (transport, document parser, script parser, orchestrator,
quality chooser) is injected at construction time, keeping the core
free of any external-system imports.

Metadata lookup order
---------------------
1. ``window.__playinfo__`` emitted as the sole content of a script
   block (prefix scan).
2. ``window.__INITIAL_STATE__`` assigned among other statements (parsed
   script); its ``bvid``/``cid`` are then used to query the play-url API.
"""

from __future__ import annotations

import logging
from pathlib import Path

from bvgrab.core.catalog_decoder import decode_catalog, decode_initial_state
from bvgrab.core.fetch_orchestrator import FetchOrchestrator
from bvgrab.core.models import AppConfig, QualityCatalog, ResolvedSelection
from bvgrab.core.page_extractor import ExtractionMode, PageMetadataExtractor, extract_title
from bvgrab.core.protocols import (
    DocumentParser,
    PageDocument,
    QualityChooser,
    ScriptParser,
    Transport,
)
from bvgrab.core.stream_resolver import available_tiers, index_of_quality, resolve
from bvgrab.exceptions import (
    BvgrabError,
    DecodeError,
    FetchError,
    InvalidVideoIdError,
    MetadataNotFoundError,
    ResourceNotFoundError,
)

logger = logging.getLogger(__name__)

PAGE_URL_TEMPLATE = "https://www.bilibili.com/video/{video_id}/"
PLAYURL_API_TEMPLATE = (
    "https://api.bilibili.com/x/player/wbi/playurl?bvid={bvid}&cid={cid}&fnval=4048"
)


class VideoService:
    """Resolve and download one video id at a time.

    Parameters
    ----------
    config:
        Explicit runtime configuration.
    transport:
        Any object satisfying the :class:`Transport` protocol.
    document_parser:
        Callable turning page markup into a :class:`PageDocument`.
    script_parser:
        Parser used for the ``__INITIAL_STATE__`` fallback.
    orchestrator:
        Performs the concurrent download and merge.
    quality_chooser:
        Interactive hook used when ``config.select_quality`` is set.
    """

    def __init__(
        self,
        config: AppConfig,
        transport: Transport,
        document_parser: DocumentParser,
        script_parser: ScriptParser,
        orchestrator: FetchOrchestrator,
        quality_chooser: QualityChooser | None = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._document_parser = document_parser
        self._orchestrator = orchestrator
        self._quality_chooser = quality_chooser
        self._playinfo = PageMetadataExtractor(ExtractionMode.PREFIX, "__playinfo__")
        self._initial_state = PageMetadataExtractor(
            ExtractionMode.AST,
            "__INITIAL_STATE__",
            script_parser=script_parser,
        )

    # ------------------------------------------------------------------
    # Video id handling
    # ------------------------------------------------------------------

    @staticmethod
    def page_url(video_id: str) -> str:
        """Return the watch-page URL for *video_id* (or *video_id* itself
        when it already is an http(s) URL).
        """
        stripped = video_id.strip()
        if not stripped:
            raise InvalidVideoIdError("Video id must not be empty.")
        if stripped.startswith(("http://", "https://")):
            return stripped
        if "/" in stripped:
            raise InvalidVideoIdError(
                f"Invalid video id: {stripped}",
                hint="Pass a BV id such as BV1xx411c7mD or a full video URL.",
            )
        return PAGE_URL_TEMPLATE.format(video_id=stripped)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def fetch_catalog(self, video_id: str) -> tuple[str, QualityCatalog]:
        """Fetch the watch page and return its sanitized title and catalog.

        Raises
        ------
        InvalidVideoIdError
            If *video_id* is empty or malformed.
        FetchError
            If the page or the play-url API cannot be fetched.
        TitleExtractionError
            If the page does not have exactly one ``<h1>``.
        MetadataNotFoundError
            If neither metadata source is present in the page.
        DecodeError
            If the page or the metadata JSON cannot be decoded.
        """
        url = self.page_url(video_id)
        body = await self._fetch(url)
        try:
            markup = body.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(f"Page '{url}' is not valid UTF-8: {exc}") from exc

        document = self._document_parser(markup)
        title = extract_title(document, source=url)
        logger.info("title found as '%s'", title)
        catalog = await self._extract_catalog(document, url)
        return title, catalog

    async def choose_quality(self, title: str, catalog: QualityCatalog) -> int | None:
        """Return the accept-list index to download, ``None`` for best."""
        if self._config.quality_id is not None:
            return index_of_quality(catalog, self._config.quality_id)

        if self._config.select_quality and self._quality_chooser is not None:
            tiers = available_tiers(catalog)
            if not tiers:
                raise ResourceNotFoundError(
                    f"'{title}' offers no downloadable quality tier.",
                )
            return await self._quality_chooser(title, tiers)

        return None

    async def resolve(self, video_id: str) -> ResolvedSelection:
        """Fetch metadata for *video_id* and pick the streams to download."""
        title, catalog = await self.fetch_catalog(video_id)
        quality_index = await self.choose_quality(title, catalog)
        selection = resolve(catalog, title, quality_index)
        logger.info("use quality: %s", selection.quality_label)
        logger.debug(
            "video url for '%s' is '%s'",
            selection.quality_label,
            selection.video_url,
        )
        logger.debug("audio url is '%s'", selection.audio_url)
        return selection

    async def download(self, video_id: str) -> Path:
        """Run the whole pipeline for *video_id* and return the output path."""
        selection = await self.resolve(video_id)
        return await self._orchestrator.run(selection)

    # ------------------------------------------------------------------
    # Metadata sources
    # ------------------------------------------------------------------

    async def _extract_catalog(self, document: PageDocument, url: str) -> QualityCatalog:
        try:
            raw_playinfo = self._playinfo.extract(document)
        except MetadataNotFoundError:
            logger.debug("no __playinfo__ in '%s', trying __INITIAL_STATE__", url)
        else:
            return decode_catalog(raw_playinfo)

        try:
            raw_state = self._initial_state.extract(document)
        except MetadataNotFoundError:
            raise MetadataNotFoundError(
                f"Can't find video metadata in '{url}'.",
                hint="Neither window.__playinfo__ nor window.__INITIAL_STATE__ is present.",
            ) from None

        state = decode_initial_state(raw_state)
        logger.debug("initial state: bvid=%s cid=%d", state.bvid, state.cid)
        api_url = PLAYURL_API_TEMPLATE.format(bvid=state.bvid, cid=state.cid)
        return decode_catalog(await self._fetch(api_url))

    # ------------------------------------------------------------------
    # Transport delegation (safe boundary)
    # ------------------------------------------------------------------

    async def _fetch(self, url: str) -> bytes:
        """Call the transport and ensure only our exceptions escape."""
        try:
            return await self._transport.fetch_body(url)
        except BvgrabError:
            # Already typed; propagate unchanged.
            raise
        except Exception as exc:
            raise FetchError(f"Unexpected transport error: {exc}") from exc
