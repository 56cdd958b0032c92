"""
Process-level wiring for captionkit.

The runtime builds every shared dependency once (database handle,
caption store, transcription backend and worker pool) and hands them to the
services explicitly.

Responsibilities:
- Open resources at startup, close them at shutdown
- Build the transcription backend lazily so offline commands never need
  cloud credentials

Does NOT:
- Implement any caption logic (services/)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from captionkit.config.settings import Settings
from captionkit.domain.contracts import Renderer, TranscriptionBackend
from captionkit.domain.workspace import Workspace
from captionkit.services.export import ExportService, FfmpegRenderer
from captionkit.services.ingest import IngestService
from captionkit.services.styles import parse_strategy
from captionkit.services.transcription import (
    TranscriptionRunner,
    TranscriptionService,
    create_transcription_backend,
    install_google_credentials,
)
from captionkit.storage.database import Database
from captionkit.storage.store import CaptionStore
from captionkit.utils.logging import get_logger

log = get_logger(__name__)

BackendFactory = Callable[[Settings], TranscriptionBackend]


@dataclass
class Runtime:
    settings: Settings
    workspace: Workspace
    database: Database
    store: CaptionStore
    backend_factory: BackendFactory = create_transcription_backend
    renderer: Renderer | None = None
    _backend: TranscriptionBackend | None = field(default=None, init=False, repr=False)
    _runner: TranscriptionRunner | None = field(default=None, init=False, repr=False)

    @classmethod
    def open(
        cls,
        settings: Settings,
        *,
        backend_factory: BackendFactory = create_transcription_backend,
        renderer: Renderer | None = None,
    ) -> "Runtime":
        workspace = Workspace.create(settings.workdir)
        url = settings.database_url or f"sqlite:///{workspace.database_file}"
        database = Database(url).open()
        log.debug("Runtime opened (workdir=%s)", workspace.root)
        return cls(
            settings=settings,
            workspace=workspace,
            database=database,
            store=CaptionStore(database),
            backend_factory=backend_factory,
            renderer=renderer,
        )

    def close(self) -> None:
        if self._runner is not None:
            self._runner.shutdown(wait=True)
            self._runner = None
        self.database.close()
        log.debug("Runtime closed")

    def __enter__(self) -> "Runtime":
        return self

    def __exit__(self, *_exc) -> None:  # noqa: ANN002
        self.close()

    # ------------------------------------------------------------------
    # Services
    # ------------------------------------------------------------------
    @property
    def backend(self) -> TranscriptionBackend:
        if self._backend is None:
            install_google_credentials(self.settings, self.workspace)
            self._backend = self.backend_factory(self.settings)
        return self._backend

    def transcription(self) -> TranscriptionService:
        return TranscriptionService(
            store=self.store,
            backend=self.backend,
            language_code=self.settings.language_code,
        )

    @property
    def runner(self) -> TranscriptionRunner:
        if self._runner is None:
            self._runner = TranscriptionRunner(
                service=self.transcription(),
                max_workers=self.settings.max_workers,
            )
        return self._runner

    def ingest(self) -> IngestService:
        return IngestService(
            store=self.store,
            workspace=self.workspace,
            max_upload_bytes=self.settings.max_upload_bytes,
            allowed_mime_types=tuple(self.settings.allowed_mime_types),
        )

    def exporter(self) -> ExportService:
        renderer = self.renderer or FfmpegRenderer(
            video_codec=self.settings.video_codec,
            preset=self.settings.preset,
            crf=self.settings.crf,
        )
        return ExportService(
            store=self.store,
            workspace=self.workspace,
            renderer=renderer,
            strategy=parse_strategy(self.settings.burn_strategy),
        )
