from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI, HTTPException

from . import __version__
from .config import AppConfig
from .core import LiterateConverter, UnsupportedExtension
from .schemas import ConvertRequest, ConvertResponse, HealthStatus, LanguageInfo
from .settings import load_effective_config
from .utils import extension_of, markdown_path


def create_app(config_path: Path | None = None, *, require_enabled: bool = True) -> FastAPI:
    config = load_effective_config(config_path)
    if require_enabled and not config.runtime.enable_local_api:
        raise RuntimeError("Local API is disabled. Enable it via config.runtime.enable_local_api")
    converter = LiterateConverter(config)
    app = FastAPI(title="Literate Markdown Converter", version=__version__)
    app.state.config = config
    app.state.converter = converter

    @app.get("/health", summary="Health check")
    def health() -> HealthStatus:
        return HealthStatus(status="ok", version=__version__)

    @app.get("/languages", summary="List configured languages")
    def languages() -> list[LanguageInfo]:
        return [
            LanguageInfo(
                extension=extension,
                open=language.open,
                close=language.close,
                lang=language.fence_tag(extension),
            )
            for extension, language in sorted(config.languages.items())
        ]

    @app.post("/convert", summary="Convert one literate source text")
    def convert(request: ConvertRequest) -> ConvertResponse:
        source = Path(request.filename)
        extension = extension_of(source)
        try:
            markdown = converter.convert_text(request.text, extension)
        except UnsupportedExtension as exc:
            raise HTTPException(status_code=415, detail="UNSUPPORTED_EXTENSION") from exc
        language = config.languages[extension]
        return ConvertResponse(
            filename=markdown_path(source).name,
            lang=language.fence_tag(extension),
            markdown=markdown,
        )

    return app


def serve() -> None:
    import uvicorn

    app = create_app()
    config: AppConfig = app.state.config
    uvicorn.run(app, host=config.api.host, port=config.api.port)


__all__ = ["create_app", "serve"]
