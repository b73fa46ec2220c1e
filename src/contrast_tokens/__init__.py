"""contrast_tokens: compile design-token specifications into accessible color registries."""

from .design import (  # noqa: F401
    DesignContext,
    TokenCompileError,
    TokenRegistry,
    TokenValidationError,
    build_registry,
    compile_spec,
    deserialize_registry,
    generate_css,
    resolve_all_tokens,
    resolve_token,
    serialize_registry,
)

__version__ = "0.1.0"
