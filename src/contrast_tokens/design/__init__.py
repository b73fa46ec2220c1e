"""Design token compiler package.

Color science, compliance engines, the input compiler, rule generation,
registry building, resolution and the transport / CSS emitters.
"""

from .color_space import (  # noqa: F401
    color_value_to_hex,
    hex_to_oklch,
    normalize_hex,
    relative_luminance,
)
from .color_vision_simulation import oklab_delta_e, simulate_hex, transform_palette  # noqa: F401
from .compliance import (  # noqa: F401
    ComplianceContext,
    ComplianceEngine,
    ComplianceEvaluation,
    apca,
    available_engines,
    get_engine,
    register_engine,
    wcag21,
)
from .models import (  # noqa: F401
    DesignContext,
    ProcessedSpec,
    ResolvedVariant,
    TokenCompileError,
    TokenRegistry,
    VariantKey,
)
from .schema import TokenValidationError, validate_schema  # noqa: F401
from .tone import apply_tone_mode, available_tones  # noqa: F401
from .processor import compile_spec  # noqa: F401
from .loader import load_spec, compile_file  # noqa: F401
from .rule_generator import (  # noqa: F401
    auto_generate_rules,
    expand_override,
    find_closest_passing_step,
    patch_with_overrides,
)
from .registry import build_registry, validate_registry  # noqa: F401
from .resolver import resolve_all_tokens, resolve_token  # noqa: F401
from .serialize import deserialize_registry, djb2_hash, serialize_registry  # noqa: F401
from .css import generate_css, token_to_css_var  # noqa: F401
