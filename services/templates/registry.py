"""
Template variant registry.

Every variant is offered for every post type; the heading label is the only
post-type specific text. Lookups by id raise UnknownTemplate.
"""
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from constants import DEFAULT_CANVAS_WIDTH, DEFAULT_SIGNATURE_BRAND
from models import PostType, PropertyRecord, UserPreferences, CanvasStyle
from services.templates import RenderContext, TemplateVariant
from services.templates.classic import ClassicTemplate
from services.templates.modern import ModernTemplate
from services.templates.bold import BoldTemplate
from services.templates.elegant import ElegantTemplate
from services.templates.detailed import DetailedTemplate

logger = logging.getLogger(__name__)


class UnknownTemplate(ValueError):
    def __init__(self, template_id, post_type=None):
        self.template_id = template_id
        self.post_type = post_type
        where = f" for {PostType.parse(post_type).value}" if post_type else ""
        super().__init__(f"Unknown template '{template_id}'{where}")


@dataclass(frozen=True)
class VariantDescriptor:
    id: str
    label: str

    def to_dict(self) -> dict:
        return {"id": self.id, "label": self.label}


_VARIANTS: Dict[str, TemplateVariant] = {}


def register(variant: TemplateVariant) -> TemplateVariant:
    _VARIANTS[variant.id] = variant
    return variant


for _variant in (ClassicTemplate(), ModernTemplate(), BoldTemplate(), ElegantTemplate(), DetailedTemplate()):
    register(_variant)


def list_variants(post_type) -> List[VariantDescriptor]:
    """Picker entries for a post type, in display order."""
    PostType.parse(post_type)
    return [VariantDescriptor(v.id, v.label) for v in _VARIANTS.values()]


def is_known(template_id: str, post_type) -> bool:
    return any(d.id == template_id for d in list_variants(post_type))


def default_template_id(post_type) -> str:
    return list_variants(post_type)[0].id


def get_variant(template_id: str, post_type=None) -> TemplateVariant:
    if post_type is not None and not is_known(template_id, post_type):
        raise UnknownTemplate(template_id, post_type)
    variant = _VARIANTS.get(template_id)
    if variant is None:
        raise UnknownTemplate(template_id, post_type)
    return variant


def render(
    variant_id: str,
    property: PropertyRecord,
    prefs: UserPreferences,
    style: CanvasStyle,
    post_type,
    width: Optional[float] = None,
    assets=None,
    signature_brand: str = DEFAULT_SIGNATURE_BRAND,
) -> list:
    """
    Compose the layer list for one post. Pure: same inputs, same layers.

    Args:
        variant_id: Registered template id
        property / prefs / style: Immutable input records
        post_type: PostType or its name
        width: Canvas width in px (height is 1.25x); defaults to DEFAULT_CANVAS_WIDTH
        assets: Optional {url: ImageAsset} manifest; images missing from it are dropped

    Raises:
        UnknownTemplate: If variant_id is not registered for the post type
    """
    post_type = PostType.parse(post_type)
    variant = get_variant(variant_id, post_type)
    ctx = RenderContext(
        property=property,
        prefs=prefs or UserPreferences(),
        style=style or CanvasStyle(),
        post_type=post_type,
        width=float(width or DEFAULT_CANVAS_WIDTH),
        assets=assets,
        signature_brand=signature_brand,
    )
    layers = variant.render(ctx)
    logger.debug(f"Rendered {variant_id} for {post_type.value}: {len(layers)} layers")
    return layers
