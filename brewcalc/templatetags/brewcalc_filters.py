from django import template

from brewcalc.formulas import ebc_to_display_color
from brewcalc.normalizer import format_field, parse_optional

register = template.Library()


@register.filter
def brew_value(value, field):
    """
    Format a draft value for its field, with comma as decimal separator.

        {{ draft.original_gravity_plato|brew_value:"original_gravity_plato" }}  → 12,5
    """
    number = parse_optional(value)
    if number is None:
        return ""
    return format_field(field, number).replace(".", ",")


@register.filter
def ebc_color(value):
    """EBC value as "#rrggbb" for a color swatch."""
    return ebc_to_display_color(parse_optional(value))
