"""Error-message templates with {placeholder} substitution."""

from typing import Any, Mapping


def format_message(template: str, **values: Any) -> str:
    """
    Substitute {name} tokens in template with the given values.

    Tokens with no matching value are left as-is, so literal braces in a
    rule author's message survive.

    Example:
        format_message("Min length is {minLength}", minLength=3) -> "Min length is 3"
    """
    message = template
    for name, value in values.items():
        message = message.replace("{" + name + "}", str(value))
    return message


def rule_message(
    rules: Mapping[str, Any],
    field: str,
    key: str,
    default: str,
    **values: Any,
) -> str:
    """
    Resolve the message for one failed check.

    Uses rules[key] (e.g. "errorMessageMinLength") when present, otherwise
    the default template. Both go through the same substitution, with the
    field name available as {field}.
    """
    template = rules.get(key)
    if template is None:
        template = default
    return format_message(str(template), field=field, **values)
