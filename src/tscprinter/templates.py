"""
Label Templates.

A label template is TSPL text with {{name}} placeholders, for example:

    SIZE 58 mm,40 mm
    CLS
    TEXT 20,20,"3",0,1,1,"{{title}}"
    BARCODE 20,80,"128",60,1,0,2,2,{{code}}
    PRINT 1,1

Rendering is literal string substitution. There is no escaping; a
placeholder whose name is not in the substitutions is left as is.
"""

import re
from pathlib import Path
from typing import Mapping, Union

PLACEHOLDER_PATTERN = re.compile(r"\{\{([^{}]+)\}\}")

DEFAULT_SUFFIX = ".tspl"

# A template name -> raw template text mapping
TemplateSet = dict[str, str]


def placeholder(key: str) -> str:
    """Return the placeholder token for key."""
    return "{{" + key + "}}"


def render(template: str, substitutions: Mapping[str, str]) -> str:
    """
    Substitute {{key}} placeholders.

    Each key is replaced until no occurrence of its token remains.

    Args:
        template: Template text
        substitutions: Placeholder name -> replacement text

    Returns:
        The rendered label text

    Raises:
        ValueError: If a value contains its own placeholder, which would
            never stop expanding
    """
    label = template
    for key, value in substitutions.items():
        token = placeholder(key)
        value = str(value)
        if token in label and token in value:
            raise ValueError(f"Value for {token} contains {token}")
        while token in label:
            label = label.replace(token, value)
    return label


def find_placeholders(template: str) -> list[str]:
    """Return placeholder names in order of first appearance."""
    names: list[str] = []
    for match in PLACEHOLDER_PATTERN.finditer(template):
        name = match.group(1)
        if name not in names:
            names.append(name)
    return names


def load_templates(
    directory: Union[str, Path], suffix: str = DEFAULT_SUFFIX
) -> TemplateSet:
    """
    Load every template file in a directory.

    Args:
        directory: Directory holding the template files
        suffix: File suffix to pick up (default ".tspl")

    Returns:
        Template name (file name without suffix) -> template text.
        Empty if the directory does not exist.
    """
    templates: TemplateSet = {}
    path = Path(directory)
    if not path.is_dir():
        return templates

    for file in sorted(path.glob(f"*{suffix}")):
        if file.is_file():
            name = file.name[: len(file.name) - len(suffix)]
            templates[name] = file.read_text(encoding="utf-8")
    return templates
