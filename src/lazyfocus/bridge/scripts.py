# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Script store and template renderer.

Bundled scripts live next to this module as ``scripts/<name>.js`` with an
optional ``scripts/<name>.meta.yaml`` describing their placeholders.
Templates are loaded once and never mutated; every render produces a new
string.

Placeholders are written ``{{Name}}``. Substitution is plain, non-evaluating
string replacement of values that already passed validation.
"""

import functools
import logging
import re
from dataclasses import dataclass, field
from importlib import resources
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

import yaml

from lazyfocus.bridge.errors import (
    ParameterValidationError,
    TemplateMalformedError,
    TemplateNotFoundError,
)
from lazyfocus.bridge.validation import ParamPolicy, policy_for, validate_param

logger = logging.getLogger(__name__)


SCRIPT_EXTENSION = ".js"
META_SUFFIX = ".meta.yaml"

PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([A-Za-z_][A-Za-z0-9_]*)\s*\}\}")
PARAM_NAME_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
OPEN_MARKER = re.compile(r"\{\{")


@dataclass(frozen=True)
class ParamSpec:
    """Declared placeholder: validation policy and whether it must be given."""

    name: str
    policy: ParamPolicy
    required: bool = True


@dataclass(frozen=True)
class ScriptTemplate:
    """An immutable named script with ``{{Name}}`` placeholders."""

    name: str
    text: str
    description: str = ""
    params: Mapping[str, ParamSpec] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    @property
    def placeholders(self) -> Tuple[str, ...]:
        """Placeholder names in order of first appearance."""
        seen: Dict[str, None] = {}
        for match in PLACEHOLDER_PATTERN.finditer(self.text):
            seen.setdefault(match.group(1), None)
        return tuple(seen)

    def param_spec(self, name: str) -> ParamSpec:
        """Declared spec for a placeholder, or the inferred default."""
        spec = self.params.get(name)
        if spec is None:
            spec = ParamSpec(name=name, policy=policy_for(name))
        return spec


def _check_syntax(template: ScriptTemplate) -> None:
    """Every ``{{`` in the text must open a well-formed placeholder."""
    for marker in OPEN_MARKER.finditer(template.text):
        if not PLACEHOLDER_PATTERN.match(template.text, marker.start()):
            snippet = template.text[marker.start():marker.start() + 20]
            raise TemplateMalformedError(
                template.name, f"bad placeholder syntax near {snippet!r}"
            )


def render_template(template: ScriptTemplate, params: Optional[Mapping[str, str]] = None) -> str:
    """Merge a parameter set into a template.

    With no parameters the template text is returned unchanged. Otherwise
    every parameter is validated before any substitution happens, so a
    single bad value aborts the whole render.

    Args:
        template: Template to render.
        params: Placeholder name -> value.

    Returns:
        Final script text.

    Raises:
        ParameterValidationError: If any parameter name or value is invalid.
        TemplateMalformedError: If the template has bad placeholder syntax
            or a required placeholder is left unresolved.
    """
    if not params:
        return template.text

    for key, value in params.items():
        if not isinstance(key, str) or not PARAM_NAME_PATTERN.fullmatch(key):
            raise ParameterValidationError(str(key), "invalid parameter name")
        validate_param(key, value, template.param_spec(key).policy)

    _check_syntax(template)

    placeholders = template.placeholders
    for key in params:
        if key not in placeholders:
            logger.debug(f"Ignoring parameter {key} not used by script {template.name}")

    def _substitute(match: "re.Match[str]") -> str:
        key = match.group(1)
        if key in params:
            return params[key]
        if not template.param_spec(key).required:
            return ""
        raise TemplateMalformedError(
            template.name, f"unresolved placeholder {{{{{key}}}}}"
        )

    return PLACEHOLDER_PATTERN.sub(_substitute, template.text)


def _parse_metadata(name: str, text: str, meta_text: str) -> Tuple[str, Dict[str, ParamSpec]]:
    """Parse a ``<name>.meta.yaml`` document.

    Returns:
        Tuple of (description, params).

    Raises:
        TemplateMalformedError: If the metadata is invalid or declares a
            parameter the script text does not use.
    """
    try:
        data = yaml.safe_load(meta_text)
    except yaml.YAMLError as e:
        raise TemplateMalformedError(name, f"invalid YAML metadata: {e}")

    if data is None:
        return "", {}
    if not isinstance(data, dict):
        raise TemplateMalformedError(name, "metadata must contain a YAML mapping")

    if data.get("name", name) != name:
        raise TemplateMalformedError(
            name, f"metadata name '{data.get('name')}' does not match filename '{name}'"
        )

    params_raw = data.get("params") or {}
    if not isinstance(params_raw, dict):
        raise TemplateMalformedError(name, "params must be a mapping")

    placeholders = {m.group(1) for m in PLACEHOLDER_PATTERN.finditer(text)}
    params: Dict[str, ParamSpec] = {}
    for param_name, spec in params_raw.items():
        spec = spec or {}
        if not isinstance(spec, dict):
            raise TemplateMalformedError(name, f"param {param_name} must be a mapping")
        if param_name not in placeholders:
            raise TemplateMalformedError(
                name, f"param {param_name} is declared but never used"
            )

        policy_raw = spec.get("policy")
        try:
            policy = ParamPolicy(policy_raw) if policy_raw else policy_for(param_name)
        except ValueError:
            raise TemplateMalformedError(
                name, f"unknown policy for {param_name}: {policy_raw}"
            )

        required = spec.get("required", True)
        if not isinstance(required, bool):
            raise TemplateMalformedError(name, f"required must be true/false for {param_name}")

        params[param_name] = ParamSpec(name=param_name, policy=policy, required=required)

    return str(data.get("description", "")), params


class ScriptStore:
    """Read-only collection of script templates keyed by name."""

    def __init__(self, templates: Mapping[str, ScriptTemplate]):
        self._templates = MappingProxyType(dict(templates))

    @classmethod
    def from_directory(cls, directory) -> "ScriptStore":
        """Load every ``*.js`` script (and its metadata) from a directory.

        Accepts a ``pathlib.Path`` or an ``importlib.resources`` traversable.
        """
        entries = {entry.name: entry for entry in directory.iterdir() if entry.is_file()}
        templates = {}

        for filename in sorted(entries):
            if not filename.endswith(SCRIPT_EXTENSION):
                continue
            name = filename[: -len(SCRIPT_EXTENSION)]
            text = entries[filename].read_text(encoding="utf-8")

            description, params = "", {}
            meta = entries.get(name + META_SUFFIX)
            if meta is not None:
                description, params = _parse_metadata(
                    name, text, meta.read_text(encoding="utf-8")
                )

            templates[name] = ScriptTemplate(
                name=name, text=text, description=description, params=params
            )

        logger.debug(f"Loaded {len(templates)} scripts from {directory}")
        return cls(templates)

    @classmethod
    def from_package(cls) -> "ScriptStore":
        """Load the scripts bundled with this package."""
        return cls.from_directory(resources.files("lazyfocus.bridge") / "scripts")

    def __contains__(self, name: object) -> bool:
        return name in self._templates

    def __len__(self) -> int:
        return len(self._templates)

    def get(self, name: str) -> ScriptTemplate:
        """Look up a template by name.

        Raises:
            TemplateNotFoundError: If no script has that name.
        """
        try:
            return self._templates[name]
        except KeyError:
            raise TemplateNotFoundError(name) from None

    def names(self) -> List[str]:
        """All script names, sorted."""
        return sorted(self._templates)

    def render(self, name: str, params: Optional[Mapping[str, str]] = None) -> str:
        """Look up a template and render it with ``params``."""
        return render_template(self.get(name), params)


@functools.lru_cache(maxsize=None)
def default_store() -> ScriptStore:
    """The bundled script store, loaded on first use."""
    return ScriptStore.from_package()


def get_script(name: str) -> str:
    """Raw text of a bundled script."""
    return default_store().get(name).text


def list_scripts() -> List[str]:
    """Names of all bundled scripts."""
    return default_store().names()


def render_script(name: str, params: Optional[Mapping[str, str]] = None) -> str:
    """Render a bundled script with ``params``."""
    return default_store().render(name, params)
