"""
Loading demonstration scripts.

Two formats are supported:

YAML (.yaml, .yml), validated against demoreel.schema.Script:

    name: intro
    options: [advanced-mode, fullscreen, {option: text-scale, value: 2}]
    texts:
      h: "echo hello\\n"
    steps:
      - action: title.show
        args: {path: slides/title.txt}
      - action: shell.start
        args: {name: demo, split: true}
      - type: "ls -la\\n"
      - keys: "C-l"

Python (.py), executed with runpy; the module must define ``steps`` (a
StepList) and may define ``texts`` (a dict of single keys to strings).
"""

import runpy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from pydantic import TypeAdapter, ValidationError

from demoreel.errors import DemoError, ScriptLoadError
from demoreel.schema import Script, ScriptOption, ScriptStep, check_text_keys
from demoreel.steps import (
    ConfigOptionStep,
    ExpressionStep,
    KeySequenceStep,
    Step,
    StepList,
    option,
)

YAML_SUFFIXES = {".yaml", ".yml"}

# Predefined texts of Python scripts
TEXTS_ADAPTER = TypeAdapter(dict[str, str])


@dataclass
class LoadedScript:
    """
    A script ready to be played.

    Attributes:
        steps: The step list, with its start options
        texts: Predefined texts typed by key
        name: Optional name of the demonstration
        description: Optional description
    """

    steps: StepList
    texts: dict[str, str] = field(default_factory=dict)
    name: str | None = None
    description: str | None = None


def load_script(path: Path | str) -> LoadedScript:
    """
    Load a YAML or Python demonstration script.

    Raises:
        ScriptLoadError: If the file cannot be read, parsed or validated
        UnknownOptionError: If the script uses an unrecognized keyword
    """
    path = Path(path)
    if path.suffix in YAML_SUFFIXES:
        try:
            with path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ScriptLoadError(path=str(path), underlying_error=str(e)) from e
        return load_script_data(data, source=str(path))
    if path.suffix == ".py":
        return _load_python_script(path)
    raise ScriptLoadError(path=str(path), underlying_error=f"unsupported file type {path.suffix!r}")


def load_script_from_string(content: str) -> LoadedScript:
    """Load a YAML script from a string."""
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ScriptLoadError(path="<string>", underlying_error=str(e)) from e
    return load_script_data(data, source="<string>")


def load_script_data(data: Any, source: str = "<data>") -> LoadedScript:
    """Validate parsed YAML data and build its StepList."""
    try:
        script = Script.model_validate(data)
    except ValidationError as e:
        raise ScriptLoadError(path=source, underlying_error=str(e)) from e

    try:
        options = tuple(_build_option(opt) for opt in script.options)
        steps = tuple(_build_step(step) for step in script.steps)
    except ValueError as e:
        raise ScriptLoadError(path=source, underlying_error=str(e)) from e
    return LoadedScript(
        steps=StepList(steps=steps, options=options),
        texts=dict(script.texts),
        name=script.name,
        description=script.description,
    )


def _keyword(name: str) -> str:
    return name if name.startswith(":") else f":{name}"


def _build_option(opt: str | ScriptOption) -> ConfigOptionStep:
    if isinstance(opt, ScriptOption):
        return option(_keyword(opt.option), opt.value)
    return option(_keyword(opt))


def _build_step(step: ScriptStep) -> Step:
    description = step.name or ""
    if step.action is not None:
        return ExpressionStep(action=step.action, kwargs=dict(step.args), description=description)
    if step.keys is not None:
        return KeySequenceStep(keys=step.keys, pane=step.pane, description=description)
    if step.type is not None:
        return ExpressionStep(
            action="text.type",
            kwargs={"text": step.type, "pane": step.pane},
            description=description or f"type {step.type!r}",
        )
    return option(_keyword(step.option or ""), step.value)


def _load_python_script(path: Path) -> LoadedScript:
    try:
        namespace = runpy.run_path(str(path))
    except DemoError:
        raise
    except OSError as e:
        raise ScriptLoadError(path=str(path), underlying_error=str(e)) from e
    except Exception as e:
        raise ScriptLoadError(path=str(path), underlying_error=f"{type(e).__name__}: {e}") from e

    steps = namespace.get("steps")
    if not isinstance(steps, StepList):
        raise ScriptLoadError(
            path=str(path),
            underlying_error="the script must define 'steps' with build_step_list()",
        )
    try:
        texts = check_text_keys(TEXTS_ADAPTER.validate_python(namespace.get("texts", {})))
    except ValueError as e:
        raise ScriptLoadError(path=str(path), underlying_error=str(e)) from e
    return LoadedScript(
        steps=steps,
        texts=texts,
        name=namespace.get("name"),
        description=namespace.get("__doc__"),
    )
