# Copyright (C) 2025 Richard Owen
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""Keep the numpydoc docstrings in ``discline`` in step with the code.

The API reference in ``docs/`` is generated from these docstrings, so every
module needs one, every parameter a callable accepts must appear under
``Parameters``, and anything annotated to return a value needs a ``Returns``
section.
"""

from __future__ import annotations

import enum
import importlib
import inspect
import pkgutil
from types import ModuleType
from typing import Callable, Iterator, List, Set

import pytest
from numpydoc.docscrape import NumpyDocString

import discline

# Names that read as "returns nothing" when annotations are kept as strings.
_NONE_ANNOTATIONS = {"None", "NoneType", "typing.NoReturn"}


def _discline_modules() -> List[ModuleType]:
    """Import ``discline`` and every module below it."""
    modules = [discline]
    for info in pkgutil.walk_packages(discline.__path__, prefix="discline."):
        modules.append(importlib.import_module(info.name))
    return modules


def _own_members(owner: object, module_name: str) -> Iterator[Callable[..., object]]:
    """Yield functions and classes defined on ``owner`` by ``module_name``."""
    for name, member in vars(owner).items():
        if name.startswith("__"):
            continue
        if isinstance(member, (staticmethod, classmethod)):
            member = member.__func__
        if inspect.isfunction(member) or inspect.isclass(member):
            if member.__module__ == module_name:
                yield member


def _documented_callables(modules: List[ModuleType]) -> List[Callable[..., object]]:
    """Every function, class, and method ``discline`` defines, in import order."""
    found: List[Callable[..., object]] = []
    seen: Set[int] = set()
    for module in modules:
        for member in _own_members(module, module.__name__):
            candidates = [member]
            if inspect.isclass(member):
                candidates.extend(_own_members(member, module.__name__))
            for candidate in candidates:
                if id(candidate) not in seen:
                    seen.add(id(candidate))
                    found.append(candidate)
    return found


def _label(obj: object) -> str:
    return f"{obj.__module__}.{getattr(obj, '__qualname__', obj)}"


def _parsed(obj: object) -> NumpyDocString:
    return NumpyDocString(inspect.getdoc(obj) or "")


def _signature(obj: Callable[..., object]) -> inspect.Signature:
    if inspect.isclass(obj) and issubclass(obj, enum.Enum):
        pytest.skip("Event types document their members, not a constructor")
    try:
        return inspect.signature(obj)
    except (TypeError, ValueError):
        pytest.skip("No introspectable signature")


def _returns_value(sig: inspect.Signature) -> bool:
    annotation = sig.return_annotation
    if annotation in (inspect.Signature.empty, None, type(None)):
        return False
    return not (isinstance(annotation, str) and annotation.strip() in _NONE_ANNOTATIONS)


_MODULES = _discline_modules()
_CALLABLES = _documented_callables(_MODULES)


@pytest.mark.parametrize("module", _MODULES, ids=lambda module: module.__name__)
def test_modules_have_docstrings(module: ModuleType) -> None:
    """Each module opens with a docstring for the API reference."""
    assert inspect.getdoc(module), f"{module.__name__} has no module docstring"


@pytest.mark.parametrize("obj", _CALLABLES, ids=_label)
def test_parameters_are_documented(obj: Callable[..., object]) -> None:
    """Every named parameter has an entry under ``Parameters``."""
    signature = _signature(obj)
    wanted = [
        param.name
        for param in signature.parameters.values()
        if param.name not in {"self", "cls"}
        and param.kind not in (param.VAR_POSITIONAL, param.VAR_KEYWORD)
    ]
    if not wanted:
        pytest.skip("Takes no parameters")

    documented = {name for name, _, _ in _parsed(obj)["Parameters"]}
    missing = [name for name in wanted if name not in documented]
    assert not missing, f"{_label(obj)} does not document: {', '.join(missing)}"


@pytest.mark.parametrize("obj", _CALLABLES, ids=_label)
def test_returns_are_documented(obj: Callable[..., object]) -> None:
    """Callables annotated to return a value describe it under ``Returns``."""
    if inspect.isclass(obj):
        pytest.skip("Constructors return the instance")
    if not _returns_value(_signature(obj)):
        pytest.skip("Returns nothing")

    assert _parsed(obj)["Returns"], f"{_label(obj)} has no Returns section"
