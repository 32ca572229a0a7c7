"""
Function Values

Providers hand out functions; they never call them. The only things this
package needs from a function are its name and a way to re-label it, so
NamedFunction holds just that:

    NamedFunction(Name("abs"), abs)

Selector parameters (e.g. the "V" in f3("V")) are bound as leading
positional arguments, much like functools.partial.
"""

from dataclasses import dataclass, replace
from typing import Any, Callable, Sequence, Tuple

from funcprov.model import Name


@dataclass(frozen=True)
class NamedFunction:
    """
    A callable paired with the name it was resolved under.

    Properties:
        name: The name callers asked for
        implementation: The underlying callable
        parameters: Values bound ahead of call arguments

    Immutable; with_name() and with_parameters() return copies.
    """

    name: Name
    implementation: Callable[..., Any]
    parameters: Tuple[Any, ...] = ()

    def __post_init__(self):
        if not isinstance(self.name, Name):
            raise TypeError(f"Function name must be Name, got {type(self.name).__name__}")
        if not callable(self.implementation):
            raise TypeError(f"Function {self.name} implementation is not callable")
        object.__setattr__(self, "parameters", tuple(self.parameters))

    def with_name(self, name: Name) -> "NamedFunction":
        if name.value == self.name.value and name.case_sensitivity is self.name.case_sensitivity:
            return self
        return replace(self, name=name)

    def with_parameters(self, parameters: Sequence[Any]) -> "NamedFunction":
        parameters = tuple(parameters)
        if parameters == self.parameters:
            return self
        return replace(self, parameters=parameters)

    def __call__(self, *args, **kwargs):
        return self.implementation(*self.parameters, *args, **kwargs)

    def __str__(self) -> str:
        if not self.parameters:
            return self.name.value
        shown = ", ".join(repr(p) if isinstance(p, str) else str(p) for p in self.parameters)
        return f"{self.name}({shown})"


def relabel(function: Any, name: Name) -> Any:
    """Return function re-labelled with name, wrapping plain callables."""
    with_name = getattr(function, "with_name", None)
    if with_name is not None:
        return with_name(name)
    return NamedFunction(name, function)


__all__ = ["NamedFunction", "relabel"]
