"""Parameter specifications and the sources a value can come from."""

import os
from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional, Sequence, Tuple, Union


Validator = Callable[[str], bool]
Normalizer = Callable[[str], str]


@dataclass(frozen=True)
class FlagSource:
    """Value passed explicitly on the command line."""
    value: Optional[str]
    flag: str = ""

    interactive = False

    def candidate(self, resolved: Mapping[str, Optional[str]]) -> Optional[str]:
        return self.value

    def describe(self) -> str:
        return f"flag {self.flag}" if self.flag else "flag"


@dataclass(frozen=True)
class EnvSource:
    """Value read from an environment variable."""
    variable: str
    environ: Optional[Mapping[str, str]] = None

    interactive = False

    def candidate(self, resolved: Mapping[str, Optional[str]]) -> Optional[str]:
        environ = os.environ if self.environ is None else self.environ
        return environ.get(self.variable)

    def describe(self) -> str:
        return f"environment variable {self.variable}"


@dataclass(frozen=True)
class DerivedSource:
    """Value computed from parameters resolved earlier in the same run."""
    depends_on: Tuple[str, ...]
    derive: Callable[..., Optional[str]]

    interactive = False

    def candidate(self, resolved: Mapping[str, Optional[str]]) -> Optional[str]:
        values = [resolved.get(name) for name in self.depends_on]
        if any(not value for value in values):
            return None
        return self.derive(*values)

    def describe(self) -> str:
        return f"derived from {', '.join(self.depends_on)}"


@dataclass(frozen=True)
class RecordedSource:
    """Value recovered from live state, such as a running container's environment."""
    value: Optional[str]
    origin: str = "recorded state"

    interactive = False

    def candidate(self, resolved: Mapping[str, Optional[str]]) -> Optional[str]:
        return self.value

    def describe(self) -> str:
        return self.origin


@dataclass(frozen=True)
class PromptSource:
    """Ask the operator over the interactive channel."""
    message: str

    interactive = True

    def candidate(self, resolved: Mapping[str, Optional[str]]) -> Optional[str]:
        return None

    def describe(self) -> str:
        return "interactive prompt"


Source = Union[FlagSource, EnvSource, DerivedSource, RecordedSource, PromptSource]


@dataclass
class ParameterSpec:
    """One resolvable input.

    Sources are tried in order. A source yielding an empty or invalid value
    falls through to the next one; the prompt is only used when no
    non-interactive source produced a valid value.
    """
    name: str
    sources: Sequence[Source]
    validator: Validator
    normalizer: Optional[Normalizer] = None
    required: bool = True
    hint: str = ""
    override: str = ""
    depends_on: Tuple[str, ...] = field(init=False, default=())

    def __post_init__(self):
        names = []
        for source in self.sources:
            if isinstance(source, DerivedSource):
                names.extend(n for n in source.depends_on if n not in names)
        self.depends_on = tuple(names)

    @property
    def prompt(self) -> Optional[PromptSource]:
        """First interactive source, if any."""
        for source in self.sources:
            if source.interactive:
                return source
        return None
